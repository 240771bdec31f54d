"""
Request logging middleware.
"""

import time
import uuid
from collections.abc import Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from roastledger.config import get_logger

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

# Polled by orchestrators; only logged at debug level
PROBE_PATHS = frozenset({"/health", "/api/health", "/api/health/db"})


def _request_id(request: Request) -> str:
    incoming = request.headers.get(REQUEST_ID_HEADER, "").strip()
    return incoming[:64] if incoming else uuid.uuid4().hex[:12]


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs each request with its outcome and timing.

    The request id (taken from an incoming X-Request-ID or generated), method
    and path are bound to structlog contextvars, so ledger and valuation
    events logged while serving the request carry them too.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = _request_id(request)
        request.state.request_id = request_id
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )
        probe = request.url.path in PROBE_PATHS
        start = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "request_failed",
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=(time.perf_counter() - start) * 1000,
            )
            raise
        else:
            duration_ms = (time.perf_counter() - start) * 1000
            if probe:
                log = logger.debug
            elif response.status_code >= 500:
                log = logger.error
            elif response.status_code >= 400:
                log = logger.warning
            else:
                log = logger.info
            log(
                "request_completed",
                status=response.status_code,
                duration_ms=duration_ms,
                client=request.client.host if request.client else None,
            )

            response.headers[REQUEST_ID_HEADER] = request_id
            response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
            return response
        finally:
            structlog.contextvars.clear_contextvars()
