"""API middleware."""

from roastledger.api.middleware.error_handler import ErrorHandlerMiddleware
from roastledger.api.middleware.logging import LoggingMiddleware

__all__ = ["LoggingMiddleware", "ErrorHandlerMiddleware"]
