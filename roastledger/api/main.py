"""
FastAPI application factory.

Run with ``uvicorn roastledger.api.main:app`` or ``python -m roastledger.api.main``.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from roastledger.api.middleware import ErrorHandlerMiddleware, LoggingMiddleware
from roastledger.api.middleware.error_handler import setup_exception_handlers
from roastledger.api.routes import (
    health_router,
    production_router,
    purchasing_router,
    sales_router,
    stock_router,
    valuation_router,
)
from roastledger.application.services import reset_services
from roastledger.config import configure_logging, get_logger, get_settings
from roastledger.core.exceptions import DatabaseError
from roastledger.infrastructure.storage import reset_repositories

logger = get_logger(__name__)


async def _open_sqlite() -> None:
    """Migrate, check the ledger tables, then open the pool."""
    from roastledger.infrastructure.storage.sqlite import get_pool
    from roastledger.infrastructure.storage.sqlite.migrations.migrator import (
        run_migrations,
        verify_schema_integrity,
    )

    failed = [r for r in await run_migrations() if not r.success]
    if failed:
        raise DatabaseError("migrate", f"v{failed[0].version}: {failed[0].error}")

    # Drift or missing triggers are reported, not fatal: the ledger is still readable
    for check in await verify_schema_integrity():
        if check["status"] != "PASS":
            logger.warning("startup_schema_check_failed", **check)

    await get_pool()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    settings = get_settings()
    backend = settings.storage.backend
    logger.info(
        "application_starting",
        host=settings.api.host,
        port=settings.api.port,
        storage_backend=backend,
    )

    if backend == "sqlite":
        await _open_sqlite()
        logger.info("database_ready", db_path=str(settings.storage.db_path))
    else:
        logger.warning("memory_backend_active", detail="ledger is not persisted")

    yield

    logger.info("application_stopping")
    if backend == "sqlite":
        from roastledger.infrastructure.storage.sqlite import close_pool

        await close_pool()
    reset_services()
    reset_repositories()


def create_app() -> FastAPI:
    """Build the application: middleware, error handlers and routers."""
    settings = get_settings()
    configure_logging()

    docs_url = "/docs" if settings.api.debug else None
    app = FastAPI(
        title=settings.app_name,
        description="Coffee traceability ledger: purchasing, roasting, blending, sales and costing",
        version=settings.app_version,
        docs_url=docs_url,
        redoc_url="/redoc" if settings.api.debug else None,
        lifespan=lifespan,
    )

    # Added last runs first: errors are converted inside the request log
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(LoggingMiddleware)
    if settings.api.cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.api.cors_origins,
            allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE"],
            allow_headers=["*"],
            expose_headers=["X-Request-ID", "X-Response-Time"],
        )

    setup_exception_handlers(app)

    for router in (
        health_router,
        stock_router,
        purchasing_router,
        production_router,
        sales_router,
        valuation_router,
    ):
        app.include_router(router)

    @app.get("/")
    async def root() -> dict[str, str | None]:
        return {
            "name": settings.app_name,
            "version": settings.app_version,
            "docs": docs_url,
        }

    # Liveness probe for container orchestrators
    @app.get("/health")
    async def root_health() -> dict[str, str]:
        return {"status": "healthy", "version": settings.app_version}

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "roastledger.api.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.debug,
    )
