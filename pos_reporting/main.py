"""
FastAPI Production Application

Main entry point for the POS Reporting API.
"""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
import structlog

from pos_reporting.config import Settings, get_settings
from pos_reporting.config.logging import configure_logging
from pos_reporting.database.connection import init_database, close_database, get_session_factory
from pos_reporting.reporting import InvalidParameter, QueryFailed, ReportService
from pos_reporting.reporting.normalizers import error_envelope
from pos_reporting.serving.cache import ResultCache
from pos_reporting.serving.api.middleware import RateLimitMiddleware, RequestContextMiddleware
from pos_reporting.serving.api.routes import health_router, reports_router

logger = structlog.get_logger(__name__)


def build_report_service(settings: Settings) -> ReportService:
    """Report service over the initialized pool, with the summary cache if enabled."""
    report_settings = settings.reports
    cache = None
    if report_settings.summary_cache_enabled:
        cache = ResultCache("sales-summary", ttl_seconds=report_settings.summary_cache_ttl_seconds)

    return ReportService(
        get_session_factory(),
        summary_cache=cache,
        query_timeout=report_settings.query_timeout_seconds,
        customers_per_check=report_settings.customers_per_check,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = app.state.settings
    configure_logging(settings=settings)

    logger.info("Starting POS Reporting API", version=settings.version)

    try:
        await init_database()
        app.state.report_service = build_report_service(settings)
        logger.info("Report service ready")
    except Exception as e:
        # Serve health checks anyway; report endpoints answer 500 until restart
        logger.warning("Database init failed", error=str(e))

    yield

    logger.info("Shutting down...")
    await close_database()


async def invalid_parameter_handler(request: Request, exc: InvalidParameter) -> JSONResponse:
    logger.info("Rejected report parameters", path=request.url.path, field=exc.field, reason=exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(exc.message, exc.error_type, field=exc.field),
    )


async def query_failed_handler(request: Request, exc: QueryFailed) -> JSONResponse:
    logger.error(
        "Report request failed",
        path=request.url.path,
        report=exc.report,
        detail=exc.detail,
        timed_out=exc.timed_out,
    )
    extra = {"retryable": True}
    if exc.timed_out:
        extra["timeout"] = True
    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(exc.message, exc.detail, **extra),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", path=request.url.path, error_type=type(exc).__name__)
    return JSONResponse(
        status_code=500,
        content=error_envelope("Internal server error", type(exc).__name__, retryable=True),
    )


def create_app(
    settings: Optional[Settings] = None,
    rate_limit: bool = True,
) -> FastAPI:
    """
    Create and configure the reporting application.

    Args:
        settings: Configuration; defaults to the cached environment settings
        rate_limit: Install the per-client rate limiter

    Returns:
        Configured FastAPI app instance
    """
    settings = settings or get_settings()
    prefix = settings.api_prefix

    app = FastAPI(
        title="POS Reporting API",
        description="Read-only sales reports over point-of-sale data",
        version=settings.version,
        docs_url=None if settings.is_production else "/docs",
        redoc_url=None if settings.is_production else "/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    # CORS Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.security.cors_origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    # Compression
    app.add_middleware(GZipMiddleware, minimum_size=1000)

    # Custom middleware
    app.add_middleware(RequestContextMiddleware)
    if rate_limit:
        app.add_middleware(
            RateLimitMiddleware,
            max_requests=settings.security.rate_limit_requests,
            window_seconds=settings.security.rate_limit_window_seconds,
        )

    app.add_exception_handler(InvalidParameter, invalid_parameter_handler)
    app.add_exception_handler(QueryFailed, query_failed_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # API routes
    app.include_router(health_router, prefix=prefix, tags=["Health"])
    app.include_router(reports_router, prefix=f"{prefix}/reports", tags=["Reports"])

    @app.get(f"{prefix}/info")
    async def api_info():
        """API information endpoint."""
        return {
            "name": "POS Reporting API",
            "service": settings.app_name,
            "version": settings.version,
            "environment": settings.app_env,
            "documentation": None if settings.is_production else "/docs",
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    _settings = get_settings()
    uvicorn.run(app, host=_settings.api_host, port=_settings.api_port)
