"""
Main FastAPI application entry point
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from budget_app.api.routes import budget, health
from budget_app.api.routes import metrics as metrics_routes
from budget_app.core.config import get_settings
from budget_app.core.database import init_db
from budget_app.core.errors import BudgetServiceError
from budget_app.core.inference_client import close_inference_client
from budget_app.core.logging_config import LoggingConfig
from budget_app.core.middleware import (CORS_HEADERS, CorsHeadersMiddleware,
                                        LoggingContextMiddleware,
                                        MetricsMiddleware)

LoggingConfig.configure()
logger = LoggingConfig.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan events for FastAPI app"""
    settings = get_settings()
    logger.info(
        f"Starting {settings.app_name} in {settings.app_env} mode",
        extra={"store": settings.store_name},
    )
    init_db()

    yield

    logger.info(f"Shutting down {settings.app_name}...")
    await close_inference_client()


async def budget_error_handler(request: Request, exc: BudgetServiceError):
    """Render service errors as `{"error": message}`"""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Unknown paths and unsupported methods are both plain-text 404s"""
    if exc.status_code in (404, 405):
        return PlainTextResponse("Not Found", status_code=404)
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc.detail)})


async def global_exception_handler(request: Request, exc: Exception):
    """Log unhandled errors; the response still carries CORS headers"""
    logger.error(
        "Unhandled exception",
        exc_info=exc,
        extra={
            "error": str(exc),
            "error_type": type(exc).__name__,
            "path": request.url.path,
            "method": request.method,
        }
    )
    return JSONResponse(
        status_code=500,
        content={"error": "Internal Server Error"},
        headers=CORS_HEADERS,
    )


def create_app() -> FastAPI:
    """Build the FastAPI application"""
    settings = get_settings()
    app = FastAPI(
        title=settings.app_name,
        description="Chapter budget tracking and what-if simulation",
        version="0.1.0",
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )

    # Last added runs first: CORS wraps everything, including pre-flight
    app.add_middleware(LoggingContextMiddleware)
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(CorsHeadersMiddleware)

    app.add_exception_handler(BudgetServiceError, budget_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    app.include_router(health.router)
    app.include_router(budget.router)
    if settings.metrics_enabled:
        app.include_router(metrics_routes.router)

    return app


app = create_app()
