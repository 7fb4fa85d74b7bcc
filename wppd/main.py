"""WPPD API - WordPress plugin drift tracker."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from wppd import __version__
from wppd.config import get_settings
from wppd.container import Container, build_container
from wppd.database import init_models
from wppd.errors import RouteError
from wppd.logging_config import configure_logging
from wppd.models.schemas import envelope, validation_message
from wppd.routers import health, index, site

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    container: Container = app.state.container
    logger.info("Starting WPPD API...")

    await init_models(container.engine)
    if container.settings.scheduler_enabled:
        container.scheduler.start()

    yield

    logger.info("Shutting down WPPD API...")
    await container.scheduler.shutdown()
    await container.dispose()


def register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(RouteError)
    async def route_error_handler(request: Request, exc: RouteError):
        logger.warning(f"[{exc.status_code}] {exc.message}")
        return JSONResponse(status_code=exc.status_code, content=envelope(exc.message))

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        message = validation_message(errors[0]) if errors else "Invalid request"
        logger.warning(f"[400] {message}")
        return JSONResponse(status_code=400, content=envelope(message))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        message = exc.detail if isinstance(exc.detail, str) else "Request failed"
        if exc.status_code == 404:
            message = f"Route not found: {request.method} {request.url.path}"
        return JSONResponse(status_code=exc.status_code, content=envelope(message))

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.error(f"[500] {request.method} {request.url.path}: {exc}", exc_info=exc)
        return JSONResponse(status_code=500, content=envelope("Internal server error"))


def create_app(container: Container) -> FastAPI:
    settings = container.settings

    app = FastAPI(
        title="WPPD",
        description="WordPress Plugin Drift tracker",
        version=__version__,
        debug=settings.api_debug,
        lifespan=lifespan,
    )
    app.state.container = container

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Include routers
    app.include_router(index.router, tags=["Index"])
    app.include_router(health.router, tags=["Health"])
    app.include_router(site.router, prefix="/site", tags=["Sites"])

    return app


def build_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings)
    return create_app(build_container(settings))


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "wppd.main:build_app",
        factory=True,
        host=settings.api_host,
        port=settings.api_port,
        log_level=settings.api_log_level,
    )
