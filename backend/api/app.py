"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from shared.config import get_settings
from shared.exceptions import GateKeeperError
from shared.logging_config import configure_logging
from modules.auth.routes import router as auth_router
from modules.cleanup.scheduler import create_cleanup_scheduler
from modules.sessions.middleware import SessionMiddleware
from modules.users.routes import router as users_router

from .dependencies import get_container
from .middleware.auth import identity_from_request
from .routes import health

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Configures logging and runs the cleanup scheduler while the app is up.
    """
    # Startup
    settings = get_settings()
    configure_logging(settings.log_level)
    logger.info(
        "Starting %s on %s:%s (%s, storage=%s)",
        settings.app_name, settings.host, settings.port,
        settings.environment, settings.storage_backend,
    )

    scheduler = None
    if settings.enable_cleanup_jobs:
        container = get_container()
        scheduler = create_cleanup_scheduler(
            container.users, container.sessions, container.otp, settings
        )
        scheduler.start()

    yield

    # Shutdown
    if scheduler is not None:
        scheduler.shutdown(wait=False)
    logger.info("Shutting down %s", settings.app_name)


async def gatekeeper_error_handler(request: Request, exc: GateKeeperError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s on %s: %s", exc.code, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(
        status_code=400,
        content={"success": False, "message": message, "code": "VALIDATION_ERROR"},
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path)
    message = (
        str(exc) if get_settings().debug
        else "An unexpected error occurred. Please try again later."
    )
    return JSONResponse(
        status_code=500,
        content={"success": False, "message": message, "code": "SERVER_ERROR"},
    )


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.app_name,
        description="Authentication, email verification and session service",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
    )

    app.add_exception_handler(GateKeeperError, gatekeeper_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    # Added first so CORS wraps it and session cookies get CORS headers
    app.add_middleware(
        SessionMiddleware,
        store_provider=lambda: get_container().sessions,
        identity_resolver=identity_from_request,
        settings=settings,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
        expose_headers=["X-Session-Id"],
    )

    # Register routes
    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
    app.include_router(users_router, prefix="/api/users", tags=["users"])

    return app


# Application instance for uvicorn
app = create_app()
