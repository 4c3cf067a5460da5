"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.config import validate_security_settings

from .dependencies import get_container
from .errors import register_exception_handlers
from .routes import health
from modules.auth.routes import router as auth_router
from modules.users.routes import router as users_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan handler.

    Refuses to start without token signing secrets, and flushes pending
    activity writes on shutdown.
    """
    container = get_container()
    settings = container.settings
    validate_security_settings(settings)
    logger.info(f"Starting {settings.app_name} on {settings.host}:{settings.port}")
    yield
    await container.shutdown()
    logger.info(f"Shutting down {settings.app_name}")


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application.

    Returns:
        Configured FastAPI instance
    """
    settings = get_container().settings

    app = FastAPI(
        title=settings.app_name,
        description="Role-gated admin dashboard API",
        version=settings.app_version,
        lifespan=lifespan,
        docs_url="/api/docs" if settings.debug else None,
        redoc_url="/api/redoc" if settings.debug else None,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_allow_credentials,
        allow_methods=settings.cors_allow_methods,
        allow_headers=settings.cors_allow_headers,
    )

    register_exception_handlers(app)

    # Register routes
    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(auth_router, prefix="/api/auth", tags=["auth"])
    app.include_router(users_router, prefix="/api/users", tags=["users"])

    return app


# Application instance for uvicorn
app = create_app()
