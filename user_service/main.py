"""Main FastAPI application."""
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import Depends, FastAPI
from fastapi.exceptions import RequestValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .config import settings
from .core.logging import configure_logging
from .database import close_db, get_db, get_engine, get_session_factory
from .api.middleware import (
    RequestLoggingMiddleware,
    ErrorHandlingMiddleware,
    request_validation_handler,
)
from .api.routes import users
from .schemas.common import HealthResponse
from .services.seed import initialize_database

SERVICE_NAME = "user-service"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup: the schema and seed data must be ready before serving calls
    configure_logging()
    await initialize_database(
        get_engine(),
        get_session_factory(),
        seed=settings.users.seed_on_startup
    )
    yield
    # Shutdown
    await close_db()


def create_app() -> FastAPI:
    """Create and configure FastAPI application."""

    app = FastAPI(
        title=settings.api.title,
        description=settings.api.description,
        version=settings.api.version,
        lifespan=lifespan
    )

    # Add middleware
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_exception_handler(RequestValidationError, request_validation_handler)

    # Include routers
    app.include_router(users.router)

    # Root endpoint
    @app.get("/")
    async def root():
        return {
            "service": settings.api.title,
            "version": settings.api.version,
            "description": settings.api.description,
            "operations": [
                "ListUsers - Lists users with pagination (streaming)",
                "GetUser - Gets a user by ID",
                "CreateUser - Creates a new user",
                "UpdateUser - Updates an existing user",
                "DeleteUser - Deletes a user (logical)",
            ],
            "health_check": "/health",
        }

    # Health check endpoint
    @app.get("/health", response_model=HealthResponse)
    async def health(db: AsyncSession = Depends(get_db)):
        services = {}
        try:
            await db.execute(select(1))
            services["database"] = "healthy"
        except Exception:
            services["database"] = "unhealthy"

        status = "healthy" if services["database"] == "healthy" else "degraded"
        return HealthResponse(
            status=status,
            service=SERVICE_NAME,
            timestamp=datetime.now(timezone.utc),
            services=services,
        )

    return app


# Create app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "user_service.main:app",
        host=settings.api.host,
        port=settings.api.port,
        reload=settings.api.reload,
        workers=settings.api.workers if not settings.api.reload else 1,
    )
