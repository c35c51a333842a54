"""Main FastAPI application for the Task Manager API."""
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from taskmanager.config import DEFAULT_JWT_SECRET, Settings
from taskmanager.db.config import create_db_engine
from taskmanager.db.init import init_db
from taskmanager.errors import add_error_handlers
from taskmanager.middleware.cors import add_cors_middleware
from taskmanager.middleware.maintenance import add_maintenance_middleware
from taskmanager.routers import tasks_router, users_router
from taskmanager.services.notification_service import Mailer
from taskmanager.utils.logger import get_logger

logger = get_logger(__name__)

VERSION = "1.0.0"


def create_app(settings: Optional[Settings] = None, mailer: Optional[Mailer] = None) -> FastAPI:
    """
    Compose the application.

    Args:
        settings: Configuration; read from the environment when omitted
        mailer: Mail dispatcher; built from settings when omitted

    Returns:
        A ready FastAPI application with its own database engine
    """
    settings = settings or Settings.from_env()
    if settings.jwt_secret == DEFAULT_JWT_SECRET:
        logger.warning("JWT_SECRET not set, using the development default")

    engine = create_db_engine(settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        init_db(engine)
        logger.info("Application startup complete", environment=settings.environment)
        yield
        engine.dispose()

    app = FastAPI(
        title="Task Manager API",
        description="REST API for user accounts and personal task lists",
        version=VERSION,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.mailer = mailer or Mailer(settings.sendgrid_api_key, settings.mail_from)

    add_error_handlers(app)
    add_cors_middleware(app, settings)
    # Added last so it runs first
    add_maintenance_middleware(app, settings.maintenance_mode)

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "version": VERSION}

    @app.get("/")
    async def root():
        """Root endpoint - API welcome message."""
        return {
            "message": "Task Manager API is running",
            "version": VERSION,
            "docs": "/docs",
            "health": "/health",
        }

    app.include_router(users_router)
    app.include_router(tasks_router)
    return app


if __name__ == "__main__":
    import uvicorn

    settings = Settings.from_env()
    uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)
