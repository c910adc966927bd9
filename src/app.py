"""
Users Backend API Server
CRUD over the users_test table: list, get, create, delete
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional
from fastapi import FastAPI

from config.settings import Settings, load_settings
from database.connection import init_database, close_database
from services.users_service import UsersService
from api.routes import health, users
from utils.error_handling import setup_error_handling

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Open the pool and create the table at startup, close the pool at shutdown"""
    settings = app.state.settings
    db_pool = await init_database(settings.database_url)
    try:
        users_service = UsersService(db_pool)
        await users_service.ensure_schema()
        app.state.users_service = users_service
        yield
    finally:
        await close_database(db_pool)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI application; settings default to the environment"""
    app = FastAPI(
        title="Users Backend",
        description="Minimal CRUD API over user records",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.settings = settings or load_settings()

    # Setup centralized error handling
    setup_error_handling(app)

    # Include API routes
    app.include_router(health.router, prefix="/health", tags=["Health"])
    app.include_router(users.router, prefix="/users", tags=["Users"])

    return app
