"""FastAPI application configuration module."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

# Internal imports
from ..config.environment import IS_PRODUCTION_ENVIRONMENT # Environment must be imported first
from ..config.cors import CORS_CONFIG
from ..config.storage import get_storage_config
from ..utils.logging_config import setup_logging
from ..db import Database, DatabaseConfig, DatabaseError, NotFoundError
from .. import __version__
from .routes import (
    categories,
    events,
    health,
    ratings,
    uploads
)

# Set up logging
setup_logging()
logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    # Startup
    try:
        app.state.db.init_db()
        logger.info("Store initialized successfully")
    except Exception as e:
        logger.error(f"Startup failed: {e}")
        raise
    yield

async def not_found_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": f"{exc.label} not found"})

async def database_error_handler(request: Request, exc: DatabaseError):
    logger.error(f"Store error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": f"Database error: {exc}"})

def create_application(database: Optional[Database] = None, upload_dir: Optional[Path] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        database: Store to serve; defaults to the configured JSON file
        upload_dir: Where uploads are written and served from; defaults to EVENTI_UPLOAD_DIR
    """
    storage = get_storage_config()

    app = FastAPI(
        title="Eventi Campania API",
        description="API for browsing, creating and rating local events",
        version=__version__,
        docs_url=None if IS_PRODUCTION_ENVIRONMENT else '/api/docs',
        redoc_url=None if IS_PRODUCTION_ENVIRONMENT else '/api/redoc',
        lifespan=lifespan
    )
    app.state.db = database or Database(DatabaseConfig(storage.db_path))
    app.state.upload_dir = Path(upload_dir or storage.upload_dir)
    app.state.upload_dir.mkdir(parents=True, exist_ok=True)

    # Configure CORS
    app.add_middleware(CORSMiddleware, **CORS_CONFIG)

    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(DatabaseError, database_error_handler)

    app.include_router(health.router)
    app.include_router(events.router)
    app.include_router(categories.router)
    app.include_router(ratings.router)
    app.include_router(uploads.router)

    app.mount("/uploads", StaticFiles(directory=app.state.upload_dir), name="uploads")

    return app
