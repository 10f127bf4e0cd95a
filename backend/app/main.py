"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from backend.app.api import admin, auth, entries, users, votes
from backend.app.core.config import settings
from backend.app.core.exception_handlers import register_exception_handlers
from backend.app.services.contest import get_contest_service

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup: load collections from the store
    service = get_contest_service()
    logger.info(
        f"[STARTUP] Contest data loaded ({settings.storage_backend} store, "
        f"{len(service.db.users)} users, {len(service.db.entries)} entries)"
    )
    if not settings.admin_password:
        logger.info("[STARTUP] No admin password configured, admin endpoints are disabled")

    yield

    logger.info("[SHUTDOWN] Cleaned up resources")


app = FastAPI(
    title="Mascot Contest API",
    description="Submit one mascot per user and vote for your favourites",
    version="1.0.0",
    lifespan=lifespan,
)

# Register custom exception handlers
register_exception_handlers(app)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,  # Load from .env file
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Register routers
app.include_router(auth.router, prefix="/api")
app.include_router(entries.router, prefix="/api")
app.include_router(votes.router, prefix="/api")
app.include_router(users.router, prefix="/api")
app.include_router(admin.router, prefix="/api")

# Serve uploaded images
settings.uploads_dir.mkdir(parents=True, exist_ok=True)
app.mount("/uploads", StaticFiles(directory=settings.uploads_dir), name="uploads")


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Mascot Contest API",
        "version": "1.0.0",
        "description": "Submit one mascot per user and vote for your favourites",
    }


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "OK",
        "message": "Backend server is running!",
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
