"""FastAPI application for the Strava Goal Tracker."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .config import get_settings
from .api.routes import auth, strava
from .api.exception_handlers import register_exception_handlers
from .models.sports import list_sport_configs
from .utils.log_sanitizer import install_log_sanitizer

settings = get_settings()
logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Filters the handlers basicConfig just added; must run before any logging
install_log_sanitizer()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    settings = get_settings()
    logger.info(f"Starting Strava Goal Tracker v{__version__}")

    if settings.strava_configured:
        logger.info("Strava OAuth: configured")
    else:
        logger.warning("Strava OAuth not configured. Sign-in will be unavailable.")

    yield

    logger.info("Shutting down Strava Goal Tracker")


app = FastAPI(
    title="Strava Goal Tracker API",
    description="Yearly distance goal tracking and pace trends from Strava",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(strava.router, prefix="/api/strava", tags=["strava"])


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "Strava Goal Tracker API",
        "version": __version__,
        "status": "healthy",
        "sports": [config.to_dict() for config in list_sport_configs()],
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=settings.api_host, port=settings.api_port)
