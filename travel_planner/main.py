"""
Main FastAPI application entrypoint.
"""
import logging
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from travel_planner.config import settings
from travel_planner.domain.errors import PlannerError
from travel_planner.api.health import API_VERSION, router as health_router
from travel_planner.api.auth import router as auth_router
from travel_planner.api.trips import router as trips_router
from travel_planner.api.itinerary import router as itinerary_router
from travel_planner.api.collections import router as collections_router
from travel_planner.api.friendships import router as friendships_router
from travel_planner.api.collaborators import router as collaborators_router
from travel_planner.api.deletions import router as deletions_router
from travel_planner.api.places import router as places_router

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    """Console logging at the configured level, plus a rotating file when log_file is set."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)

    if settings.log_file:
        handler = RotatingFileHandler(settings.log_file, maxBytes=5 * 1024 * 1024, backupCount=3)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logging.getLogger().addHandler(handler)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan event handler for startup and shutdown.
    """
    # Startup
    configure_logging()
    logger.info(f"Starting Travel Planner API on {settings.host}:{settings.port}")
    logger.info(f"Debug mode: {settings.debug}")

    yield

    # Shutdown
    logger.info("Shutting down Travel Planner API")


# Create FastAPI app
app = FastAPI(
    title="Travel Planner API",
    description="Backend API for collaborative trip itineraries",
    version=API_VERSION,
    lifespan=lifespan,
)

# CORS middleware for the desktop shell
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PlannerError)
async def planner_error_handler(request: Request, exc: PlannerError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.warning(f"{request.method} {request.url.path} failed: {exc.code} {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content={"code": exc.code, "message": exc.message},
    )


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.warning(f"{request.method} {request.url.path} hit a constraint: {exc.orig}")
    return JSONResponse(
        status_code=409,
        content={"code": "CONSTRAINT_VIOLATION", "message": str(exc.orig)},
    )


# Register routers
app.include_router(health_router, prefix="/api")
app.include_router(auth_router, prefix="/api")
app.include_router(trips_router, prefix="/api")
app.include_router(itinerary_router, prefix="/api")
app.include_router(collections_router, prefix="/api")
app.include_router(friendships_router, prefix="/api")
app.include_router(collaborators_router, prefix="/api")
app.include_router(deletions_router, prefix="/api")
app.include_router(places_router, prefix="/api")


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Travel Planner API",
        "version": API_VERSION,
        "status": "running",
        "docs": "/docs",
    }
