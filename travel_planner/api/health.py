"""
Health check endpoint.
"""
from datetime import datetime

from fastapi import APIRouter

router = APIRouter(tags=["health"])

API_VERSION = "0.1.0"


@router.get("/health", summary="Health check")
async def health() -> dict:
    """Liveness probe used by the desktop client before it shows the login screen."""
    return {
        "status": "healthy",
        "timestamp": datetime.utcnow().isoformat(),
        "version": API_VERSION,
    }
