"""
API router aggregation.
"""

from fastapi import APIRouter
from meet_recorder.api.endpoints import recording, health

api_router = APIRouter()

# Include all endpoint routers
api_router.include_router(recording.router)
api_router.include_router(health.router)

__all__ = ["api_router"]
