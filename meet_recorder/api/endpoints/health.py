"""
Health check endpoint.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Depends

from meet_recorder.api.schemas.recording import HealthCheckResponse
from meet_recorder.core.dependencies import get_orchestrator

router = APIRouter()


@router.get("/health", response_model=HealthCheckResponse, tags=["Health"])
async def health_check(orchestrator=Depends(get_orchestrator)) -> Dict[str, Any]:
    """
    Health check endpoint.

    Returns:
        Health status with the number of in-flight recordings
    """
    return {
        "status": "ok",
        "activeRecordings": orchestrator.active_count,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
