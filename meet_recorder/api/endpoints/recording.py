"""
Recording control endpoints.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends

from meet_recorder.api.schemas.recording import (
    ActiveRecordingsResponse,
    StartRecordingRequest,
    StartRecordingResponse,
)
from meet_recorder.config import get_logger
from meet_recorder.core.dependencies import get_orchestrator
from meet_recorder.core.exceptions import HTTPBadRequest, HTTPInternalServerError

router = APIRouter()
logger = get_logger("api.recording")


@router.post("/start-recording", response_model=StartRecordingResponse, tags=["Recording"])
async def start_recording(
    request: StartRecordingRequest,
    orchestrator=Depends(get_orchestrator),
) -> Dict[str, Any]:
    """
    Start recording a meeting in the background.

    Responds as soon as the job is registered; the terminal status is
    delivered to the status API, never in this response.
    """
    meeting_id = (request.meeting_id or "").strip()
    meet_link = (request.meet_link or "").strip()
    if not meeting_id or not meet_link:
        raise HTTPBadRequest("meetingId and meetLink are required")

    logger.info(f"Received recording request for meeting {meeting_id}")
    try:
        orchestrator.start_job(meeting_id, meet_link)
    except Exception as e:
        logger.error(f"Error starting recording for {meeting_id}: {e}")
        raise HTTPInternalServerError(str(e))

    return {
        "success": True,
        "message": "Recording started",
        "meetingId": meeting_id,
    }


@router.get("/recordings", response_model=ActiveRecordingsResponse, tags=["Recording"])
async def list_recordings(orchestrator=Depends(get_orchestrator)) -> Dict[str, Any]:
    """Read-only list of in-flight recording jobs."""
    return orchestrator.get_status()
