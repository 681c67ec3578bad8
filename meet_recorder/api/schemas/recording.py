"""
API request/response schemas for recording operations.
"""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field


class StartRecordingRequest(BaseModel):
    """Request to record a meeting. Presence is checked by the endpoint."""
    model_config = ConfigDict(populate_by_name=True)

    meeting_id: Optional[str] = Field(default=None, alias="meetingId", description="External meeting ID")
    meet_link: Optional[str] = Field(default=None, alias="meetLink", description="Meeting URL to join")


class StartRecordingResponse(BaseModel):
    """Immediate acknowledgement; the outcome goes to the status API."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    message: str
    meeting_id: str = Field(alias="meetingId")


class HealthCheckResponse(BaseModel):
    """Health check response."""
    model_config = ConfigDict(populate_by_name=True)

    status: str = "ok"
    active_recordings: int = Field(alias="activeRecordings")
    timestamp: str


class ActiveRecording(BaseModel):
    """One in-flight job."""
    model_config = ConfigDict(populate_by_name=True)

    meeting_id: str = Field(alias="meetingId")
    meet_link: str = Field(alias="meetLink")
    status: str
    created_at: str = Field(alias="createdAt")
    start_time: Optional[str] = Field(default=None, alias="startTime")
    audio_file: Optional[str] = Field(default=None, alias="audioFile")


class ActiveRecordingsResponse(BaseModel):
    """Diagnostic listing of in-flight jobs."""
    model_config = ConfigDict(populate_by_name=True)

    active_recordings: int = Field(alias="activeRecordings")
    recordings: List[ActiveRecording]
    timestamp: str
