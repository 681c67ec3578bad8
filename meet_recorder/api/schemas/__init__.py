"""
API schemas module.
"""

from .recording import (
    StartRecordingRequest,
    StartRecordingResponse,
    HealthCheckResponse,
    ActiveRecording,
    ActiveRecordingsResponse,
)

__all__ = [
    "StartRecordingRequest",
    "StartRecordingResponse",
    "HealthCheckResponse",
    "ActiveRecording",
    "ActiveRecordingsResponse",
]
