"""
Core module exports.
"""

from .exceptions import (
    MeetRecorderException,
    SessionError,
    CaptureError,
    ArtifactError,
    UploadError,
    JobStateError,
    HTTPBadRequest,
    HTTPInternalServerError,
)

__all__ = [
    "MeetRecorderException",
    "SessionError",
    "CaptureError",
    "ArtifactError",
    "UploadError",
    "JobStateError",
    "HTTPBadRequest",
    "HTTPInternalServerError",
]
