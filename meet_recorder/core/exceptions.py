"""
Custom exceptions for the Meet Recorder.
"""

from typing import Any, Dict, Optional
from fastapi import HTTPException, status


class MeetRecorderException(Exception):
    """Base exception for Meet Recorder errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class SessionError(MeetRecorderException):
    """Raised when the browser session cannot be launched or navigated."""
    pass


class CaptureError(MeetRecorderException):
    """Raised when audio capture cannot be controlled."""
    pass


class ArtifactError(MeetRecorderException):
    """Raised when the capture artifact fails validation."""
    pass


class UploadError(MeetRecorderException):
    """Raised when the collector rejects or never receives the artifact."""
    pass


class JobStateError(MeetRecorderException):
    """Raised on a backwards or post-terminal job status transition."""
    pass


# HTTP Exceptions for API responses
class HTTPBadRequest(HTTPException):
    """400 Bad Request"""
    def __init__(self, detail: str):
        super().__init__(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


class HTTPInternalServerError(HTTPException):
    """500 Internal Server Error"""
    def __init__(self, detail: str = "Internal server error"):
        super().__init__(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=detail)
