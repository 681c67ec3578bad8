"""
Domain layer exports.
"""

from .models import (
    Job,
    JobStatus,
    AdmissionState,
    AdmissionResult,
    CaptureHandle,
    ArtifactResult,
)
from .registry import JobRegistry, JobRecord

__all__ = [
    "Job",
    "JobStatus",
    "AdmissionState",
    "AdmissionResult",
    "CaptureHandle",
    "ArtifactResult",
    "JobRegistry",
    "JobRecord",
]
