"""
Data models for recording jobs.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Optional

from meet_recorder.core.exceptions import JobStateError


class JobStatus(str, Enum):
    """Lifecycle state of a recording job."""
    PENDING = "pending"
    RECORDING = "recording"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


# Forward-only transitions
_ALLOWED_TRANSITIONS = {
    JobStatus.PENDING: {JobStatus.RECORDING, JobStatus.COMPLETED, JobStatus.FAILED},
    JobStatus.RECORDING: {JobStatus.COMPLETED, JobStatus.FAILED},
    JobStatus.COMPLETED: set(),
    JobStatus.FAILED: set(),
}


class AdmissionState(str, Enum):
    """Outcome of the admission protocol, inferred from pre-join markers."""
    ADMITTED = "admitted"
    NOT_ADMITTED = "not_admitted"
    UNKNOWN = "unknown"


@dataclass
class AdmissionResult:
    """What the admission protocol observed and did."""
    state: AdmissionState
    name_entered: bool = False
    join_clicked: bool = False
    name_selector: Optional[str] = None

    @property
    def admitted(self) -> bool:
        return self.state == AdmissionState.ADMITTED


@dataclass
class Job:
    """
    One audio-capture task.

    meeting_id is the correlation key for every status update and part of
    the capture file name. meet_link is not validated locally; a bad link
    surfaces as a navigation failure.
    """
    meeting_id: str
    meet_link: str
    status: JobStatus = JobStatus.PENDING
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    start_time: Optional[datetime] = None
    error_message: Optional[str] = None

    def __post_init__(self) -> None:
        if not self.meeting_id:
            raise ValueError("meeting_id must be non-empty")
        if not self.meet_link:
            raise ValueError("meet_link must be non-empty")

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    def advance(self, status: JobStatus, error_message: Optional[str] = None) -> None:
        """
        Move the job forward to `status`.

        Raises:
            JobStateError: If the transition would go backwards or leave a
                terminal state.
        """
        if status not in _ALLOWED_TRANSITIONS[self.status]:
            raise JobStateError(
                f"Invalid transition {self.status.value} -> {status.value}",
                details={"meeting_id": self.meeting_id},
            )
        self.status = status
        if status == JobStatus.RECORDING:
            self.start_time = datetime.now(timezone.utc)
        self.error_message = error_message if status == JobStatus.FAILED else None


@dataclass
class CaptureHandle:
    """A running (or failed-to-start) audio capture owned by one job."""
    meeting_id: str
    file_path: Path
    process: Optional[asyncio.subprocess.Process] = None
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    fallback_written: bool = False
    stop_requested: bool = False
    # Set once we have signalled the encoder; its exit is then ours
    signal_sent: bool = False
    watcher: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self.process is not None and self.process.returncode is None


@dataclass
class ArtifactResult:
    """Terminal outcome of the artifact pipeline."""
    status: JobStatus
    error_message: Optional[str] = None
    size_bytes: int = 0

    @property
    def ok(self) -> bool:
        return self.status == JobStatus.COMPLETED
