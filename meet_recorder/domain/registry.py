"""
In-memory registry of in-flight recording jobs.

Owned by the orchestrator: only the job lifecycle adds or removes entries,
everything else reads.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional

from meet_recorder.config import get_logger
from .models import CaptureHandle, Job

logger = get_logger("registry")


@dataclass
class JobRecord:
    """Registry entry: the job plus the resources it owns."""
    job: Job
    capture: Optional[CaptureHandle] = None
    task: Optional[asyncio.Task] = None

    def to_dict(self) -> dict:
        job = self.job
        return {
            "meetingId": job.meeting_id,
            "meetLink": job.meet_link,
            "status": job.status.value,
            "createdAt": job.created_at.isoformat(),
            "startTime": job.start_time.isoformat() if job.start_time else None,
            "audioFile": str(self.capture.file_path) if self.capture else None,
        }


class JobRegistry:
    """Mapping of meeting_id to the live job record."""

    def __init__(self) -> None:
        self._records: Dict[str, JobRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, meeting_id: str) -> bool:
        return meeting_id in self._records

    def __iter__(self) -> Iterator[JobRecord]:
        return iter(list(self._records.values()))

    @property
    def active_count(self) -> int:
        return len(self._records)

    def register(self, job: Job) -> JobRecord:
        """Add a job. A second job for the same meeting_id replaces the first entry."""
        if job.meeting_id in self._records:
            logger.warning(
                f"Meeting {job.meeting_id} already has an active recording; "
                "tracking the newer request"
            )
        record = JobRecord(job=job)
        self._records[job.meeting_id] = record
        logger.debug(f"Registered job {job.meeting_id} ({len(self)} active)")
        return record

    def unregister(self, record: JobRecord) -> bool:
        """
        Remove `record` if it is still the entry for its meeting.

        Safe to call repeatedly; returns False when nothing was removed.
        """
        meeting_id = record.job.meeting_id
        if self._records.get(meeting_id) is not record:
            return False
        del self._records[meeting_id]
        logger.debug(f"Unregistered job {meeting_id} ({len(self)} active)")
        return True

    def get(self, meeting_id: str) -> Optional[JobRecord]:
        return self._records.get(meeting_id)

    def snapshot(self) -> List[dict]:
        """Read-only view of all active jobs for diagnostics."""
        return [record.to_dict() for record in self]
