"""
Meeting Orchestrator

Owns the job registry and runs one lifecycle task per recording job:
session -> admission -> capture -> fixed wait -> stop -> artifact
pipeline -> status report -> teardown.

Every exit path reports exactly one terminal status and removes the job
from the registry.
"""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from typing import Callable, Optional, Set

import httpx

from meet_recorder.config import Settings, settings as app_settings, get_logger
from meet_recorder.core.exceptions import JobStateError
from meet_recorder.delivery import ArtifactPipeline, StatusReporter
from meet_recorder.domain import (
    AdmissionState,
    Job,
    JobRecord,
    JobRegistry,
    JobStatus,
)
from meet_recorder.recording import AudioCaptureSupervisor
from .admission import AdmissionProtocol
from .browser_session import BrowserSession


logger = get_logger("meeting_orchestrator")


class MeetingOrchestrator:
    """
    Main coordinator for recording jobs.

    Created at application startup and shut down with it. Collaborators
    can be injected; anything left out is built from settings in `start()`.
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        registry: Optional[JobRegistry] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        session_factory: Optional[Callable[..., BrowserSession]] = None,
        admission: Optional[AdmissionProtocol] = None,
        capture: Optional[AudioCaptureSupervisor] = None,
        pipeline: Optional[ArtifactPipeline] = None,
        reporter: Optional[StatusReporter] = None,
    ):
        self.config = config or app_settings
        self.registry = registry if registry is not None else JobRegistry()
        self.http_client = http_client
        self._owns_client = http_client is None
        self.session_factory = session_factory or BrowserSession
        self.admission = admission or AdmissionProtocol(self.config.bot)
        self.capture = capture or AudioCaptureSupervisor(self.config.recording)
        self.pipeline = pipeline
        self.reporter = reporter

        # Keep references so fire-and-forget tasks are not garbage collected
        self._tasks: Set[asyncio.Task] = set()

    @property
    def active_count(self) -> int:
        return len(self.registry)

    async def start(self) -> None:
        """Create the shared HTTP client and delivery services."""
        if self.http_client is None:
            self.http_client = httpx.AsyncClient(
                base_url=self.config.api.base_url,
                headers={"Content-Type": "application/json"},
                timeout=self.config.api.timeout_seconds,
            )
            self._owns_client = True
        if self.pipeline is None:
            self.pipeline = ArtifactPipeline(self.http_client, self.config.api)
        if self.reporter is None:
            self.reporter = StatusReporter(self.http_client, self.config.api)
        logger.info(f"Meeting orchestrator started (API: {self.config.api.base_url})")

    async def shutdown(self) -> None:
        """Cancel in-flight jobs, wait for their cleanup, close the HTTP client."""
        if self._tasks:
            logger.info(f"Draining {len(self._tasks)} active recording job(s)...")
            for task in list(self._tasks):
                task.cancel()
            await asyncio.gather(*self._tasks, return_exceptions=True)

        # Tasks cancelled before their first step never ran their own cleanup
        for record in self.registry:
            await self._finish(record.job, JobStatus.FAILED, "Recording cancelled during shutdown")
            self.registry.unregister(record)

        if self._owns_client and self.http_client is not None:
            await self.http_client.aclose()
            self.http_client = None
        logger.info("Meeting orchestrator shut down")

    def start_job(self, meeting_id: str, meet_link: str) -> JobRecord:
        """
        Register a job and spawn its lifecycle in the background.

        Returns immediately; the terminal outcome is delivered through the
        status API.

        Raises:
            ValueError: If meeting_id or meet_link is empty
            RuntimeError: If called outside a running event loop
        """
        if self.reporter is None or self.pipeline is None:
            raise RuntimeError("Orchestrator not started")

        job = Job(meeting_id=meeting_id, meet_link=meet_link)
        record = self.registry.register(job)
        try:
            task = asyncio.create_task(self.run_job(record), name=f"recording-{meeting_id}")
        except Exception:
            self.registry.unregister(record)
            raise
        record.task = task
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

        logger.info(f"Recording job queued for meeting {meeting_id}: {meet_link}")
        return record

    async def run_job(self, record: JobRecord) -> None:
        """Full lifecycle for one job. Never raises except on cancellation."""
        job = record.job
        logger.info(f"Starting recording for meeting {job.meeting_id}: {job.meet_link}")

        try:
            async with self.session_factory(job.meeting_id, job.meet_link, self.config) as session:
                await session.snapshot("before_join")
                admission = await self.admission.attempt(session.page, self.config.bot.display_name)
                await session.snapshot("after_join")

                if admission.state == AdmissionState.ADMITTED:
                    logger.info(f"Bot admitted to meeting {job.meeting_id}")
                else:
                    # Recording an unjoined view only costs silence
                    logger.warning(
                        f"Admission {admission.state.value} for {job.meeting_id}; recording anyway"
                    )

                record.capture = await self.capture.start(job.meeting_id)
                job.advance(JobStatus.RECORDING)

                duration = self.config.recording.duration_seconds
                logger.info(f"Recording meeting audio for {duration:.0f} seconds...")
                await asyncio.sleep(duration)

                logger.info("Recording complete - stopping audio capture")
                await self.capture.stop(record.capture)

                result = await self.pipeline.process(job.meeting_id, record.capture.file_path)
                await self._finish(job, result.status, result.error_message)

        except asyncio.CancelledError:
            logger.warning(f"Recording for {job.meeting_id} cancelled")
            await self._finish(job, JobStatus.FAILED, "Recording cancelled during shutdown")
            raise
        except Exception as e:
            logger.error(f"Error in meeting recording for {job.meeting_id}: {e}", exc_info=True)
            await self._finish(job, JobStatus.FAILED, getattr(e, "message", None) or str(e) or type(e).__name__)
        finally:
            await self._release(record)

    async def _finish(self, job: Job, status: JobStatus, error_message: Optional[str] = None) -> None:
        """Advance to a terminal status and report it, once per job."""
        if job.is_terminal:
            logger.debug(f"Job {job.meeting_id} already {job.status.value}; not reporting {status.value}")
            return
        try:
            job.advance(status, error_message)
        except JobStateError as e:
            logger.error(e.message)
            return
        if status == JobStatus.FAILED:
            logger.error(f"Recording for {job.meeting_id} failed: {error_message}")
        else:
            logger.info(f"Recording for {job.meeting_id} completed")
        await self.reporter.report(job.meeting_id, status, error_message)

    async def _release(self, record: JobRecord) -> None:
        """Stop leftover capture, drop leftover artifacts, unregister."""
        try:
            if record.capture is not None:
                await self.capture.stop(record.capture)
                if record.capture.file_path.exists():
                    self.pipeline.discard(record.capture.file_path)
        except Exception as e:
            logger.warning(f"Error releasing capture for {record.job.meeting_id}: {e}")
        finally:
            self.registry.unregister(record)
            logger.info(f"Job {record.job.meeting_id} finished ({self.active_count} active)")

    def get_status(self) -> dict:
        """Diagnostic view of in-flight jobs."""
        return {
            "activeRecordings": self.active_count,
            "recordings": self.registry.snapshot(),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
