"""
Status reporting to the external meeting API.
"""

from __future__ import annotations

from typing import Optional
from urllib.parse import quote

import httpx

from meet_recorder.config import ApiSettings, settings as app_settings, get_logger
from meet_recorder.domain.models import JobStatus

logger = get_logger("status_reporter")


class StatusReporter:
    """
    Pushes job status to the system of record.

    Reporting is best-effort telemetry: failures are logged and never
    raised back into the job lifecycle.
    """

    def __init__(self, client: httpx.AsyncClient, config: Optional[ApiSettings] = None):
        self.client = client
        self.config = config or app_settings.api

    def build_payload(self, status: JobStatus, error_message: Optional[str] = None) -> dict:
        payload = {"status": status.value}
        if error_message:
            payload["errorMessage"] = error_message
        return payload

    async def report(
        self,
        meeting_id: str,
        status: JobStatus,
        error_message: Optional[str] = None,
    ) -> bool:
        """
        PATCH the meeting's status.

        Returns:
            True if the API acknowledged the update with a 2xx response
        """
        # meeting_id is opaque; keep it a single path segment
        path = self.config.status_path.format(meeting_id=quote(meeting_id, safe=""))
        try:
            response = await self.client.patch(path, json=self.build_payload(status, error_message))
        except httpx.HTTPError as e:
            logger.error(f"Error updating meeting status for {meeting_id}: {e}")
            return False
        except Exception as e:
            logger.error(f"Unexpected error updating meeting status for {meeting_id}: {e}", exc_info=True)
            return False

        if not response.is_success:
            logger.error(f"Failed to update meeting status for {meeting_id}: {response.status_code}")
            return False

        logger.info(f"Meeting {meeting_id} marked {status.value}")
        return True
