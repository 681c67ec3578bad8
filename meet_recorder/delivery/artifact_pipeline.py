"""
Artifact Pipeline

Validates the captured WAV, encodes it as a base64 data URI and posts it
to the collector webhook. The local file is removed after every attempt.
"""

from __future__ import annotations

import asyncio
import base64
from pathlib import Path
from typing import Optional

import httpx

from meet_recorder.config import ApiSettings, settings as app_settings, get_logger
from meet_recorder.core.exceptions import ArtifactError, UploadError
from meet_recorder.domain.models import ArtifactResult, JobStatus

logger = get_logger("artifact_pipeline")

AUDIO_MEDIA_TYPE = "audio/wav"


def encode_data_uri(data: bytes, media_type: str = AUDIO_MEDIA_TYPE) -> str:
    """Encode raw bytes as a `data:<media_type>;base64,...` URI."""
    return f"data:{media_type};base64,{base64.b64encode(data).decode('ascii')}"


def validate_artifact(file_path: Path) -> int:
    """
    Check the artifact exists and is non-empty.

    Returns:
        File size in bytes

    Raises:
        ArtifactError: If the file is missing or empty
    """
    if not file_path.exists():
        raise ArtifactError("Audio file not found", details={"path": str(file_path)})
    size = file_path.stat().st_size
    if size == 0:
        raise ArtifactError("Audio file is empty", details={"path": str(file_path)})
    return size


class ArtifactPipeline:
    """Ships a finished capture to the collector. Never raises."""

    def __init__(self, client: httpx.AsyncClient, config: Optional[ApiSettings] = None):
        self.client = client
        self.config = config or app_settings.api

    async def process(self, meeting_id: str, file_path: Path) -> ArtifactResult:
        """
        Validate, encode and upload the artifact, then delete it.

        Returns:
            ArtifactResult with COMPLETED on upload success, FAILED otherwise
        """
        file_path = Path(file_path)
        logger.info(f"Processing audio file: {file_path}")
        try:
            size = validate_artifact(file_path)
            logger.info(f"Audio file size: {size} bytes")

            audio_bytes = await asyncio.to_thread(file_path.read_bytes)
            await self.upload(meeting_id, encode_data_uri(audio_bytes))
            return ArtifactResult(status=JobStatus.COMPLETED, size_bytes=size)

        except (ArtifactError, UploadError) as e:
            logger.error(f"Error processing audio for {meeting_id}: {e.message}")
            return ArtifactResult(status=JobStatus.FAILED, error_message=e.message)
        except httpx.HTTPError as e:
            logger.error(f"Error sending audio to webhook for {meeting_id}: {e}")
            return ArtifactResult(status=JobStatus.FAILED, error_message=f"Webhook request failed: {e}")
        except Exception as e:
            logger.error(f"Unexpected error processing audio for {meeting_id}: {e}", exc_info=True)
            return ArtifactResult(status=JobStatus.FAILED, error_message=str(e) or type(e).__name__)
        finally:
            self.discard(file_path)

    async def upload(self, meeting_id: str, audio_data_uri: str) -> None:
        """
        POST the data URI to the collector webhook.

        Raises:
            UploadError: On a non-2xx response
            httpx.HTTPError: On transport failure
        """
        logger.info(f"Sending audio to webhook for meeting {meeting_id}")
        response = await self.client.post(
            self.config.webhook_path,
            json={"meetingId": meeting_id, "audioDataUri": audio_data_uri},
        )
        if not response.is_success:
            raise UploadError(
                f"Webhook failed: {response.status_code} {response.reason_phrase}".rstrip(),
                details={"status_code": response.status_code},
            )
        logger.info("Audio sent to webhook successfully")

    def discard(self, file_path: Path) -> None:
        """Remove the local artifact; a failure here never fails the job."""
        try:
            file_path.unlink(missing_ok=True)
            logger.info(f"Audio file cleaned up: {file_path.name}")
        except OSError as e:
            logger.warning(f"Could not delete audio file {file_path}: {e}")
