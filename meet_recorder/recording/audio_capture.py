"""
FFmpeg-based Audio Capture for the Meet Recorder

Records the host's default audio input into a mono 16 kHz 16-bit WAV file
using FFmpeg + PulseAudio. The recording window itself is owned by the
caller; this module only starts and stops the encoder on command.

If FFmpeg cannot be spawned, or dies on its own before producing any
output, a one-second silent fallback file is written so the job can still
reach the artifact pipeline.
"""

from __future__ import annotations

import asyncio
import signal
import time
from pathlib import Path
from typing import Optional

from meet_recorder.config import RecordingSettings, settings as app_settings, get_logger
from meet_recorder.core.exceptions import CaptureError
from meet_recorder.core.naming import safe_filename_component
from meet_recorder.domain.models import CaptureHandle

logger = get_logger("audio_capture")


class AudioCaptureSupervisor:
    """
    Owns the lifecycle of the FFmpeg recording subprocess.

    Usage pattern:
        supervisor = AudioCaptureSupervisor()
        handle = await supervisor.start(meeting_id)
        ...
        await supervisor.stop(handle)
    """

    def __init__(self, config: Optional[RecordingSettings] = None):
        self.config = config or app_settings.recording
        self.output_dir = Path(self.config.temp_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    @property
    def fallback_size(self) -> int:
        """Bytes in one second of 16-bit silence at the configured format."""
        return self.config.sample_rate * 2 * self.config.channels

    def build_output_path(self, meeting_id: str) -> Path:
        """Unique artifact path: sanitized meeting id plus epoch millis."""
        safe_id = safe_filename_component(meeting_id)
        return self.output_dir / f"meeting_{safe_id}_{int(time.time() * 1000)}.wav"

    def build_ffmpeg_args(self, output_path: Path) -> list:
        """Build FFmpeg command arguments."""
        return [
            "-nostdin",
            "-hide_banner",
            "-loglevel", "error",
            # Overwrite output file if exists
            "-y",

            # Input
            "-f", self.config.input_format,
            "-i", self.config.pulse_source,

            # Audio settings
            "-ac", str(self.config.channels),
            "-ar", str(self.config.sample_rate),
            "-c:a", "pcm_s16le",  # 16-bit PCM (standard WAV)

            "-f", "wav",
            str(output_path),
        ]

    async def start(self, meeting_id: str) -> CaptureHandle:
        """
        Start audio capture for a meeting.

        A missing or crashing FFmpeg is converted into the silent fallback
        artifact.

        Returns:
            Handle owning the subprocess and output path

        Raises:
            CaptureError: If FFmpeg cannot be spawned and no fallback file
                can be written either
        """
        handle = CaptureHandle(meeting_id=meeting_id, file_path=self.build_output_path(meeting_id))
        args = self.build_ffmpeg_args(handle.file_path)
        logger.info(f"Starting audio capture for {meeting_id}: {self.config.ffmpeg_path} {' '.join(args)}")

        try:
            handle.process = await asyncio.create_subprocess_exec(
                self.config.ffmpeg_path, *args,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
        except (FileNotFoundError, PermissionError, OSError) as e:
            logger.error(f"Failed to start FFmpeg for {meeting_id}: {e}")
            if not self.write_fallback(handle):
                raise CaptureError(
                    f"Audio capture unavailable: {e}",
                    details={"path": str(handle.file_path)},
                )
            return handle

        handle.watcher = asyncio.create_task(self._watch(handle))

        # Give FFmpeg a moment to fail fast on a bad input device
        try:
            await asyncio.wait_for(asyncio.shield(handle.watcher), timeout=self.config.startup_grace_seconds)
        except asyncio.TimeoutError:
            pass
        except asyncio.CancelledError:
            # Caller never receives the handle, so nobody else can stop it
            handle.stop_requested = True
            self._kill(handle)
            raise

        if handle.is_running:
            logger.info(f"✓ Audio capture started for {meeting_id} -> {handle.file_path}")
        return handle

    async def _watch(self, handle: CaptureHandle) -> None:
        """Drain FFmpeg's stderr and react to an exit we did not ask for."""
        process = handle.process
        _, stderr = await process.communicate()
        # stop() may have been called after a crash; only our own signal excuses the exit
        if handle.signal_sent:
            return
        if process.returncode != 0:
            message = stderr.decode(errors="replace").strip() if stderr else ""
            logger.error(
                f"FFmpeg exited with code {process.returncode} for {handle.meeting_id}: {message}"
            )
            self.write_fallback(handle)
        else:
            logger.warning(f"FFmpeg exited early for {handle.meeting_id}")

    def write_fallback(self, handle: CaptureHandle) -> bool:
        """
        Write one second of silence unless the encoder already produced data.

        Returns:
            True if the output file holds audio afterwards
        """
        path = handle.file_path
        try:
            if path.exists() and path.stat().st_size > 0:
                logger.info(f"Keeping partial recording for {handle.meeting_id} ({path.stat().st_size} bytes)")
                return True
            logger.info(f"Creating fallback audio file for {handle.meeting_id}...")
            path.write_bytes(bytes(self.fallback_size))
            handle.fallback_written = True
            return True
        except OSError as e:
            logger.error(f"Could not write fallback audio file {path}: {e}")
            return False

    async def stop(self, handle: CaptureHandle) -> None:
        """
        Stop audio capture.

        Sends SIGTERM so FFmpeg finalizes the WAV header, waits a bounded
        flush window and kills the encoder if it is still alive. Once the
        encoder has exited, calling stop() again only waits for the watcher.
        If the wait is cancelled the encoder is killed before re-raising.
        """
        handle.stop_requested = True

        if not handle.is_running:
            logger.debug(f"No running FFmpeg process for {handle.meeting_id}")
            await self._join_watcher(handle)
            return

        if not handle.signal_sent:
            logger.info(f"Stopping audio capture for {handle.meeting_id}...")
            try:
                handle.process.send_signal(signal.SIGTERM)
                handle.signal_sent = True
            except ProcessLookupError:
                pass

        try:
            await asyncio.wait_for(asyncio.shield(handle.watcher), timeout=self.config.stop_timeout_seconds)
        except asyncio.TimeoutError:
            logger.warning(f"FFmpeg didn't exit gracefully for {handle.meeting_id}, killing...")
            self._kill(handle)
            await self._join_watcher(handle)
        except asyncio.CancelledError:
            logger.warning(f"Stop interrupted for {handle.meeting_id}, killing FFmpeg")
            self._kill(handle)
            raise

        size = handle.file_path.stat().st_size if handle.file_path.exists() else 0
        logger.info(f"✓ Audio capture stopped for {handle.meeting_id}. Size: {size / 1024:.1f}KB")

    def _kill(self, handle: CaptureHandle) -> None:
        if not handle.is_running:
            return
        handle.signal_sent = True
        try:
            handle.process.kill()
        except ProcessLookupError:
            pass

    async def _join_watcher(self, handle: CaptureHandle) -> None:
        if handle.watcher is None:
            return
        try:
            await handle.watcher
        except Exception as e:
            logger.warning(f"Capture watcher for {handle.meeting_id} failed: {e}")
