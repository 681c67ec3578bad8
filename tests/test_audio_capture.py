import asyncio
import re
import stat
import sys
from pathlib import Path

import pytest

from meet_recorder.config import RecordingSettings
from meet_recorder.core.exceptions import CaptureError
from meet_recorder.domain.models import CaptureHandle
from meet_recorder.recording import AudioCaptureSupervisor

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="uses POSIX shell stand-ins for ffmpeg")


def _fake_ffmpeg(directory: Path, body: str) -> str:
    """Write an executable shell script standing in for ffmpeg; the output path is its last argument."""
    script = directory / "fake_ffmpeg.sh"
    script.write_text("#!/bin/sh\nfor last; do :; done\n" + body)
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return str(script)


def _supervisor(tmp_path: Path, ffmpeg_path: str = "ffmpeg") -> AudioCaptureSupervisor:
    return AudioCaptureSupervisor(
        RecordingSettings(
            temp_dir=str(tmp_path / "captures"),
            ffmpeg_path=ffmpeg_path,
            startup_grace_seconds=0.5,
            stop_timeout_seconds=2.0,
        )
    )


def test_output_path_is_unique_per_meeting_and_time(tmp_path):
    supervisor = _supervisor(tmp_path)
    path = supervisor.build_output_path("m1")

    assert path.parent == tmp_path / "captures"
    assert re.fullmatch(r"meeting_m1_\d{13}\.wav", path.name)


def test_ffmpeg_args_record_mono_16khz_pcm(tmp_path):
    supervisor = _supervisor(tmp_path)
    args = supervisor.build_ffmpeg_args(Path("/tmp/out.wav"))

    assert args[args.index("-f") + 1] == "pulse"
    assert args[args.index("-i") + 1] == "default"
    assert args[args.index("-ac") + 1] == "1"
    assert args[args.index("-ar") + 1] == "16000"
    assert args[args.index("-c:a") + 1] == "pcm_s16le"
    assert args[-1] == "/tmp/out.wav"


@pytest.mark.asyncio
async def test_missing_encoder_writes_one_second_of_silence(tmp_path):
    supervisor = _supervisor(tmp_path, ffmpeg_path=str(tmp_path / "no-such-ffmpeg"))

    handle = await supervisor.start("m1")

    assert handle.process is None
    assert handle.fallback_written
    assert handle.file_path.read_bytes() == bytes(16000 * 2)
    assert supervisor.fallback_size == 32000

    # Stopping a capture that never ran is harmless
    await supervisor.stop(handle)
    await supervisor.stop(handle)


@pytest.mark.asyncio
async def test_unwritable_output_without_encoder_raises_capture_error(tmp_path, monkeypatch):
    supervisor = _supervisor(tmp_path, ffmpeg_path=str(tmp_path / "no-such-ffmpeg"))
    monkeypatch.setattr(supervisor, "build_output_path", lambda meeting_id: tmp_path / "gone" / "out.wav")

    with pytest.raises(CaptureError) as exc_info:
        await supervisor.start("m1")

    assert exc_info.value.message.startswith("Audio capture unavailable")


@pytest.mark.asyncio
async def test_encoder_crash_writes_fallback(tmp_path):
    ffmpeg = _fake_ffmpeg(tmp_path, "echo 'pulse: No such device' >&2\nexit 1\n")
    supervisor = _supervisor(tmp_path, ffmpeg)

    handle = await supervisor.start("m1")
    await supervisor.stop(handle)

    assert handle.fallback_written
    assert handle.file_path.read_bytes() == bytes(supervisor.fallback_size)


@pytest.mark.asyncio
async def test_crash_after_partial_output_keeps_recorded_audio(tmp_path):
    ffmpeg = _fake_ffmpeg(tmp_path, "printf 'RIFFpartial' > \"$last\"\nexit 1\n")
    supervisor = _supervisor(tmp_path, ffmpeg)

    handle = await supervisor.start("m1")
    await supervisor.stop(handle)

    assert not handle.fallback_written
    assert handle.file_path.read_bytes() == b"RIFFpartial"


@pytest.mark.asyncio
async def test_stop_terminates_running_encoder(tmp_path):
    ffmpeg = _fake_ffmpeg(
        tmp_path,
        "printf 'RIFFdata' > \"$last\"\n"
        "trap 'exit 255' TERM\n"
        "while :; do sleep 0.05; done\n",
    )
    supervisor = _supervisor(tmp_path, ffmpeg)

    handle = await supervisor.start("m1")
    assert handle.is_running

    await supervisor.stop(handle)

    assert not handle.is_running
    assert handle.stop_requested
    # Exit caused by our own signal is not an encoder error
    assert not handle.fallback_written
    assert handle.file_path.read_bytes() == b"RIFFdata"

    await supervisor.stop(handle)


def test_output_path_keeps_opaque_meeting_id_in_one_file_name(tmp_path):
    supervisor = _supervisor(tmp_path)
    path = supervisor.build_output_path("team/42:../x")

    assert path.parent == tmp_path / "captures"
    assert re.fullmatch(r"meeting_team_42_\.\._x_\d{13}\.wav", path.name)


@pytest.mark.asyncio
async def test_missing_encoder_fallback_for_meeting_id_with_slash(tmp_path):
    supervisor = _supervisor(tmp_path, ffmpeg_path=str(tmp_path / "no-such-ffmpeg"))

    handle = await supervisor.start("team/42")

    assert handle.fallback_written
    assert handle.file_path.parent == tmp_path / "captures"
    assert handle.file_path.read_bytes() == bytes(supervisor.fallback_size)


@pytest.mark.asyncio
async def test_cancelled_stop_kills_encoder_that_ignores_sigterm(tmp_path):
    ffmpeg = _fake_ffmpeg(
        tmp_path,
        "printf 'RIFFdata' > \"$last\"\n"
        "trap '' TERM\n"
        "while :; do sleep 0.05; done\n",
    )
    supervisor = _supervisor(tmp_path, ffmpeg)
    handle = await supervisor.start("m1")

    stopping = asyncio.create_task(supervisor.stop(handle))
    await asyncio.sleep(0.2)
    stopping.cancel()
    with pytest.raises(asyncio.CancelledError):
        await stopping

    # Cleanup calls stop() again; it must wait for the killed encoder
    await supervisor.stop(handle)

    assert not handle.is_running
    assert handle.watcher.done()
    assert not handle.fallback_written


class _ExitedProcess:
    """Encoder that already died but whose pipes have not been drained yet."""

    def __init__(self, released: asyncio.Event):
        self.returncode = 1
        self.released = released

    async def communicate(self):
        await self.released.wait()
        return b"", b"pulse: Connection refused"


@pytest.mark.asyncio
async def test_crash_just_before_stop_still_writes_fallback(tmp_path):
    supervisor = _supervisor(tmp_path)
    released = asyncio.Event()
    handle = CaptureHandle(
        meeting_id="m1",
        file_path=supervisor.build_output_path("m1"),
        process=_ExitedProcess(released),
    )
    handle.watcher = asyncio.create_task(supervisor._watch(handle))
    await asyncio.sleep(0)

    # The watcher resumes only after stop() has begun
    asyncio.get_running_loop().call_soon(released.set)
    await supervisor.stop(handle)

    assert handle.stop_requested
    assert not handle.signal_sent
    assert handle.fallback_written
    assert handle.file_path.read_bytes() == bytes(supervisor.fallback_size)
