import asyncio
import base64

import pytest

from meet_recorder.domain.models import JobStatus
from meet_recorder.meeting_handler import MeetingOrchestrator
from meet_recorder.recording import AudioCaptureSupervisor
from tests.fakes import (
    ApiRecorder,
    FakeCapture,
    failing_session_factory,
    session_factory,
)

MEET_LINK = "https://meet.google.com/abc-defg-hij"


async def _started(fast_settings, client, factory, capture) -> MeetingOrchestrator:
    orchestrator = MeetingOrchestrator(
        config=fast_settings,
        http_client=client,
        session_factory=factory,
        capture=capture,
    )
    await orchestrator.start()
    return orchestrator


@pytest.mark.asyncio
async def test_start_job_requires_started_orchestrator(fast_settings, tmp_path):
    orchestrator = MeetingOrchestrator(config=fast_settings, capture=FakeCapture(tmp_path))
    with pytest.raises(RuntimeError):
        orchestrator.start_job("m1", MEET_LINK)


@pytest.mark.asyncio
async def test_job_is_registered_before_any_work(fast_settings, tmp_path):
    api = ApiRecorder()
    sessions = []
    gate = asyncio.Event()
    capture = FakeCapture(tmp_path, content=b"RIFFaudio")

    async with api.client() as client:
        orchestrator = await _started(fast_settings, client, session_factory(sessions, gate=gate), capture)
        record = orchestrator.start_job("m1", MEET_LINK)

        assert orchestrator.active_count == 1
        assert orchestrator.registry.get("m1").job.status == JobStatus.PENDING
        assert orchestrator.get_status()["recordings"][0]["meetingId"] == "m1"

        gate.set()
        await record.task

    assert orchestrator.active_count == 0
    assert api.status_updates == [{"status": "completed"}]
    assert sessions[0].snapshots == ["before_join", "after_join"]
    assert sessions[0].close_calls == 1


@pytest.mark.asyncio
async def test_empty_capture_reports_failure_and_removes_file(fast_settings, tmp_path):
    api = ApiRecorder()
    capture = FakeCapture(tmp_path, content=b"")

    async with api.client() as client:
        orchestrator = await _started(fast_settings, client, session_factory([]), capture)
        record = orchestrator.start_job("m1", MEET_LINK)
        await record.task

    assert api.status_paths == ["/api/meetings/m1"]
    assert api.status_updates == [{"status": "failed", "errorMessage": "Audio file is empty"}]
    assert api.uploads == []
    assert not capture.started[0].file_path.exists()
    assert orchestrator.active_count == 0


@pytest.mark.asyncio
async def test_webhook_rejection_reports_failure(fast_settings, tmp_path):
    api = ApiRecorder(webhook_status=503)
    capture = FakeCapture(tmp_path, content=b"\x00" * 64)

    async with api.client() as client:
        orchestrator = await _started(fast_settings, client, session_factory([]), capture)
        await orchestrator.start_job("m1", MEET_LINK).task

    assert len(api.uploads) == 1
    update = api.status_updates[0]
    assert update["status"] == "failed"
    assert "503" in update["errorMessage"]
    assert not capture.started[0].file_path.exists()


@pytest.mark.asyncio
async def test_session_failure_reports_once_and_never_captures(fast_settings, tmp_path):
    api = ApiRecorder()
    sessions = []
    capture = FakeCapture(tmp_path)

    async with api.client() as client:
        orchestrator = await _started(fast_settings, client, failing_session_factory(sessions), capture)
        await orchestrator.start_job("m1", MEET_LINK).task

    assert capture.started == []
    assert api.status_updates == [
        {"status": "failed", "errorMessage": "Failed to open meeting page: net::ERR_NAME_NOT_RESOLVED"}
    ]
    assert sessions[0].close_calls == 1
    assert orchestrator.active_count == 0


@pytest.mark.asyncio
async def test_missing_encoder_still_delivers_silent_fallback(fast_settings, tmp_path):
    api = ApiRecorder()
    fast_settings.recording.ffmpeg_path = str(tmp_path / "no-such-ffmpeg")
    capture = AudioCaptureSupervisor(fast_settings.recording)

    async with api.client() as client:
        orchestrator = await _started(fast_settings, client, session_factory([]), capture)
        await orchestrator.start_job("m1", MEET_LINK).task

    assert api.status_updates == [{"status": "completed"}]
    data_uri = api.uploads[0]["audioDataUri"]
    assert data_uri.startswith("data:audio/wav;base64,")
    assert base64.b64decode(data_uri.split(",", 1)[1]) == bytes(32000)
    assert list(tmp_path.glob("meeting_m1_*.wav")) == []


@pytest.mark.asyncio
async def test_concurrent_jobs_each_report_exactly_once(fast_settings, tmp_path):
    api = ApiRecorder()
    capture = FakeCapture(tmp_path, content=b"RIFFaudio")

    async with api.client() as client:
        orchestrator = await _started(fast_settings, client, session_factory([]), capture)
        records = [orchestrator.start_job(f"m{i}", MEET_LINK) for i in range(3)]
        assert orchestrator.active_count == 3
        await asyncio.gather(*(record.task for record in records))

    assert sorted(api.status_paths) == ["/api/meetings/m0", "/api/meetings/m1", "/api/meetings/m2"]
    assert len(api.uploads) == 3
    assert orchestrator.active_count == 0


@pytest.mark.asyncio
async def test_shutdown_cancels_in_flight_jobs(fast_settings, tmp_path):
    api = ApiRecorder()
    sessions = []
    gate = asyncio.Event()

    async with api.client() as client:
        orchestrator = await _started(
            fast_settings, client, session_factory(sessions, gate=gate), FakeCapture(tmp_path)
        )
        orchestrator.start_job("m1", MEET_LINK)
        await asyncio.sleep(0)
        assert len(sessions) == 1

        # m2 is cancelled before its task takes a single step
        orchestrator.start_job("m2", MEET_LINK)
        await orchestrator.shutdown()

    assert orchestrator.active_count == 0
    assert sorted(api.status_paths) == ["/api/meetings/m1", "/api/meetings/m2"]
    assert all(
        update == {"status": "failed", "errorMessage": "Recording cancelled during shutdown"}
        for update in api.status_updates
    )


@pytest.mark.asyncio
async def test_meeting_id_with_slash_records_and_reports_to_its_own_resource(fast_settings, tmp_path):
    api = ApiRecorder()
    fast_settings.recording.ffmpeg_path = str(tmp_path / "no-such-ffmpeg")
    capture = AudioCaptureSupervisor(fast_settings.recording)

    async with api.client() as client:
        orchestrator = await _started(fast_settings, client, session_factory([]), capture)
        await orchestrator.start_job("team/42", MEET_LINK).task

    assert api.status_updates == [{"status": "completed"}]
    assert [r.url.raw_path for r in api.requests if r.method == "PATCH"] == [b"/api/meetings/team%2F42"]
    assert api.uploads[0]["meetingId"] == "team/42"
    assert orchestrator.active_count == 0
