import asyncio

import pytest
from fastapi.testclient import TestClient

from meet_recorder.main import create_app
from meet_recorder.meeting_handler import MeetingOrchestrator
from tests.fakes import ApiRecorder, FakeCapture, session_factory

MEET_LINK = "https://meet.google.com/abc-defg-hij"


class StubOrchestrator:
    """Records calls instead of running jobs."""

    def __init__(self, error=None):
        self.error = error
        self.jobs = []
        self.started = False
        self.stopped = False

    @property
    def active_count(self):
        return len(self.jobs)

    async def start(self):
        self.started = True

    async def shutdown(self):
        self.stopped = True

    def start_job(self, meeting_id, meet_link):
        if self.error:
            raise self.error
        self.jobs.append((meeting_id, meet_link))

    def get_status(self):
        return {
            "activeRecordings": len(self.jobs),
            "recordings": [
                {
                    "meetingId": meeting_id,
                    "meetLink": meet_link,
                    "status": "pending",
                    "createdAt": "2024-01-01T00:00:00+00:00",
                }
                for meeting_id, meet_link in self.jobs
            ],
            "timestamp": "2024-01-01T00:00:00+00:00",
        }


@pytest.fixture
def stub():
    return StubOrchestrator()


@pytest.fixture
def client(stub):
    with TestClient(create_app(orchestrator=stub)) as test_client:
        yield test_client


def test_start_recording_acknowledges_immediately(client, stub):
    response = client.post("/start-recording", json={"meetingId": "m1", "meetLink": MEET_LINK})

    assert response.status_code == 200
    assert response.json() == {"success": True, "message": "Recording started", "meetingId": "m1"}
    assert stub.jobs == [("m1", MEET_LINK)]


@pytest.mark.parametrize(
    "body",
    [
        {"meetingId": "m1"},
        {"meetLink": MEET_LINK},
        {"meetingId": "", "meetLink": MEET_LINK},
        {"meetingId": "m1", "meetLink": "   "},
        {},
    ],
)
def test_start_recording_rejects_missing_fields(client, stub, body):
    response = client.post("/start-recording", json=body)

    assert response.status_code == 400
    assert response.json() == {"detail": "meetingId and meetLink are required"}
    assert stub.jobs == []


def test_start_recording_rejects_malformed_body(client, stub):
    response = client.post(
        "/start-recording",
        content=b"{not json",
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 400
    assert stub.jobs == []


def test_start_recording_reports_spawn_failure_as_500():
    stub = StubOrchestrator(error=RuntimeError("Orchestrator not started"))
    with TestClient(create_app(orchestrator=stub)) as client:
        response = client.post("/start-recording", json={"meetingId": "m1", "meetLink": MEET_LINK})

    assert response.status_code == 500
    assert response.json()["detail"] == "Orchestrator not started"


def test_health_reports_active_recordings(client):
    assert client.get("/health").json()["activeRecordings"] == 0

    client.post("/start-recording", json={"meetingId": "m1", "meetLink": MEET_LINK})
    body = client.get("/health").json()

    assert body["status"] == "ok"
    assert body["activeRecordings"] == 1
    assert "timestamp" in body


def test_recordings_lists_in_flight_jobs(client):
    client.post("/start-recording", json={"meetingId": "m1", "meetLink": MEET_LINK})
    body = client.get("/recordings").json()

    assert body["activeRecordings"] == 1
    assert body["recordings"][0]["meetingId"] == "m1"
    assert body["recordings"][0]["startTime"] is None


def test_lifespan_starts_and_shuts_down_orchestrator(stub):
    with TestClient(create_app(orchestrator=stub)):
        assert stub.started
        assert not stub.stopped
    assert stub.stopped


def test_in_flight_job_is_reported_failed_on_shutdown(fast_settings, tmp_path):
    api = ApiRecorder()
    sessions = []
    orchestrator = MeetingOrchestrator(
        config=fast_settings,
        http_client=api.client(),
        session_factory=session_factory(sessions, gate=asyncio.Event()),
        capture=FakeCapture(tmp_path),
    )

    with TestClient(create_app(orchestrator=orchestrator)) as client:
        response = client.post("/start-recording", json={"meetingId": "m1", "meetLink": MEET_LINK})
        assert response.status_code == 200
        assert client.get("/health").json()["activeRecordings"] == 1

    assert orchestrator.active_count == 0
    assert api.status_updates == [
        {"status": "failed", "errorMessage": "Recording cancelled during shutdown"}
    ]
