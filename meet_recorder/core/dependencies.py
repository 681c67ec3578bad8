"""
Dependency injection for the Meet Recorder API.
Provides the orchestrator owned by the running application to endpoints.
"""

from typing import TYPE_CHECKING

from fastapi import Request

from meet_recorder.core.exceptions import HTTPInternalServerError

if TYPE_CHECKING:
    from meet_recorder.meeting_handler.meeting_orchestrator import MeetingOrchestrator


def get_orchestrator(request: Request) -> "MeetingOrchestrator":
    """
    Dependency injection for the MeetingOrchestrator.

    Raises:
        HTTPInternalServerError: If the application has not finished startup
    """
    orchestrator = getattr(request.app.state, "orchestrator", None)
    if orchestrator is None:
        raise HTTPInternalServerError("Recording service not initialized")
    return orchestrator
