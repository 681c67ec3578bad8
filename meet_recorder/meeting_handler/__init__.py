"""
Meeting handling: browser session, admission flow and job orchestration.
"""

from .admission import AdmissionProtocol
from .browser_session import BrowserSession
from .locators import CssLocator, LocatorStrategy, RoleLocator, find_first
from .meeting_orchestrator import MeetingOrchestrator

__all__ = [
    "AdmissionProtocol",
    "BrowserSession",
    "CssLocator",
    "LocatorStrategy",
    "RoleLocator",
    "find_first",
    "MeetingOrchestrator",
]
