"""
Configuration module for the Meet Recorder.
"""

from .settings import (
    Settings,
    settings,
    ApiSettings,
    BrowserSettings,
    BotSettings,
    RecordingSettings,
    ServerSettings,
)
from .logger import logger, get_logger, setup_logging

__all__ = [
    "Settings",
    "settings",
    "ApiSettings",
    "BrowserSettings",
    "BotSettings",
    "RecordingSettings",
    "ServerSettings",
    "logger",
    "get_logger",
    "setup_logging",
]
