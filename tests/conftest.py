import os

# Keep test runs from writing rotating log files
os.environ.setdefault("LOG_TO_FILE", "false")

import pytest

from meet_recorder.config import (
    BotSettings,
    BrowserSettings,
    RecordingSettings,
    Settings,
)


@pytest.fixture
def fast_settings(tmp_path) -> Settings:
    """Settings with every delay collapsed and artifacts under tmp_path."""
    return Settings(
        browser=BrowserSettings(settle_seconds=0, headless=True),
        bot=BotSettings(join_settle_seconds=0, retry_settle_seconds=0),
        recording=RecordingSettings(
            temp_dir=str(tmp_path),
            duration_seconds=0,
            startup_grace_seconds=0.5,
            stop_timeout_seconds=2.0,
            snapshots_enabled=False,
        ),
    )
