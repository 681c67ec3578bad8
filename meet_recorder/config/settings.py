"""
Configuration settings for the Meet Recorder.
Uses Pydantic Settings for type-safe configuration with environment variable support.
"""

import tempfile
from typing import Optional
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)


class ApiSettings(BaseSettings):
    """Status API and collector configuration."""
    model_config = SettingsConfigDict(env_prefix="API_")

    base_url: str = Field(
        default="https://pixelscribe3.vercel.app",
        description="Base URL of the status API and artifact collector"
    )
    timeout_seconds: float = Field(
        default=70.0,
        description="Timeout for outbound HTTP calls"
    )
    status_path: str = Field(
        default="/api/meetings/{meeting_id}",
        description="Status update path template"
    )
    webhook_path: str = Field(
        default="/api/webhooks/drive",
        description="Artifact collector webhook path"
    )


class BrowserSettings(BaseSettings):
    """Browser session configuration."""
    model_config = SettingsConfigDict(env_prefix="BROWSER_")

    headless: Optional[bool] = Field(
        default=None,
        description="Run headless (unset: headless only in production)"
    )
    user_agent: str = Field(default=DEFAULT_USER_AGENT, description="Browser user agent")
    viewport_width: int = Field(default=1280, description="Viewport width")
    viewport_height: int = Field(default=720, description="Viewport height")
    navigation_timeout_ms: int = Field(
        default=60000,
        description="Max time to wait for the meeting page to go network-idle"
    )
    settle_seconds: float = Field(
        default=5.0,
        description="Delay after navigation for client-side rendering"
    )


class BotSettings(BaseSettings):
    """Admission behaviour configuration."""
    model_config = SettingsConfigDict(env_prefix="BOT_")

    display_name: str = Field(default="Meeting Bot", description="Name shown to participants")
    primary_selector_timeout_ms: int = Field(
        default=10000,
        description="Wait for the primary name-field selector"
    )
    fallback_selector_timeout_ms: int = Field(
        default=2000,
        description="Wait for each alternative name-field selector"
    )
    join_settle_seconds: float = Field(
        default=10.0,
        description="Delay after submitting before checking admission"
    )
    join_button_timeout_ms: int = Field(
        default=5000,
        description="Wait for a join control on the second attempt"
    )
    retry_settle_seconds: float = Field(
        default=5.0,
        description="Delay after clicking a join control"
    )


class RecordingSettings(BaseSettings):
    """Audio capture configuration."""
    model_config = SettingsConfigDict(env_prefix="RECORDING_")

    duration_seconds: float = Field(default=300.0, description="Fixed recording window")
    temp_dir: str = Field(
        default_factory=tempfile.gettempdir,
        description="Directory for capture artifacts and snapshots"
    )
    ffmpeg_path: str = Field(default="ffmpeg", description="FFmpeg executable")
    input_format: str = Field(default="pulse", description="FFmpeg input device format")
    pulse_source: str = Field(default="default", description="Audio input device")
    sample_rate: int = Field(default=16000, description="Sample rate in Hz")
    channels: int = Field(default=1, description="Number of channels (1 = mono)")
    startup_grace_seconds: float = Field(
        default=1.0,
        description="Time allowed for FFmpeg to fail fast before recording is assumed"
    )
    stop_timeout_seconds: float = Field(
        default=5.0,
        description="Max wait for FFmpeg to flush after SIGTERM"
    )
    snapshots_enabled: bool = Field(
        default=True,
        description="Save diagnostic screenshots around the admission attempt"
    )


class ServerSettings(BaseSettings):
    """HTTP server configuration."""
    model_config = SettingsConfigDict(env_prefix="SERVER_", populate_by_name=True)

    host: str = Field(
        default="0.0.0.0",
        validation_alias=AliasChoices("SERVER_HOST", "HOST"),
    )
    port: int = Field(
        default=3000,
        validation_alias=AliasChoices("SERVER_PORT", "PORT"),
    )


class Settings(BaseSettings):
    """Main application settings."""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        populate_by_name=True,
        extra="ignore"
    )

    # Nested settings
    api: ApiSettings = Field(default_factory=ApiSettings)
    browser: BrowserSettings = Field(default_factory=BrowserSettings)
    bot: BotSettings = Field(default_factory=BotSettings)
    recording: RecordingSettings = Field(default_factory=RecordingSettings)
    server: ServerSettings = Field(default_factory=ServerSettings)

    # Application settings
    project_name: str = Field(default="Meet Recorder")
    version: str = Field(default="1.0.0")
    environment: str = Field(
        default="development",
        validation_alias=AliasChoices("ENVIRONMENT", "APP_ENV"),
        description="Deployment environment"
    )
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")
    log_to_file: bool = Field(default=True, description="Write rotating log files")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()

    @property
    def headless(self) -> bool:
        """Explicit BROWSER_HEADLESS wins, otherwise headless in production."""
        if self.browser.headless is not None:
            return self.browser.headless
        return self.environment.lower() == "production"


# Global settings instance
settings = Settings()
