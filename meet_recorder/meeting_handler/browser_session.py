"""
Playwright browser session for one meeting job.

Each job gets its own Playwright driver, Chromium instance, context and
page. The session is an async context manager: once `open()` has been
entered, `close()` always runs, and `close()` is safe to call twice.
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Callable, Optional

from playwright.async_api import (
    async_playwright,
    Browser,
    BrowserContext,
    Page,
    Playwright,
    Error as PlaywrightError,
)

from meet_recorder.config import Settings, settings as app_settings, get_logger
from meet_recorder.core.exceptions import SessionError
from meet_recorder.core.naming import safe_filename_component

logger = get_logger("browser_session")


CHROMIUM_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-blink-features=AutomationControlled",  # Stealth: Hide navigator.webdriver
    "--use-fake-ui-for-media-stream",  # Auto-accept permissions
    "--use-fake-device-for-media-stream",  # Synthetic camera/mic
    "--disable-features=VizDisplayCompositor",
    "--disable-background-timer-throttling",
    "--disable-backgrounding-occluded-windows",
    "--disable-renderer-backgrounding",
]


class BrowserSession:
    """
    Isolated browser session representing the bot in one meeting.

    Usage pattern:
        async with BrowserSession(meeting_id, meet_link) as session:
            await admission.attempt(session.page)
    """

    def __init__(
        self,
        meeting_id: str,
        meet_link: str,
        config: Optional[Settings] = None,
        playwright_factory: Callable = async_playwright,
    ) -> None:
        self.meeting_id = meeting_id
        self.meet_link = meet_link
        self.config = config or app_settings
        self._playwright_factory = playwright_factory

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None
        self._closed = False

    @property
    def is_open(self) -> bool:
        return self.page is not None and not self._closed

    async def __aenter__(self) -> "BrowserSession":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def open(self) -> "BrowserSession":
        """
        Launch the browser and navigate to the meeting.

        Raises:
            SessionError: If launch or navigation fails. Anything already
                started is torn down first.
        """
        browser_config = self.config.browser
        try:
            self._playwright = await self._playwright_factory().start()
            logger.info(f"Launching browser for {self.meeting_id} (headless={self.config.headless})")
            self._browser = await self._playwright.chromium.launch(
                headless=self.config.headless,
                ignore_default_args=["--enable-automation"],
                args=CHROMIUM_ARGS,
            )
            self._context = await self._browser.new_context(
                permissions=["microphone", "camera"],
                user_agent=browser_config.user_agent,
                viewport={
                    "width": browser_config.viewport_width,
                    "height": browser_config.viewport_height,
                },
                ignore_https_errors=True,
            )
            # Stealth: clear navigator.webdriver
            await self._context.add_init_script(
                "Object.defineProperty(navigator, 'webdriver', {get: () => undefined})"
            )
            self.page = await self._context.new_page()

            logger.info(f"Navigating to {self.meet_link}...")
            await self.page.goto(
                self.meet_link,
                wait_until="networkidle",
                timeout=browser_config.navigation_timeout_ms,
            )

            # The Meet UI has no reliable ready event
            await asyncio.sleep(browser_config.settle_seconds)
        except (PlaywrightError, OSError) as e:
            await self.close()
            raise SessionError(
                f"Failed to open meeting page: {e}",
                details={"meeting_id": self.meeting_id, "meet_link": self.meet_link},
            ) from e
        except BaseException:
            await self.close()
            raise

        return self

    async def snapshot(self, label: str) -> Optional[Path]:
        """Best-effort diagnostic screenshot next to the capture artifacts."""
        if not self.config.recording.snapshots_enabled or not self.is_open:
            return None
        safe_id = safe_filename_component(self.meeting_id)
        path = Path(self.config.recording.temp_dir) / f"meeting_{safe_id}_{label}.png"
        try:
            await self.page.screenshot(path=str(path))
            logger.info(f"📸 Screenshot saved: {path.name}")
            return path
        except (PlaywrightError, OSError) as e:
            logger.debug(f"Could not save screenshot {label}: {e}")
            return None

    async def close(self) -> None:
        """Close page, context, browser and driver. Idempotent and never raises."""
        if self._closed:
            return
        self._closed = True
        logger.info(f"Closing browser session for {self.meeting_id}")

        for name, closer in (
            ("context", self._context.close if self._context else None),
            ("browser", self._browser.close if self._browser else None),
            ("playwright", self._playwright.stop if self._playwright else None),
        ):
            if closer is None:
                continue
            try:
                await closer()
            except Exception as e:
                logger.warning(f"Error closing {name} for {self.meeting_id}: {e}")

        self.page = None
        self._context = None
        self._browser = None
        self._playwright = None
