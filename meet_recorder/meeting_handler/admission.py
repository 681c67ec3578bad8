"""
Google Meet Admission Protocol

Gets the bot past the pre-join screen:
- Guest name entry through a selector fallback chain
- Keyboard submit
- Negative admission check (pre-join controls gone)
- One extra attempt at clicking a join control

Every wait is bounded and selector misses are never raised, so the
protocol always returns after a fixed number of steps.
"""

from __future__ import annotations

import asyncio
from typing import List, Optional

from playwright.async_api import Error as PlaywrightError, Page

from meet_recorder.config import BotSettings, settings as app_settings, get_logger
from meet_recorder.domain.models import AdmissionResult, AdmissionState
from .locators import CssLocator, LocatorStrategy, RoleLocator, find_first
from .meet_selectors import JOIN_BUTTON_NAMES, get_selectors_for

logger = get_logger("admission")


class AdmissionProtocol:
    """Drives the Meet pre-join screen for one session."""

    def __init__(self, config: Optional[BotSettings] = None):
        self.config = config or app_settings.bot

    def name_strategies(self) -> List[LocatorStrategy]:
        """Primary name selector first, then the permissive alternatives."""
        primary, *alternatives = get_selectors_for("name_input")
        strategies: List[LocatorStrategy] = [
            CssLocator(primary, self.config.primary_selector_timeout_ms)
        ]
        strategies.extend(
            CssLocator(selector, self.config.fallback_selector_timeout_ms)
            for selector in alternatives
        )
        return strategies

    def join_strategies(self) -> List[LocatorStrategy]:
        timeout = self.config.join_button_timeout_ms
        strategies: List[LocatorStrategy] = [
            CssLocator(selector, timeout) for selector in get_selectors_for("join_button")
        ]
        strategies.extend(RoleLocator("button", name, timeout) for name in JOIN_BUTTON_NAMES)
        return strategies

    async def attempt(self, page: Page, display_name: Optional[str] = None) -> AdmissionResult:
        """
        Run the admission flow once.

        Args:
            page: Page already navigated to the meeting link
            display_name: Name to enter (defaults to BOT_DISPLAY_NAME)

        Returns:
            AdmissionResult; `unknown` when the page could not be inspected
        """
        display_name = display_name or self.config.display_name
        result = AdmissionResult(state=AdmissionState.UNKNOWN)

        # --- Step 1: Guest name ---
        logger.info("Attempting to join meeting as guest...")
        result.name_selector = await self._enter_name(page, display_name)
        result.name_entered = result.name_selector is not None

        # --- Step 2: Submit with Enter ---
        logger.info("Pressing Enter to join the meeting...")
        try:
            await page.keyboard.press("Enter")
        except PlaywrightError as e:
            logger.warning(f"Could not press Enter: {e}")

        await asyncio.sleep(self.config.join_settle_seconds)
        result.state = await self.check_admission(page)

        # --- Step 3: One more try via a join control ---
        if result.state != AdmissionState.ADMITTED:
            logger.info(f"Admission {result.state.value}; looking for a join button...")
            result.join_clicked = await self._click_join(page)
            if result.join_clicked:
                await asyncio.sleep(self.config.retry_settle_seconds)
                result.state = await self.check_admission(page)

        if result.admitted:
            logger.info("Successfully joined the meeting")
        else:
            logger.warning(f"Admission not confirmed (state={result.state.value})")
        return result

    async def _enter_name(self, page: Page, display_name: str) -> Optional[str]:
        match = await find_first(page, self.name_strategies())
        if match is None:
            logger.warning("⚠️ Could not find any name input field")
            return None

        strategy, name_input = match
        try:
            await name_input.fill(display_name)
        except PlaywrightError as e:
            logger.warning(f"Found name input {strategy.description} but could not fill it: {e}")
            return None
        logger.info(f"Entered name using selector: {strategy.description}")
        return strategy.description

    async def _click_join(self, page: Page) -> bool:
        match = await find_first(page, self.join_strategies())
        if match is None:
            logger.info("No additional join buttons found")
            return False

        strategy, button = match
        try:
            await button.click()
        except PlaywrightError as e:
            logger.warning(f"Normal click failed for {strategy.description}: {e}. Trying force click...")
            try:
                await button.click(force=True)
            except PlaywrightError as e:
                logger.warning(f"Force click failed for {strategy.description}: {e}")
                return False
        logger.info(f"Clicked join button: {strategy.description}")
        return True

    async def check_admission(self, page: Page) -> AdmissionState:
        """
        Infer admission from the absence of every pre-join marker.

        There is no reliable positive "in the meeting" signal, so any marker
        still on the page means not admitted.
        """
        try:
            for selector in get_selectors_for("pre_join_markers"):
                if await page.locator(selector).count() > 0:
                    logger.debug(f"Pre-join marker still present: {selector}")
                    return AdmissionState.NOT_ADMITTED
        except PlaywrightError as e:
            logger.warning(f"Could not inspect page for admission: {e}")
            return AdmissionState.UNKNOWN
        return AdmissionState.ADMITTED
