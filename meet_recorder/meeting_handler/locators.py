"""
Locator strategies for unstable meeting UIs.

A strategy knows how to build a Playwright locator and waits for it with
its own bounded timeout. Callers hand an ordered list of strategies to
`find_first`, which returns the first one that matches.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterable, Optional, Tuple

from playwright.async_api import (
    Error as PlaywrightError,
    Locator,
    Page,
    TimeoutError as PlaywrightTimeoutError,
)

from meet_recorder.config import get_logger

logger = get_logger("locators")


class LocatorStrategy(ABC):
    """One way of finding an element, with its own timeout."""

    def __init__(self, timeout_ms: int):
        self.timeout_ms = timeout_ms

    @property
    @abstractmethod
    def description(self) -> str:
        """Human-readable form used in logs."""

    @abstractmethod
    def build(self, page: Page) -> Locator:
        """Build the (lazy) locator for this strategy."""

    async def find(self, page: Page) -> Optional[Locator]:
        """Wait for the element to become visible; None on timeout or error."""
        locator = self.build(page)
        try:
            await locator.wait_for(state="visible", timeout=self.timeout_ms)
            return locator
        except PlaywrightTimeoutError:
            logger.debug(f"No match for {self.description} within {self.timeout_ms}ms")
        except PlaywrightError as e:
            logger.debug(f"Lookup failed for {self.description}: {e}")
        return None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.description} timeout={self.timeout_ms}ms>"


class CssLocator(LocatorStrategy):
    """Match the first element for a CSS selector."""

    def __init__(self, selector: str, timeout_ms: int):
        super().__init__(timeout_ms)
        self.selector = selector

    @property
    def description(self) -> str:
        return self.selector

    def build(self, page: Page) -> Locator:
        return page.locator(self.selector).first


class RoleLocator(LocatorStrategy):
    """Match by ARIA role and accessible name."""

    def __init__(self, role: str, name: str, timeout_ms: int, exact: bool = True):
        super().__init__(timeout_ms)
        self.role = role
        self.name = name
        self.exact = exact

    @property
    def description(self) -> str:
        return f'role={self.role}[name="{self.name}"]'

    def build(self, page: Page) -> Locator:
        return page.get_by_role(self.role, name=self.name, exact=self.exact).first


async def find_first(
    page: Page,
    strategies: Iterable[LocatorStrategy],
) -> Optional[Tuple[LocatorStrategy, Locator]]:
    """
    Try strategies in priority order.

    Returns:
        (strategy, locator) for the first match, or None once the list is
        exhausted
    """
    for strategy in strategies:
        locator = await strategy.find(page)
        if locator is not None:
            logger.debug(f"Matched {strategy.description}")
            return strategy, locator
    return None
