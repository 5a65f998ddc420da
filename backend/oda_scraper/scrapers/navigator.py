"""Page navigation capability used by the extractor, paginator and worker.

The scraping core only talks to :class:`PageNavigator`. The Playwright
implementation below is what workers use in production; tests substitute
in-memory fakes.
"""

from abc import ABC, abstractmethod
from typing import Any, List, Optional

import structlog
from playwright.async_api import Locator, Page

logger = structlog.get_logger(__name__)


class PageNavigator(ABC):
    """Minimal set of browser interactions the scraper needs.

    Elements are opaque handles: whatever ``locate_all``/``locate_first``
    return is passed back into ``read_text``/``read_attribute`` or used as
    the ``within`` scope of a nested query.
    """

    @abstractmethod
    async def navigate(self, url: str) -> None:
        """Open ``url`` and wait for the network to settle."""

    @abstractmethod
    async def wait(self, ms: int) -> None:
        """Sleep for a fixed settle interval."""

    @abstractmethod
    async def locate_all(self, selector: str, within: Any = None) -> List[Any]:
        """Return every element matching ``selector``."""

    @abstractmethod
    async def locate_first(self, selector: str, within: Any = None) -> Optional[Any]:
        """Return the first element matching ``selector``, or None."""

    @abstractmethod
    async def click(self, selector: str) -> None:
        """Click the first element matching ``selector``."""

    @abstractmethod
    async def is_visible(self, selector: str) -> bool:
        """Whether an element matching ``selector`` is currently visible."""

    @abstractmethod
    async def read_text(self, element: Any) -> Optional[str]:
        """Visible text of ``element``, or None."""

    @abstractmethod
    async def read_attribute(self, element: Any, name: str) -> Optional[str]:
        """Attribute ``name`` of ``element``, or None."""


class PlaywrightPageNavigator(PageNavigator):
    """PageNavigator backed by a Playwright :class:`Page`."""

    def __init__(self, page: Page, timeout_ms: int = 30000):
        self.page = page
        self.timeout_ms = timeout_ms

    async def navigate(self, url: str) -> None:
        logger.debug("navigating", url=url)
        await self.page.goto(url, wait_until="networkidle", timeout=self.timeout_ms)

    async def wait(self, ms: int) -> None:
        await self.page.wait_for_timeout(ms)

    def _scope(self, selector: str, within: Any) -> Locator:
        if within is None:
            return self.page.locator(selector)
        return within.locator(selector)

    async def locate_all(self, selector: str, within: Any = None) -> List[Locator]:
        return await self._scope(selector, within).all()

    async def locate_first(self, selector: str, within: Any = None) -> Optional[Locator]:
        locator = self._scope(selector, within)
        if await locator.count() == 0:
            return None
        return locator.first

    async def click(self, selector: str) -> None:
        await self.page.locator(selector).first.click(timeout=self.timeout_ms)

    async def is_visible(self, selector: str) -> bool:
        return await self.page.locator(selector).first.is_visible()

    async def read_text(self, element: Locator) -> Optional[str]:
        return await element.text_content()

    async def read_attribute(self, element: Locator, name: str) -> Optional[str]:
        return await element.get_attribute(name)
