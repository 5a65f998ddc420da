"""Playwright browser lifecycle for a single worker.

Each worker creates its own BrowserManager, so every worker has a private
Playwright driver, browser and page. Nothing here is shared between workers.
"""

import asyncio
from typing import Optional

import structlog
from playwright.async_api import async_playwright, Browser, Page, Playwright

from oda_scraper.core.exceptions import BrowserNotStartedError
from oda_scraper.scrapers.types import BrowserConfig

logger = structlog.get_logger(__name__)


class BrowserManager:
    """Owns one Chromium instance and the page used to scrape with it."""

    def __init__(self):
        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._page: Optional[Page] = None
        self._lock = asyncio.Lock()

    async def launch(self, config: BrowserConfig) -> Page:
        """Launch the browser and open a page sized to ``config.viewport``."""
        async with self._lock:
            if self._page:
                return self._page
            self._playwright = await async_playwright().start()
            self._browser = await self._playwright.chromium.launch(
                headless=config.headless,
                args=[
                    "--disable-dev-shm-usage",
                    "--no-sandbox",
                ],
            )
            self._page = await self._browser.new_page(
                viewport={
                    "width": config.viewport.width,
                    "height": config.viewport.height,
                }
            )
            logger.info(
                "browser_started",
                headless=config.headless,
                viewport=f"{config.viewport.width}x{config.viewport.height}",
            )
            return self._page

    async def close(self) -> None:
        """Close the browser and stop the driver. Safe to call repeatedly."""
        async with self._lock:
            if self._browser:
                try:
                    await self._browser.close()
                except Exception as e:
                    logger.warning("browser_close_failed", error=str(e))
                self._browser = None
                self._page = None
            if self._playwright:
                await self._playwright.stop()
                self._playwright = None
                logger.info("browser_stopped")

    @property
    def page(self) -> Page:
        if not self._page:
            raise BrowserNotStartedError()
        return self._page

    @property
    def is_running(self) -> bool:
        return self._browser is not None
