"""Bounded "load more" pagination over a single subcategory page."""

from enum import Enum
from typing import List

import structlog

from oda_scraper.scrapers.extractor import (
    DEFAULT_BASE_URL,
    PRODUCT_TILE_SELECTOR,
    extract_products,
)
from oda_scraper.scrapers.navigator import PageNavigator
from oda_scraper.scrapers.types import ProductRecord

logger = structlog.get_logger(__name__)

LOAD_MORE_SELECTOR = 'a[rel="next"]'
DEFAULT_MAX_PAGES = 5
DEFAULT_SETTLE_MS = 2000


class PaginatorState(str, Enum):
    LOADING = "loading"
    EXTRACTED = "extracted"
    LOADED_MORE = "loaded_more"
    DONE = "done"


class Paginator:
    """Drives one page to exhaustion via repeated extract + load-more cycles.

    The rendered list is append-only under "load more", so every cycle
    extracts what is currently present and appends it to the running list.
    The loop stops when the control disappears or after ``max_pages``
    cycles, whichever comes first.
    """

    def __init__(
        self,
        navigator: PageNavigator,
        max_pages: int = DEFAULT_MAX_PAGES,
        settle_ms: int = DEFAULT_SETTLE_MS,
        product_selector: str = PRODUCT_TILE_SELECTOR,
        load_more_selector: str = LOAD_MORE_SELECTOR,
        base_url: str = DEFAULT_BASE_URL,
    ):
        if max_pages < 1:
            raise ValueError("max_pages must be at least 1")
        self.navigator = navigator
        self.max_pages = max_pages
        self.settle_ms = settle_ms
        self.product_selector = product_selector
        self.load_more_selector = load_more_selector
        self.base_url = base_url
        self.state = PaginatorState.LOADING
        self.history: List[PaginatorState] = []
        self.pages_loaded = 0

    def _transition(self, state: PaginatorState) -> None:
        self.state = state
        self.history.append(state)

    async def load_more(self) -> bool:
        """Click the load-more control if it is there.

        Returns:
            True if more content was requested, False when pagination is over
        """
        try:
            if not await self.navigator.is_visible(self.load_more_selector):
                return False
            await self.navigator.click(self.load_more_selector)
            await self.navigator.wait(self.settle_ms)
            return True
        except Exception as e:
            logger.warning("load_more_failed", error=str(e))
            return False

    async def scrape(self, url: str, category: str = "") -> List[ProductRecord]:
        """Collect products from ``url`` across all pagination cycles."""
        await self.navigator.navigate(url)
        await self.navigator.wait(self.settle_ms)

        products: List[ProductRecord] = []
        self.history = []
        self.pages_loaded = 0
        self._transition(PaginatorState.LOADING)

        while self.state is not PaginatorState.DONE:
            self.pages_loaded += 1
            page_products = await extract_products(
                self.navigator,
                self.product_selector,
                category=category,
                base_url=self.base_url,
            )
            products.extend(page_products)
            self._transition(PaginatorState.EXTRACTED)

            logger.debug(
                "page_extracted",
                url=url,
                page=self.pages_loaded,
                found=len(page_products),
                total=len(products),
            )

            if self.pages_loaded >= self.max_pages:
                logger.info("max_pages_reached", url=url, max_pages=self.max_pages)
                self._transition(PaginatorState.DONE)
            elif await self.load_more():
                self._transition(PaginatorState.LOADED_MORE)
                self._transition(PaginatorState.LOADING)
            else:
                self._transition(PaginatorState.DONE)

        return products
