"""Browser-driven scraping of Oda category pages.

This package provides:
- The PageNavigator capability and its Playwright implementation
- Extraction of subcategory links and product tiles
- Bounded "load more" pagination
- The single-URL Worker

The multi-URL orchestrator lives in ``oda_scraper.scrapers.orchestrator``.
"""

from .types import (
    BrowserConfig,
    CategoryInfo,
    ProductRecord,
    ScrapeSummary,
    SubcategoryLink,
    SubcategoryResult,
    Viewport,
    WorkerResult,
    WorkerTask,
)
from .navigator import PageNavigator, PlaywrightPageNavigator
from .browser_manager import BrowserManager
from .paginator import Paginator, PaginatorState
from .worker import Worker

__all__ = [
    # Records
    "BrowserConfig",
    "Viewport",
    "SubcategoryLink",
    "ProductRecord",
    "WorkerTask",
    "SubcategoryResult",
    "CategoryInfo",
    "WorkerResult",
    "ScrapeSummary",
    # Browser
    "PageNavigator",
    "PlaywrightPageNavigator",
    "BrowserManager",
    # Scraping
    "Paginator",
    "PaginatorState",
    "Worker",
]
