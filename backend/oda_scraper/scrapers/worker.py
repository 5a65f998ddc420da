"""Single-URL scraping worker.

A worker owns one browser for its whole run, walks the subcategories of one
top-level category page in sequence and returns a WorkerResult. It never
raises: every failure ends up in the result.
"""

from typing import Callable, List, Optional

import structlog

from oda_scraper.scrapers.browser_manager import BrowserManager
from oda_scraper.scrapers.extractor import (
    DEFAULT_BASE_URL,
    category_name_from_url,
    clean_subcategory_name,
    extract_subcategory_links,
    filter_excluded_links,
)
from oda_scraper.scrapers.navigator import PageNavigator, PlaywrightPageNavigator
from oda_scraper.scrapers.paginator import DEFAULT_SETTLE_MS, Paginator
from oda_scraper.scrapers.types import (
    CategoryInfo,
    SubcategoryLink,
    SubcategoryResult,
    WorkerResult,
    WorkerTask,
)

logger = structlog.get_logger(__name__)


class Worker:
    """Processes exactly one top-level URL end to end."""

    def __init__(
        self,
        browser_manager_factory: Callable[[], BrowserManager] = BrowserManager,
        navigator_factory: Callable[..., PageNavigator] = PlaywrightPageNavigator,
        settle_ms: int = DEFAULT_SETTLE_MS,
        base_url: str = DEFAULT_BASE_URL,
    ):
        self.browser_manager_factory = browser_manager_factory
        self.navigator_factory = navigator_factory
        self.settle_ms = settle_ms
        self.base_url = base_url

    async def run(self, task: WorkerTask) -> WorkerResult:
        """Scrape ``task.url`` and report the outcome."""
        log = logger.bind(worker=task.label, url=task.url)
        browser_manager: Optional[BrowserManager] = None

        try:
            log.info("worker_started")
            browser_manager = self.browser_manager_factory()
            page = await browser_manager.launch(task.browser_config)
            navigator = self.navigator_factory(page)

            await navigator.navigate(task.url)
            await navigator.wait(self.settle_ms)

            all_links = await extract_subcategory_links(navigator, base_url=self.base_url)
            links = filter_excluded_links(all_links, task.excluded_texts)
            log.info(
                "subcategories_discovered",
                found=len(all_links),
                kept=len(links),
                excluded=list(task.excluded_texts),
            )

            subcategories = await self._scrape_subcategories(navigator, task, links, log)

            category_info = CategoryInfo(
                name=category_name_from_url(task.url),
                subcategories=subcategories,
            )
            log.info(
                "worker_finished",
                total_products=category_info.total_products,
                subcategories=len(subcategories),
                failed_subcategories=sum(1 for sub in subcategories if sub.error),
            )
            return WorkerResult(
                success=True,
                url=task.url,
                url_index=task.url_index,
                category_info=category_info,
            )

        except Exception as e:
            log.error("worker_failed", error=str(e), exc_info=True)
            return WorkerResult.failed(task, str(e) or e.__class__.__name__)

        finally:
            if browser_manager is not None:
                try:
                    await browser_manager.close()
                except Exception as e:
                    log.warning("browser_release_failed", error=str(e))
                else:
                    log.debug("browser_released")

    async def _scrape_subcategories(
        self,
        navigator: PageNavigator,
        task: WorkerTask,
        links: List[SubcategoryLink],
        log,
    ) -> List[SubcategoryResult]:
        """Paginate each subcategory in turn; they share one page, so never concurrently."""
        results = []
        for position, link in enumerate(links, start=1):
            name = clean_subcategory_name(link.text)
            log.info(
                "subcategory_scraping",
                subcategory=name,
                position=f"{position}/{len(links)}",
                subcategory_url=link.href,
            )
            paginator = Paginator(
                navigator,
                max_pages=task.max_pages,
                settle_ms=self.settle_ms,
                base_url=self.base_url,
            )
            try:
                products = await paginator.scrape(link.href, category=name)
            except Exception as e:
                log.error("subcategory_scrape_failed", subcategory=name, error=str(e))
                results.append(
                    SubcategoryResult(name=name, url=link.href, products=[], error=str(e))
                )
                continue

            log.info(
                "subcategory_scraped",
                subcategory=name,
                products=len(products),
                pages=paginator.pages_loaded,
            )
            results.append(SubcategoryResult(name=name, url=link.href, products=products))
        return results
