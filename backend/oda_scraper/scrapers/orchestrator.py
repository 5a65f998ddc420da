"""Multi-URL scraping orchestration.

Fans a list of category URLs out to a fixed pool of isolated workers, waits
for every one of them (a failure never cancels the others), then walks the
results in input order to drive persistence and emit lifecycle events.
Event emission only happens in that single post-collection pass, so the
event order is deterministic even though worker completion order is not.
"""

import asyncio
from typing import Any, Callable, List, Optional, Protocol, Sequence

import structlog

from oda_scraper.core.exceptions import ScraperError
from oda_scraper.events.bus import EventBus
from oda_scraper.events.types import (
    AllFinished,
    CategoryFinished,
    CategoryStarted,
    SubcategoryFinished,
    SubcategoryStarted,
)
from oda_scraper.scrapers.extractor import DEFAULT_EXCLUDED_TEXTS, category_name_from_url
from oda_scraper.scrapers.paginator import DEFAULT_MAX_PAGES
from oda_scraper.scrapers.types import (
    BrowserConfig,
    ProductRecord,
    ScrapeSummary,
    SubcategoryResult,
    WorkerResult,
    WorkerTask,
)
from oda_scraper.scrapers.worker import Worker

logger = structlog.get_logger(__name__)


class ResultRepository(Protocol):
    """Upsert-oriented persistence used while results are being published."""

    async def upsert_category(self, url: str, name: str, url_index: int) -> Any: ...

    async def upsert_subcategory(self, category_id: Any, name: str, url: str) -> Any: ...

    async def save_products(
        self, category_id: Any, subcategory_id: Any, products: List[ProductRecord]
    ) -> None: ...


class NullRepository:
    """Repository used when nothing should be written; hands out no ids."""

    async def upsert_category(self, url: str, name: str, url_index: int) -> None:
        return None

    async def upsert_subcategory(self, category_id: Any, name: str, url: str) -> None:
        return None

    async def save_products(
        self, category_id: Any, subcategory_id: Any, products: List[ProductRecord]
    ) -> None:
        return None


def _id(value: Any) -> Optional[str]:
    return str(value) if value is not None else None


class ScrapeOrchestrator:
    """Runs one worker per URL on a bounded pool and publishes the outcome."""

    def __init__(
        self,
        bus: EventBus,
        repository: Optional[ResultRepository] = None,
        worker_factory: Callable[[], Worker] = Worker,
        max_workers: Optional[int] = None,
    ):
        """Initialize the orchestrator.

        Args:
            bus: Event bus the lifecycle events are emitted on
            repository: Persistence for categories/subcategories/items
            worker_factory: Builds one Worker per pool slot
            max_workers: Pool size; None or 0 means one worker per URL
        """
        self.bus = bus
        self.repository = repository or NullRepository()
        self.worker_factory = worker_factory
        self.max_workers = max_workers
        self.logger = logger.bind(service="orchestrator")

    @staticmethod
    def build_tasks(
        urls: Sequence[str],
        browser_config: BrowserConfig,
        max_pages: int = DEFAULT_MAX_PAGES,
        excluded_texts: Sequence[str] = DEFAULT_EXCLUDED_TEXTS,
    ) -> List[WorkerTask]:
        total = len(urls)
        return [
            WorkerTask(
                url=url,
                url_index=index,
                total_urls=total,
                browser_config=browser_config,
                max_pages=max_pages,
                excluded_texts=tuple(excluded_texts),
            )
            for index, url in enumerate(urls)
        ]

    async def run(
        self,
        urls: Sequence[str],
        browser_config: Optional[BrowserConfig] = None,
        max_pages: int = DEFAULT_MAX_PAGES,
        excluded_texts: Sequence[str] = DEFAULT_EXCLUDED_TEXTS,
    ) -> ScrapeSummary:
        """Scrape every URL concurrently and publish the results.

        Returns:
            ScrapeSummary with per-URL results in input order
        """
        tasks = self.build_tasks(
            urls, browser_config or BrowserConfig(), max_pages, excluded_texts
        )
        self.logger.info(
            "scrape_run_started",
            total_urls=len(tasks),
            pool_size=self._pool_size(len(tasks)),
            max_pages=max_pages,
        )

        results = await self.collect(tasks)
        summary = await self.publish(results)

        self.logger.info(
            "scrape_run_finished",
            total_urls=summary.total_urls,
            successful_urls=summary.successful_urls,
            total_products=summary.total_products,
        )
        return summary

    def _pool_size(self, task_count: int) -> int:
        if not self.max_workers:
            return task_count
        return max(1, min(self.max_workers, task_count))

    async def collect(self, tasks: List[WorkerTask]) -> List[WorkerResult]:
        """Run all tasks on the worker pool and settle every outcome.

        Each task gets a one-shot future; a raised exception is turned into a
        failed WorkerResult instead of short-circuiting the others.
        """
        if not tasks:
            return []

        loop = asyncio.get_running_loop()
        queue: asyncio.Queue = asyncio.Queue()
        futures = []
        for task in tasks:
            future = loop.create_future()
            futures.append(future)
            queue.put_nowait((task, future))

        consumers = [
            asyncio.create_task(self._consume(slot, queue))
            for slot in range(self._pool_size(len(tasks)))
        ]

        await asyncio.gather(*consumers, return_exceptions=True)
        # A slot that died on a BaseException leaves its queued tasks behind
        for task, future in zip(tasks, futures):
            if not future.done():
                future.set_exception(ScraperError(task.url, "worker pool stopped before the task ran"))
        outcomes = await asyncio.gather(*futures, return_exceptions=True)

        results = []
        for task, outcome in zip(tasks, outcomes):
            if isinstance(outcome, BaseException):
                self.logger.error(
                    "worker_crashed",
                    url=task.url,
                    url_index=task.url_index,
                    error=str(outcome),
                )
                results.append(WorkerResult.failed(task, str(outcome) or outcome.__class__.__name__))
            else:
                results.append(outcome)
        return results

    async def _consume(self, slot: int, queue: asyncio.Queue) -> None:
        worker = None
        while True:
            try:
                task, future = queue.get_nowait()
            except asyncio.QueueEmpty:
                return
            try:
                if worker is None:
                    worker = self.worker_factory()
                self.logger.debug("worker_slot_assigned", slot=slot, url=task.url)
                result = await worker.run(task)
            except Exception as e:
                future.set_exception(e)
            except BaseException:
                future.cancel()
                raise
            else:
                future.set_result(result)
            finally:
                queue.task_done()

    async def publish(self, results: List[WorkerResult]) -> ScrapeSummary:
        """Persist results and emit lifecycle events, strictly in input order."""
        summary = ScrapeSummary(total_urls=len(results), results=list(results))

        for result in sorted(results, key=lambda r: r.url_index):
            if result.success:
                summary.successful_urls += 1
            try:
                summary.total_products += await self._publish_category(result)
            except Exception as e:
                self.logger.error(
                    "category_publish_failed",
                    url=result.url,
                    url_index=result.url_index,
                    error=str(e),
                    exc_info=True,
                )

        await self._emit_logged(
            AllFinished(
                total_urls=summary.total_urls,
                successful_urls=summary.successful_urls,
                total_products=summary.total_products,
            )
        )
        return summary

    async def _publish_category(self, result: WorkerResult) -> int:
        """Emit the started/finished sequence for one URL.

        Returns:
            Number of products reported for the category
        """
        log = self.logger.bind(url=result.url, url_index=result.url_index)
        category_name = (
            result.category_info.name
            if result.success and result.category_info
            else category_name_from_url(result.url)
        )

        await self._emit_logged(
            CategoryStarted(
                url=result.url,
                url_index=result.url_index,
                category_name=category_name,
            )
        )

        category_id = None
        error = result.error
        success = result.success
        total_products = 0
        subcategories: List[SubcategoryResult] = []

        try:
            category_id = await self.repository.upsert_category(
                result.url, category_name, result.url_index
            )
        except Exception as e:
            log.error("category_upsert_failed", error=str(e))
            success = False
            error = error or f"Failed to persist category: {e}"

        if result.success and result.category_info:
            subcategories = result.category_info.subcategories
            for subcategory in subcategories:
                total_products += await self._publish_subcategory(
                    result, category_id, subcategory
                )
        elif not result.success:
            log.warning("category_failed", error=result.error)

        await self._emit_logged(
            CategoryFinished(
                url=result.url,
                url_index=result.url_index,
                category_id=_id(category_id),
                total_products=total_products,
                total_subcategories=len(subcategories),
                success=success,
                error=error,
            )
        )
        log.info(
            "category_published",
            category=category_name,
            success=success,
            total_products=total_products,
            total_subcategories=len(subcategories),
        )
        return total_products

    async def _publish_subcategory(
        self, result: WorkerResult, category_id: Any, subcategory: SubcategoryResult
    ) -> int:
        subcategory_id = None
        try:
            await self.bus.emit(
                SubcategoryStarted(
                    url=result.url,
                    url_index=result.url_index,
                    category_id=_id(category_id),
                    subcategory_name=subcategory.name,
                    subcategory_url=subcategory.url,
                )
            )
            subcategory_id = await self.repository.upsert_subcategory(
                category_id, subcategory.name, subcategory.url
            )
            await self.repository.save_products(
                category_id, subcategory_id, subcategory.products
            )
        except Exception as e:
            self.logger.error(
                "subcategory_persist_failed",
                url=result.url,
                subcategory=subcategory.name,
                error=str(e),
            )
            success, error = False, str(e)
        else:
            # Pagination errors were already absorbed by the worker as an
            # empty bucket; surface them on the finished event
            success, error = subcategory.error is None, subcategory.error

        await self._emit_logged(
            SubcategoryFinished(
                url=result.url,
                url_index=result.url_index,
                category_id=_id(category_id),
                subcategory_id=_id(subcategory_id),
                subcategory_name=subcategory.name,
                products=list(subcategory.products),
                success=success,
                error=error,
            )
        )
        return len(subcategory.products)

    async def _emit_logged(self, event) -> None:
        """Emit where a handler failure must not stop the pass."""
        try:
            await self.bus.emit(event)
        except Exception as e:
            self.logger.error(
                "event_emit_failed",
                event_type=event.event_type.value,
                error=str(e),
            )
