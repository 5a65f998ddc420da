"""Event handlers that record scrape completion in the database."""

from typing import Callable, List, Optional
from uuid import UUID

import structlog

from oda_scraper.events import (
    AllFinished,
    CategoryFinished,
    EventBus,
    LifecycleEventType,
    SubcategoryFinished,
)
from oda_scraper.services.scrape_repository import ScrapeRepository

logger = structlog.get_logger(__name__)


def _as_uuid(value: Optional[str]) -> Optional[UUID]:
    return UUID(value) if value else None


class PersistenceHandlers:
    """Subscribes to the bus and writes completion status for each event.

    Row creation happens through the repository while results are being
    published; these handlers close the rows out once the matching
    "finished" event arrives.
    """

    def __init__(self, repository: ScrapeRepository):
        self.repository = repository
        self.logger = logger.bind(service="persistence_handlers")
        self._disposers: List[Callable[[], None]] = []

    def register(self, bus: EventBus) -> Callable[[], None]:
        """Subscribe all handlers on ``bus``.

        Returns:
            Disposer that unsubscribes every handler registered here
        """
        self._disposers = [
            bus.subscribe(LifecycleEventType.SUBCATEGORY_FINISHED, self.on_subcategory_finished),
            bus.subscribe(LifecycleEventType.CATEGORY_FINISHED, self.on_category_finished),
            bus.subscribe(LifecycleEventType.ALL_FINISHED, self.on_all_finished),
        ]
        return self.unregister

    def unregister(self) -> None:
        for dispose in self._disposers:
            dispose()
        self._disposers = []

    async def on_subcategory_finished(self, event: SubcategoryFinished) -> None:
        await self.repository.update_subcategory_completion(
            _as_uuid(event.subcategory_id), event.success, event.error
        )
        self.logger.info(
            "subcategory_completed",
            url_index=event.url_index,
            subcategory=event.subcategory_name,
            products=len(event.products),
            success=event.success,
        )

    async def on_category_finished(self, event: CategoryFinished) -> None:
        await self.repository.update_category_completion(
            _as_uuid(event.category_id), event.success, event.error
        )
        status = "successfully" if event.success else "with errors"
        self.logger.info(
            "category_completed",
            url=event.url,
            status=status,
            total_products=event.total_products,
            total_subcategories=event.total_subcategories,
        )

    async def on_all_finished(self, event: AllFinished) -> None:
        self.logger.info(
            "all_scraping_finished",
            total_urls=event.total_urls,
            successful_urls=event.successful_urls,
            failed_urls=event.total_urls - event.successful_urls,
            total_products=event.total_products,
        )
