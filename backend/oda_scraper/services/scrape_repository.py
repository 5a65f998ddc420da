"""Upsert-oriented persistence for scraped categories, subcategories and items.

Each public method runs in its own session from the injected factory and
commits before returning, so one failed subcategory never rolls back the
rows written for the ones before it.
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import UUID

import structlog
from sqlalchemy import and_, delete, func, select, text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from oda_scraper.core.exceptions import PersistenceError
from oda_scraper.models import Category, Item, Subcategory
from oda_scraper.scrapers.types import ProductRecord
from oda_scraper.services.price_parser import PriceParser

logger = structlog.get_logger(__name__)


class ScrapeRepository:
    """Database service that handles all writes made during a scrape."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        """Initialize the repository.

        Args:
            session_factory: Async session factory for database access
        """
        self.session_factory = session_factory
        self.logger = logger.bind(service="scrape_repository")

    async def test_connection(self) -> bool:
        """Check that the database answers a trivial query."""
        try:
            async with self.session_factory() as db:
                await db.execute(text("SELECT 1"))
            return True
        except Exception as e:
            self.logger.error("database_connection_failed", error=str(e))
            return False

    async def upsert_category(self, url: str, name: str, url_index: int) -> UUID:
        """Create or reset the category row for ``url`` at scrape start.

        Returns:
            Category id
        """
        now = datetime.now(timezone.utc)
        try:
            async with self.session_factory() as db:
                result = await db.execute(select(Category).where(Category.url == url))
                category = result.scalar_one_or_none()

                if category:
                    category.name = name
                    category.url_index = url_index
                    category.scraping_started_at = now
                    category.scraping_completed_at = None
                    category.scraping_success = False
                    category.error_message = None
                else:
                    category = Category(
                        name=name,
                        url=url,
                        url_index=url_index,
                        total_subcategories=0,
                        total_items=0,
                        scraping_started_at=now,
                        scraping_success=False,
                    )
                    db.add(category)

                await db.commit()
                category_id = category.id
        except Exception as e:
            self.logger.error("category_upsert_failed", name=name, url=url, error=str(e))
            raise PersistenceError("upsert category", str(e)) from e

        self.logger.info("category_upserted", name=name, category_id=str(category_id))
        return category_id

    async def upsert_subcategory(self, category_id: UUID, name: str, url: str) -> UUID:
        """Create or reset a subcategory, clearing the items of a previous run.

        Returns:
            Subcategory id
        """
        if category_id is None:
            raise PersistenceError("upsert subcategory", "category was not persisted")

        now = datetime.now(timezone.utc)
        try:
            async with self.session_factory() as db:
                result = await db.execute(
                    select(Subcategory).where(and_(
                        Subcategory.category_id == category_id,
                        Subcategory.url == url,
                    ))
                )
                subcategory = result.scalar_one_or_none()

                if subcategory:
                    await db.execute(delete(Item).where(Item.subcategory_id == subcategory.id))
                    self.logger.info("subcategory_items_cleared", name=name)
                    subcategory.name = name
                    subcategory.total_items = 0
                    subcategory.scraping_started_at = now
                    subcategory.scraping_completed_at = None
                    subcategory.scraping_success = False
                    subcategory.error_message = None
                else:
                    subcategory = Subcategory(
                        category_id=category_id,
                        name=name,
                        url=url,
                        total_items=0,
                        scraping_started_at=now,
                        scraping_success=False,
                    )
                    db.add(subcategory)

                await db.commit()
                subcategory_id = subcategory.id
        except Exception as e:
            self.logger.error("subcategory_upsert_failed", name=name, url=url, error=str(e))
            raise PersistenceError("upsert subcategory", str(e)) from e

        self.logger.info("subcategory_upserted", name=name, subcategory_id=str(subcategory_id))
        return subcategory_id

    async def save_products(
        self,
        category_id: UUID,
        subcategory_id: UUID,
        products: List[ProductRecord],
    ) -> int:
        """Upsert products for a subcategory keyed by (name, brand).

        Returns:
            Number of rows written
        """
        if not products:
            self.logger.info("no_products_to_save", subcategory_id=str(subcategory_id))
            return 0
        if category_id is None or subcategory_id is None:
            raise PersistenceError("save products", "category or subcategory was not persisted")

        now = datetime.now(timezone.utc)
        try:
            async with self.session_factory() as db:
                result = await db.execute(
                    select(Item).where(Item.subcategory_id == subcategory_id)
                )
                existing: Dict[tuple, Item] = {
                    (item.name, item.brand): item for item in result.scalars().all()
                }

                for product in products:
                    key = (product.name, product.brand or "")
                    item = existing.get(key)
                    if item is None:
                        item = Item(
                            subcategory_id=subcategory_id,
                            category_id=category_id,
                            name=product.name,
                            brand=product.brand or "",
                        )
                        db.add(item)
                        existing[key] = item

                    item.price = PriceParser.parse_price(product.price)
                    item.original_price = PriceParser.original_price(product.price, product.discount)
                    item.price_per_unit = product.price_per_kilo
                    item.image_url = product.image
                    item.product_url = product.link
                    item.description = product.description
                    item.in_stock = True
                    item.scraped_at = now

                await db.flush()
                await self._refresh_totals(db, category_id, subcategory_id)
                await db.commit()
                written = len({(product.name, product.brand or "") for product in products})
        except Exception as e:
            self.logger.error(
                "products_upsert_failed",
                subcategory_id=str(subcategory_id),
                error=str(e),
            )
            raise PersistenceError("upsert products", str(e)) from e

        self.logger.info(
            "products_upserted",
            subcategory_id=str(subcategory_id),
            received=len(products),
            stored=written,
        )
        return written

    async def update_subcategory_completion(
        self, subcategory_id: UUID, success: bool, error: Optional[str] = None
    ) -> None:
        """Mark a subcategory as finished."""
        await self._complete(Subcategory, subcategory_id, success, error)

    async def update_category_completion(
        self, category_id: UUID, success: bool, error: Optional[str] = None
    ) -> None:
        """Mark a category as finished."""
        await self._complete(Category, category_id, success, error)

    async def get_category_stats(self, category_id: UUID) -> Dict[str, int]:
        """Subcategory and item counts for a category.

        Returns:
            Dict with total_subcategories, total_items, completed_subcategories
        """
        async with self.session_factory() as db:
            total_subcategories = await db.scalar(
                select(func.count(Subcategory.id)).where(Subcategory.category_id == category_id)
            )
            completed = await db.scalar(
                select(func.count(Subcategory.id)).where(and_(
                    Subcategory.category_id == category_id,
                    Subcategory.scraping_completed_at.is_not(None),
                ))
            )
            total_items = await db.scalar(
                select(func.count(Item.id)).where(Item.category_id == category_id)
            )
        return {
            "total_subcategories": total_subcategories or 0,
            "total_items": total_items or 0,
            "completed_subcategories": completed or 0,
        }

    async def _complete(self, model, row_id: UUID, success: bool, error: Optional[str]) -> None:
        if row_id is None:
            return
        try:
            async with self.session_factory() as db:
                row = await db.get(model, row_id)
                if row is None:
                    self.logger.warning(
                        "completion_target_missing",
                        table=model.__tablename__,
                        id=str(row_id),
                    )
                    return
                row.scraping_completed_at = datetime.now(timezone.utc)
                row.scraping_success = success
                row.error_message = error
                if isinstance(row, Category):
                    row.total_subcategories = await db.scalar(
                        select(func.count(Subcategory.id)).where(Subcategory.category_id == row_id)
                    ) or 0
                    row.total_items = await db.scalar(
                        select(func.count(Item.id)).where(Item.category_id == row_id)
                    ) or 0
                await db.commit()
        except Exception as e:
            self.logger.error(
                "completion_update_failed",
                table=model.__tablename__,
                error=str(e),
            )
            raise PersistenceError(f"update {model.__tablename__} completion", str(e)) from e

        self.logger.info(
            "completion_updated",
            table=model.__tablename__,
            id=str(row_id),
            success=success,
        )

    async def _refresh_totals(
        self, db: AsyncSession, category_id: UUID, subcategory_id: UUID
    ) -> None:
        subcategory_items = await db.scalar(
            select(func.count(Item.id)).where(Item.subcategory_id == subcategory_id)
        )
        category_items = await db.scalar(
            select(func.count(Item.id)).where(Item.category_id == category_id)
        )
        category_subcategories = await db.scalar(
            select(func.count(Subcategory.id)).where(Subcategory.category_id == category_id)
        )

        subcategory = await db.get(Subcategory, subcategory_id)
        if subcategory:
            subcategory.total_items = subcategory_items or 0
        category = await db.get(Category, category_id)
        if category:
            category.total_items = category_items or 0
            category.total_subcategories = category_subcategories or 0
