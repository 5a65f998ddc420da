"""SQLAlchemy models for scraped categories, subcategories and items.

All models are imported here so ``Base.metadata`` knows every table.
"""

from oda_scraper.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin
from oda_scraper.models.category import Category
from oda_scraper.models.subcategory import Subcategory
from oda_scraper.models.item import Item

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDPrimaryKeyMixin",
    "Category",
    "Subcategory",
    "Item",
]
