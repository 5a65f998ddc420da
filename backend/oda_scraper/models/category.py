"""Top-level category (one configured URL)."""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from oda_scraper.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from oda_scraper.models.subcategory import Subcategory
    from oda_scraper.models.item import Item


class Category(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """A scraped category page, uniquely identified by its URL."""

    __tablename__ = "categories"

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    url: Mapped[str] = mapped_column(String(2000), nullable=False, unique=True)
    url_index: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    total_subcategories: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_items: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Scrape status
    scraping_started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    scraping_completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    scraping_success: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, index=True
    )
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    subcategories: Mapped[list["Subcategory"]] = relationship(
        back_populates="category", cascade="all, delete-orphan"
    )
    items: Mapped[list["Item"]] = relationship(back_populates="category")

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name='{self.name}', url='{self.url}')>"
