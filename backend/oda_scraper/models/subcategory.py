"""Subcategory (choice chip) within a category."""

import uuid
from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from oda_scraper.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from oda_scraper.models.category import Category
    from oda_scraper.models.item import Item


class Subcategory(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Subcategory page, unique per (category_id, url)."""

    __tablename__ = "subcategories"

    category_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("categories.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    url: Mapped[str] = mapped_column(String(2000), nullable=False)
    total_items: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    scraping_started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    scraping_completed_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    scraping_success: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, index=True
    )
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        UniqueConstraint("category_id", "url", name="uq_subcategory_category_url"),
    )

    category: Mapped["Category"] = relationship(back_populates="subcategories")
    items: Mapped[list["Item"]] = relationship(
        back_populates="subcategory", cascade="all, delete-orphan"
    )

    def __repr__(self) -> str:
        return f"<Subcategory(id={self.id}, name='{self.name}', category_id={self.category_id})>"
