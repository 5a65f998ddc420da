"""Individual product scraped from a subcategory."""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Numeric, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from oda_scraper.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from oda_scraper.models.category import Category
    from oda_scraper.models.subcategory import Subcategory


class Item(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    """Product row. Unique per (subcategory_id, name, brand).

    ``brand`` is stored as an empty string rather than NULL so the unique
    constraint also covers brandless products.
    """

    __tablename__ = "items"

    subcategory_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("subcategories.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    category_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("categories.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(String(500), nullable=False)
    brand: Mapped[str] = mapped_column(String(500), nullable=False, default="")

    # Pricing (NOK)
    price: Mapped[Optional[Decimal]] = mapped_column(Numeric(10, 2), nullable=True)
    original_price: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(10, 2),
        nullable=True,
        comment="Price before discount, derived from the discount badge",
    )
    price_per_unit: Mapped[Optional[str]] = mapped_column(
        String(100), nullable=True, comment="Raw unit price text, e.g. 'kr 39,90 /kg'"
    )

    image_url: Mapped[Optional[str]] = mapped_column(String(2000), nullable=True)
    product_url: Mapped[Optional[str]] = mapped_column(String(2000), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    in_stock: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    scraped_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        UniqueConstraint("subcategory_id", "name", "brand", name="uq_item_subcategory_name_brand"),
    )

    category: Mapped["Category"] = relationship(back_populates="items")
    subcategory: Mapped["Subcategory"] = relationship(back_populates="items")

    def __repr__(self) -> str:
        return f"<Item(id={self.id}, name='{self.name[:50]}', price={self.price})>"
