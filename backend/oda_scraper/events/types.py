"""Lifecycle events emitted by the orchestrator."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, ClassVar, List, Optional, Union

if TYPE_CHECKING:
    from oda_scraper.scrapers.types import ProductRecord


class LifecycleEventType(str, Enum):
    CATEGORY_STARTED = "category_started"
    SUBCATEGORY_STARTED = "subcategory_started"
    SUBCATEGORY_FINISHED = "subcategory_finished"
    CATEGORY_FINISHED = "category_finished"
    ALL_FINISHED = "all_finished"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CategoryStarted:
    event_type: ClassVar[LifecycleEventType] = LifecycleEventType.CATEGORY_STARTED

    url: str
    url_index: int
    category_name: str
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class SubcategoryStarted:
    event_type: ClassVar[LifecycleEventType] = LifecycleEventType.SUBCATEGORY_STARTED

    url: str
    url_index: int
    category_id: Optional[str]
    subcategory_name: str
    subcategory_url: str
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class SubcategoryFinished:
    event_type: ClassVar[LifecycleEventType] = LifecycleEventType.SUBCATEGORY_FINISHED

    url: str
    url_index: int
    category_id: Optional[str]
    subcategory_id: Optional[str]
    subcategory_name: str
    products: List["ProductRecord"]
    success: bool
    error: Optional[str] = None
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class CategoryFinished:
    event_type: ClassVar[LifecycleEventType] = LifecycleEventType.CATEGORY_FINISHED

    url: str
    url_index: int
    category_id: Optional[str]
    total_products: int
    total_subcategories: int
    success: bool
    error: Optional[str] = None
    timestamp: datetime = field(default_factory=_utcnow)


@dataclass(frozen=True)
class AllFinished:
    event_type: ClassVar[LifecycleEventType] = LifecycleEventType.ALL_FINISHED

    total_urls: int
    successful_urls: int
    total_products: int
    timestamp: datetime = field(default_factory=_utcnow)


LifecycleEvent = Union[
    CategoryStarted,
    SubcategoryStarted,
    SubcategoryFinished,
    CategoryFinished,
    AllFinished,
]
