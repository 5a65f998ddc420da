"""Lifecycle events and the bus that carries them to persistence handlers."""

from .bus import EventBus, EventHandler
from .types import (
    AllFinished,
    CategoryFinished,
    CategoryStarted,
    LifecycleEvent,
    LifecycleEventType,
    SubcategoryFinished,
    SubcategoryStarted,
)

__all__ = [
    "EventBus",
    "EventHandler",
    "LifecycleEvent",
    "LifecycleEventType",
    "CategoryStarted",
    "SubcategoryStarted",
    "SubcategoryFinished",
    "CategoryFinished",
    "AllFinished",
]
