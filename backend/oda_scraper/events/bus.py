"""In-process publish/subscribe channel for lifecycle events.

The bus is an ordinary object handed to whoever needs it; there is no
module-level emitter. Handlers run one at a time, in registration order,
and each emit finishes only after every handler has returned.
"""

import inspect
from collections import defaultdict
from typing import Any, Awaitable, Callable, DefaultDict, List, Union

import structlog

from oda_scraper.core.exceptions import EventHandlerError
from oda_scraper.events.types import LifecycleEvent, LifecycleEventType

logger = structlog.get_logger(__name__)

EventHandler = Callable[[Any], Union[None, Awaitable[None]]]


class EventBus:
    """Dispatches lifecycle events to subscribed handlers."""

    def __init__(self):
        self._handlers: DefaultDict[LifecycleEventType, List[EventHandler]] = defaultdict(list)
        self.logger = logger.bind(service="event_bus")

    def subscribe(
        self, event_type: LifecycleEventType, handler: EventHandler
    ) -> Callable[[], None]:
        """Register ``handler`` for ``event_type``.

        Handlers may be plain functions or coroutine functions.

        Returns:
            Disposer that unregisters the handler; calling it twice is a no-op
        """
        event_type = LifecycleEventType(event_type)
        self._handlers[event_type].append(handler)

        def dispose() -> None:
            handlers = self._handlers.get(event_type, [])
            if handler in handlers:
                handlers.remove(handler)

        return dispose

    def handler_count(self, event_type: LifecycleEventType) -> int:
        return len(self._handlers.get(LifecycleEventType(event_type), []))

    def clear(self) -> None:
        self._handlers.clear()

    async def emit(self, event: LifecycleEvent) -> None:
        """Deliver ``event`` to every handler of its type.

        All handlers run even if an earlier one fails.

        Raises:
            EventHandlerError: Wrapping the first handler failure
        """
        event_type = event.event_type
        first_error = None

        # Copy so handlers may dispose themselves while being called
        for handler in list(self._handlers.get(event_type, [])):
            try:
                result = handler(event)
                if inspect.isawaitable(result):
                    await result
            except Exception as e:
                self.logger.error(
                    "event_handler_failed",
                    event_type=event_type.value,
                    handler=getattr(handler, "__qualname__", repr(handler)),
                    error=str(e),
                    exc_info=True,
                )
                if first_error is None:
                    first_error = e

        if first_error is not None:
            raise EventHandlerError(event_type.value, first_error) from first_error
