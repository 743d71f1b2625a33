"""
Event bus for invoice desk domain events.

Synchronous in-process pub/sub. Handlers execute immediately in the same
thread as the publisher. Handler errors are logged but never propagate:
the ledger has already accepted the change being announced.
"""

import logging
from collections import defaultdict
from typing import Callable, Type, Union

from core.events import InvoiceDeskEvent

logger = logging.getLogger(__name__)

EventHandler = Callable[[InvoiceDeskEvent], None]
EventKey = Union[str, Type[InvoiceDeskEvent]]


def _event_name(event_type: EventKey) -> str:
    return event_type if isinstance(event_type, str) else event_type.__name__


class EventBus:
    """
    In-process event bus for domain events.

    Handlers are keyed by event class name and may be registered with either
    the class itself or its name. They run in subscription order.
    """

    def __init__(self):
        self._handlers: dict[str, list[EventHandler]] = defaultdict(list)

    def subscribe(self, event_type: EventKey, handler: EventHandler) -> None:
        self._handlers[_event_name(event_type)].append(handler)

    def unsubscribe(self, event_type: EventKey, handler: EventHandler) -> bool:
        """Remove one registration of ``handler``. Returns False if it was not subscribed."""
        handlers = self._handlers.get(_event_name(event_type), [])
        if handler not in handlers:
            return False
        handlers.remove(handler)
        return True

    def handler_count(self, event_type: EventKey) -> int:
        return len(self._handlers.get(_event_name(event_type), []))

    def publish(self, event: InvoiceDeskEvent) -> None:
        name = type(event).__name__
        # Copy so a handler may unsubscribe itself mid-dispatch
        for handler in list(self._handlers.get(name, [])):
            try:
                handler(event)
            except Exception:
                logger.exception(
                    "Handler %s failed for %s (event_id=%s)",
                    getattr(handler, "__name__", repr(handler)),
                    name,
                    event.event_id,
                )
