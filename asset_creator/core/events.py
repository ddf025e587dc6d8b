"""
Event Bus - Typed publish/subscribe channel between the asset creator stores.

Stores never reference each other directly: the cart, history, favorites
and search engine subscribe to the topics they care about on a bus instance
handed to their constructors.

Delivery is synchronous and in subscription order. A handler that publishes
again is served immediately, so a publish returns only after every
consequence has been processed.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from asset_creator.core.logging_utils import get_module_logger


class EventType(Enum):
    """Topics carried by the bus."""
    # Favorites
    FAVORITE_ADDED = "favorite_added"
    FAVORITE_REMOVED = "favorite_removed"
    FAVORITES_CLEARED = "favorites_cleared"

    # Cart requests
    CART_ADD_REQUESTED = "cart_add_requested"
    CART_REMOVE_REQUESTED = "cart_remove_requested"

    # Creation / history
    ASSET_CREATED = "asset_created"
    HISTORY_CLEARED = "history_cleared"

    # Settings, one topic per field
    HISTORY_CAPACITY_CHANGED = "history_capacity_changed"
    FAVORITES_CAPACITY_CHANGED = "favorites_capacity_changed"
    OVERWRITE_EXISTING_CHANGED = "overwrite_existing_changed"
    PING_ON_CREATE_CHANGED = "ping_on_create_changed"
    SINGLE_INSTANCE_VISIBILITY_CHANGED = "single_instance_visibility_changed"

    # Catalog lifecycle
    CATALOG_REBUILT = "catalog_rebuilt"


SETTINGS_EVENTS = frozenset({
    EventType.HISTORY_CAPACITY_CHANGED,
    EventType.FAVORITES_CAPACITY_CHANGED,
    EventType.OVERWRITE_EXISTING_CHANGED,
    EventType.PING_ON_CREATE_CHANGED,
    EventType.SINGLE_INSTANCE_VISIBILITY_CHANGED,
})


@dataclass
class BusEvent:
    """A single delivery on the bus."""
    event: EventType
    payload: Any = None
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class SettingChange:
    """Payload of every settings topic."""
    name: str
    old_value: Any
    new_value: Any


@dataclass(frozen=True)
class AssetCreated:
    """Payload of ASSET_CREATED."""
    type: Any
    instance: Any
    path: Optional[str] = None


EventHandler = Callable[[BusEvent], None]


class EventBus:
    """Explicit publish/subscribe bus with per-topic subscriber lists."""

    def __init__(self):
        self.logger = get_module_logger("EventBus")
        self._subscribers: Dict[EventType, List[EventHandler]] = {}

    def subscribe(self, event: EventType, handler: EventHandler) -> None:
        """Register ``handler`` for ``event``; registering twice is a no-op."""
        handlers = self._subscribers.setdefault(event, [])
        if handler not in handlers:
            handlers.append(handler)
            self.logger.debug("Subscribed %s to %s", _handler_name(handler), event.value)

    def unsubscribe(self, event: EventType, handler: EventHandler) -> None:
        handlers = self._subscribers.get(event)
        if handlers and handler in handlers:
            handlers.remove(handler)
            self.logger.debug("Unsubscribed %s from %s", _handler_name(handler), event.value)

    def subscriber_count(self, event: Optional[EventType] = None) -> int:
        if event is not None:
            return len(self._subscribers.get(event, ()))
        return sum(len(handlers) for handlers in self._subscribers.values())

    def publish(self, event: EventType, payload: Any = None) -> BusEvent:
        """Deliver ``payload`` to every subscriber of ``event``.

        A failing handler is logged and skipped; later handlers still run.
        """
        message = BusEvent(event=event, payload=payload)

        # Snapshot: handlers may (un)subscribe while we deliver
        for handler in list(self._subscribers.get(event, ())):
            try:
                handler(message)
            except Exception as e:
                self.logger.error(
                    "Handler %s error handling %s: %s",
                    _handler_name(handler),
                    event.value,
                    e,
                    exc_info=True,
                )
        return message


def _handler_name(handler: EventHandler) -> str:
    return getattr(handler, '__qualname__', None) or repr(handler)


__all__ = [
    'EventType',
    'SETTINGS_EVENTS',
    'BusEvent',
    'SettingChange',
    'AssetCreated',
    'EventHandler',
    'EventBus',
]
