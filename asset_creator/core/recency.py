"""
Recency Lists - History and Favorites.

Both are bounded, de-duplicated, most-recent-last lists of type
descriptors. Touching an item moves it to the end; overflow evicts from
the front. The capacity is read from the settings store on every touch,
so lowering it trims lazily on the next touch rather than immediately.
"""

from __future__ import annotations

from typing import Callable, Iterable, Iterator, List, Optional, Tuple

from asset_creator.core.events import AssetCreated, BusEvent, EventBus, EventType
from asset_creator.core.logging_utils import get_module_logger
from asset_creator.core.settings import SettingsStore, Visibility
from asset_creator.core.single_instance import SingleInstanceTracker
from asset_creator.core.type_catalog import TypeDescriptor


class RecencyList:
    """Ordered list of descriptors, most recently touched last."""

    def __init__(self, capacity: Callable[[], int]):
        self._capacity = capacity
        self._items: List[TypeDescriptor] = []

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[TypeDescriptor]:
        return iter(self._items)

    def __contains__(self, descriptor: object) -> bool:
        return descriptor in self._items

    @property
    def capacity(self) -> int:
        return self._capacity()

    @property
    def items(self) -> Tuple[TypeDescriptor, ...]:
        return tuple(self._items)

    def touch(self, descriptor: TypeDescriptor) -> List[TypeDescriptor]:
        """Move or append ``descriptor`` to the end; return what was evicted."""
        if descriptor is None:
            raise TypeError("cannot touch a recency list with None")

        if descriptor in self._items:
            self._items.remove(descriptor)
        self._items.append(descriptor)

        capacity = self._capacity()
        evicted: List[TypeDescriptor] = []
        while len(self._items) > capacity:
            evicted.append(self._items.pop(0))
        return evicted

    def remove(self, descriptor: TypeDescriptor) -> bool:
        if descriptor in self._items:
            self._items.remove(descriptor)
            return True
        return False

    def clear(self) -> None:
        self._items.clear()

    def restore(self, descriptors: Iterable[TypeDescriptor]) -> None:
        """Replace the contents in the given order, without trimming."""
        self._items.clear()
        for descriptor in descriptors:
            if descriptor in self._items:
                self._items.remove(descriptor)
            self._items.append(descriptor)


class _RecencyStore:
    """Bus-driven wrapper shared by history and favorites."""

    _label = "Recency"

    def __init__(self, bus: EventBus, capacity: Callable[[], int]):
        self.logger = get_module_logger(f"{self._label}Store")
        self._bus = bus
        self._list = RecencyList(capacity)
        self._subscribed = False
        self.subscribe()

    # ------------------------------------------------------------------
    # Bus wiring

    def _handlers(self):
        raise NotImplementedError

    def subscribe(self) -> None:
        if self._subscribed:
            return
        for event, handler in self._handlers():
            self._bus.subscribe(event, handler)
        self._subscribed = True

    def unsubscribe(self) -> None:
        if not self._subscribed:
            return
        for event, handler in self._handlers():
            self._bus.unsubscribe(event, handler)
        self._subscribed = False

    # ------------------------------------------------------------------
    # List surface

    def __len__(self) -> int:
        return len(self._list)

    def __iter__(self) -> Iterator[TypeDescriptor]:
        return iter(self._list)

    def __contains__(self, descriptor: object) -> bool:
        return descriptor in self._list

    @property
    def items(self) -> Tuple[TypeDescriptor, ...]:
        return self._list.items

    @property
    def capacity(self) -> int:
        return self._list.capacity

    def contains(self, descriptor: TypeDescriptor) -> bool:
        return descriptor in self._list

    def touch(self, descriptor: TypeDescriptor) -> None:
        evicted = self._list.touch(descriptor)
        for old in evicted:
            self.logger.debug("Evicted %s (capacity %d)", old.identity, self._list.capacity)

    def remove(self, descriptor: TypeDescriptor) -> None:
        if self._list.remove(descriptor):
            self.logger.debug("Removed %s", descriptor.identity)

    def clear(self) -> None:
        self._list.clear()
        self.logger.info("%s cleared", self._label)

    def restore(self, descriptors: Iterable[TypeDescriptor]) -> None:
        self._list.restore(descriptors)
        self.logger.debug("Restored %d entries", len(self._list))


class HistoryStore(_RecencyStore):
    """Types the operator created most recently."""

    _label = "History"

    def __init__(self, bus: EventBus, settings: SettingsStore):
        self._settings = settings
        super().__init__(bus, lambda: settings.history_capacity)

    def _handlers(self):
        return (
            (EventType.ASSET_CREATED, self._on_asset_created),
            (EventType.HISTORY_CLEARED, self._on_clear),
        )

    def _on_asset_created(self, message: BusEvent) -> None:
        created: Optional[AssetCreated] = message.payload
        if created is None or created.type is None:
            return
        self.touch(created.type)

    def _on_clear(self, message: BusEvent) -> None:
        self.clear()


class FavoritesStore(_RecencyStore):
    """Types the operator pinned, filtered by the single-instance policy."""

    _label = "Favorites"

    def __init__(self, bus: EventBus, settings: SettingsStore, tracker: SingleInstanceTracker):
        self._settings = settings
        self._tracker = tracker
        super().__init__(bus, lambda: settings.favorites_capacity)

    def _handlers(self):
        return (
            (EventType.FAVORITE_ADDED, self._on_added),
            (EventType.FAVORITE_REMOVED, self._on_removed),
            (EventType.FAVORITES_CLEARED, self._on_clear),
        )

    def _on_added(self, message: BusEvent) -> None:
        self.touch(message.payload)

    def _on_removed(self, message: BusEvent) -> None:
        self.remove(message.payload)

    def _on_clear(self, message: BusEvent) -> None:
        self.clear()

    def visible(self) -> Tuple[TypeDescriptor, ...]:
        """Favorites to surface; instantiated single-instance types drop out under HIDDEN."""
        if self._settings.single_instance_visibility is Visibility.HIDDEN:
            return tuple(d for d in self._list if not self._tracker.is_instantiated(d))
        return self._list.items

    def is_interactive(self, descriptor: TypeDescriptor) -> bool:
        """False for instantiated single-instance types (shown greyed out under DISABLED)."""
        return not self._tracker.is_instantiated(descriptor)


__all__ = ['RecencyList', 'HistoryStore', 'FavoritesStore']
