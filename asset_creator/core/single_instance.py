"""Tracks which single-instance types already have a live instance."""

from __future__ import annotations

from typing import FrozenSet, Iterable, Optional

from asset_creator.core.collaborators import ExistenceQuery
from asset_creator.core.events import BusEvent, EventBus, EventType
from asset_creator.core.logging_utils import get_module_logger
from asset_creator.core.type_catalog import TypeDescriptor


class SingleInstanceTracker:
    """Derived view over the catalog; stale after every catalog rebuild.

    Given a bus, the tracker refreshes itself on ``CATALOG_REBUILT``. Create
    it before any other view that reacts to that topic so it is served first.
    """

    def __init__(self, existence: ExistenceQuery, bus: Optional[EventBus] = None):
        self.logger = get_module_logger("SingleInstanceTracker")
        self._existence = existence
        self._bus = bus
        self._instantiated: FrozenSet[str] = frozenset()
        self.subscribe()

    def subscribe(self) -> None:
        if self._bus is not None:
            self._bus.subscribe(EventType.CATALOG_REBUILT, self._on_catalog_rebuilt)

    def unsubscribe(self) -> None:
        if self._bus is not None:
            self._bus.unsubscribe(EventType.CATALOG_REBUILT, self._on_catalog_rebuilt)

    def _on_catalog_rebuilt(self, message: BusEvent) -> None:
        self.refresh(message.payload or ())

    def refresh(self, catalog: Iterable[TypeDescriptor]) -> FrozenSet[str]:
        """Re-query the host for every single-instance type in ``catalog``."""
        found = set()
        for descriptor in catalog:
            if not descriptor.single_instance:
                continue
            try:
                exists = self._existence.exists(descriptor)
            except Exception as e:
                # Unknown counts as absent; the next refresh retries
                self.logger.warning("Existence query failed for %s: %s", descriptor.identity, e)
                continue
            if exists:
                found.add(descriptor.identity)

        self._instantiated = frozenset(found)
        self.logger.debug("%d single-instance types instantiated", len(found))
        return self._instantiated

    def is_instantiated(self, descriptor: TypeDescriptor) -> bool:
        return descriptor.identity in self._instantiated

    @property
    def instantiated(self) -> FrozenSet[str]:
        return self._instantiated


__all__ = ['SingleInstanceTracker']
