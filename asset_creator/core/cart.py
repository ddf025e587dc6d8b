"""
Cart Store - Pending creation requests.

The cart holds at most one entry per type. Adding an already queued type
bumps its quantity; an entry whose quantity would fall to zero is removed.
Single-instance types never go above quantity 1, and a unit is refused when
its type already has its one instance.
``drain_and_create`` hands every unit to the host's asset factory and
empties the cart; one failing unit never stops the rest of the batch.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from asset_creator.core.collaborators import AssetFactory
from asset_creator.core.events import AssetCreated, BusEvent, EventBus, EventType
from asset_creator.core.logging_utils import get_module_logger
from asset_creator.core.paths import ASSET_EXTENSION, DEFAULT_ASSET_DIR
from asset_creator.core.settings import SettingsStore
from asset_creator.core.single_instance import SingleInstanceTracker
from asset_creator.core.type_catalog import TypeDescriptor

ASSETS_ROOT_MARKER = "Assets/"


def default_asset_path(descriptor: TypeDescriptor, directory: str = DEFAULT_ASSET_DIR) -> str:
    return f"{directory.rstrip('/')}/{descriptor.name}{ASSET_EXTENSION}"


def normalize_target_path(path: Optional[str]) -> Optional[str]:
    """Trim an absolute path so it starts at its ``Assets/`` segment."""
    if not path:
        return None
    normalized = path.replace("\\", "/")
    index = normalized.find(ASSETS_ROOT_MARKER)
    if index != -1:
        normalized = normalized[index:]
    return normalized


class CartEntry:
    """One queued type with its quantity and optional target path."""

    __slots__ = ('_type', '_quantity', '_target_path')

    def __init__(self, descriptor: TypeDescriptor, quantity: int = 1, target_path: Optional[str] = None):
        if descriptor is None:
            raise TypeError("CartEntry type cannot be None")
        if quantity < 1:
            raise ValueError(f"CartEntry quantity cannot be lower than 1 (got {quantity})")
        self._type = descriptor
        self._quantity = quantity
        self._target_path = normalize_target_path(target_path)

    def __repr__(self) -> str:
        return f"CartEntry(type={self._type.identity}, quantity={self._quantity}, target_path={self._target_path!r})"

    @property
    def type(self) -> TypeDescriptor:
        return self._type

    @property
    def quantity(self) -> int:
        return self._quantity

    @property
    def target_path(self) -> Optional[str]:
        return self._target_path

    @property
    def display_path(self) -> Optional[str]:
        if not self._target_path:
            return None
        return self._target_path.rsplit('/', 1)[-1]


class SingleInstanceExists(Exception):
    """A single-instance type was asked for a second instance."""


@dataclass
class CreationFailure:
    type: TypeDescriptor
    path: str
    error: BaseException


@dataclass
class CreationReport:
    """Outcome of one ``drain_and_create`` call."""
    created: List[AssetCreated] = field(default_factory=list)
    failures: List[CreationFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


class CartStore:
    """Ordered collection of cart entries, mutated through bus requests."""

    def __init__(
        self,
        bus: EventBus,
        settings: SettingsStore,
        factory: AssetFactory,
        tracker: Optional[SingleInstanceTracker] = None,
        *,
        default_directory: str = DEFAULT_ASSET_DIR,
    ):
        self.logger = get_module_logger("CartStore")
        self._bus = bus
        self._settings = settings
        self._factory = factory
        self._tracker = tracker
        self._default_directory = default_directory
        self._entries: List[CartEntry] = []
        self._subscribed = False
        self.subscribe()

    # =========================================================================
    # Bus wiring
    # =========================================================================

    def subscribe(self) -> None:
        if self._subscribed:
            return
        self._bus.subscribe(EventType.CART_ADD_REQUESTED, self._on_add_requested)
        self._bus.subscribe(EventType.CART_REMOVE_REQUESTED, self._on_remove_requested)
        self._subscribed = True

    def unsubscribe(self) -> None:
        if not self._subscribed:
            return
        self._bus.unsubscribe(EventType.CART_ADD_REQUESTED, self._on_add_requested)
        self._bus.unsubscribe(EventType.CART_REMOVE_REQUESTED, self._on_remove_requested)
        self._subscribed = False

    def _on_add_requested(self, message: BusEvent) -> None:
        self.add(message.payload)

    def _on_remove_requested(self, message: BusEvent) -> None:
        self.remove(message.payload)

    # =========================================================================
    # Queries
    # =========================================================================

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self):
        return iter(tuple(self._entries))

    @property
    def count(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> Tuple[CartEntry, ...]:
        return tuple(self._entries)

    def entry_for(self, descriptor: TypeDescriptor) -> Optional[CartEntry]:
        for entry in self._entries:
            if entry.type == descriptor:
                return entry
        return None

    def contains(self, descriptor: TypeDescriptor) -> bool:
        return self.entry_for(descriptor) is not None

    @staticmethod
    def can_decrement(entry: CartEntry) -> bool:
        """UI guard: the "-" control is disabled at quantity 1."""
        return entry.quantity > 1

    @staticmethod
    def can_increment(entry: CartEntry) -> bool:
        """UI guard: the "+" control is disabled for single-instance types."""
        return not entry.type.single_instance

    def is_instantiated(self, descriptor: TypeDescriptor) -> bool:
        return self._tracker is not None and self._tracker.is_instantiated(descriptor)

    # =========================================================================
    # Mutations
    # =========================================================================

    def add(self, descriptor: TypeDescriptor) -> Optional[CartEntry]:
        """Queue ``descriptor``; None when its single instance already exists."""
        if descriptor is None:
            raise TypeError("cannot add None to the cart")

        entry = self.entry_for(descriptor)
        if entry is not None:
            if self.can_increment(entry):
                entry._quantity += 1
                self.logger.debug("%s quantity -> %d", descriptor.identity, entry.quantity)
            return entry

        if self.is_instantiated(descriptor):
            self.logger.info("Not queuing %s: its single instance already exists", descriptor.identity)
            return None

        entry = CartEntry(descriptor)
        self._entries.append(entry)
        self.logger.debug("Added %s", descriptor.identity)
        return entry

    def remove(self, descriptor: TypeDescriptor) -> bool:
        entry = self.entry_for(descriptor)
        if entry is None:
            return False
        self._entries.remove(entry)
        self.logger.debug("Removed %s", descriptor.identity)
        return True

    def increment(self, entry: CartEntry) -> bool:
        """Raise the quantity by one; False for single-instance entries."""
        self._require_member(entry)
        if not self.can_increment(entry):
            self.logger.debug("%s is single-instance, quantity stays 1", entry.type.identity)
            return False
        entry._quantity += 1
        return True

    def decrement(self, entry: CartEntry) -> None:
        """Lower the quantity by one; an entry that would reach zero is deleted."""
        self._require_member(entry)
        if entry.quantity <= 1:
            self._entries.remove(entry)
            self.logger.debug("Removed %s (quantity reached 0)", entry.type.identity)
            return
        entry._quantity -= 1

    def set_path(self, entry: CartEntry, path: Optional[str]) -> None:
        self._require_member(entry)
        entry._target_path = normalize_target_path(path)

    def clear(self) -> None:
        self._entries.clear()

    # =========================================================================
    # Creation
    # =========================================================================

    def drain_and_create(self) -> CreationReport:
        """Create every queued unit, publish ASSET_CREATED per success, drop the drained entries."""
        report = CreationReport()
        pending = tuple(self._entries)
        # Single-instance types created during this drain, in case no rebuild refreshes the tracker
        created_singles = set()

        for entry in pending:
            allow_multiple = entry.quantity > 1 or not self._settings.overwrite_existing
            path = entry.target_path or default_asset_path(entry.type, self._default_directory)

            for _ in range(entry.quantity):
                if entry.type.single_instance and (
                    entry.type.identity in created_singles or self.is_instantiated(entry.type)
                ):
                    self._refuse(entry.type, path, report)
                    continue

                created = self._create_one(entry.type, path, allow_multiple, report)
                if created is None:
                    continue
                if entry.type.single_instance:
                    created_singles.add(entry.type.identity)
                self._bus.publish(EventType.ASSET_CREATED, created)

        # Entries queued by subscribers while draining stay in the cart
        self._entries = [e for e in self._entries if not any(e is drained for drained in pending)]
        self.logger.info(
            "Cart drained: %d created, %d failed",
            len(report.created), len(report.failures)
        )
        return report

    def _refuse(self, descriptor: TypeDescriptor, path: str, report: CreationReport) -> None:
        error = SingleInstanceExists(f"{descriptor.name} already has its single instance")
        self.logger.warning("Skipped %s: %s", descriptor.identity, error)
        report.failures.append(CreationFailure(descriptor, path, error))

    def _create_one(
        self,
        descriptor: TypeDescriptor,
        path: str,
        allow_multiple: bool,
        report: CreationReport,
    ) -> Optional[AssetCreated]:
        try:
            instance: Any = self._factory.create(descriptor, path, allow_multiple)
        except Exception as e:
            self.logger.error("Failed to create %s at %s: %s", descriptor.identity, path, e, exc_info=True)
            report.failures.append(CreationFailure(descriptor, path, e))
            return None

        created = AssetCreated(type=descriptor, instance=instance, path=path)
        report.created.append(created)
        return created

    def _require_member(self, entry: CartEntry) -> None:
        if entry is None or not any(existing is entry for existing in self._entries):
            raise ValueError(f"{entry!r} is not in the cart")


__all__ = [
    'CartEntry',
    'CartStore',
    'CreationFailure',
    'CreationReport',
    'SingleInstanceExists',
    'default_asset_path',
    'normalize_target_path',
]
