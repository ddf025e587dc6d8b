"""
Settings Store - Operator-tunable policy for the asset creator.

A single ``SettingsStore`` is created per session and passed to every
component that reads policy. Components read values live (never snapshot)
and can subscribe to the per-field topics on the bus.

Two clamping bands apply to the capacities:
- live edits floor them at 1
- values loaded from the persisted document are clamped to
  history [10, 100] and favorites [5, 30]
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from asset_creator.core.events import EventBus, EventType, SettingChange
from asset_creator.core.logging_utils import get_module_logger


class Visibility(Enum):
    """How instantiated single-instance types are presented."""
    HIDDEN = 0
    DISABLED = 1


DEFAULT_HISTORY_CAPACITY = 10
DEFAULT_FAVORITES_CAPACITY = 10
DEFAULT_OVERWRITE_EXISTING = False
DEFAULT_PING_ON_CREATE = False
DEFAULT_VISIBILITY = Visibility.DISABLED

MIN_CAPACITY = 1
PERSISTED_HISTORY_RANGE = (10, 100)
PERSISTED_FAVORITES_RANGE = (5, 30)


@dataclass(frozen=True)
class SettingsRecord:
    """Immutable snapshot of every setting."""
    history_capacity: int = DEFAULT_HISTORY_CAPACITY
    favorites_capacity: int = DEFAULT_FAVORITES_CAPACITY
    overwrite_existing: bool = DEFAULT_OVERWRITE_EXISTING
    ping_on_create: bool = DEFAULT_PING_ON_CREATE
    single_instance_visibility: Visibility = DEFAULT_VISIBILITY


FIELD_EVENTS: Dict[str, EventType] = {
    'history_capacity': EventType.HISTORY_CAPACITY_CHANGED,
    'favorites_capacity': EventType.FAVORITES_CAPACITY_CHANGED,
    'overwrite_existing': EventType.OVERWRITE_EXISTING_CHANGED,
    'ping_on_create': EventType.PING_ON_CREATE_CHANGED,
    'single_instance_visibility': EventType.SINGLE_INSTANCE_VISIBILITY_CHANGED,
}

SETTING_NAMES = tuple(FIELD_EVENTS)


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(high, value))


class SettingsStore:
    """Guarded settings with change notification on actual change only."""

    def __init__(self, bus: Optional[EventBus] = None):
        self.logger = get_module_logger("SettingsStore")
        self._bus = bus
        self._values: Dict[str, Any] = {
            'history_capacity': DEFAULT_HISTORY_CAPACITY,
            'favorites_capacity': DEFAULT_FAVORITES_CAPACITY,
            'overwrite_existing': DEFAULT_OVERWRITE_EXISTING,
            'ping_on_create': DEFAULT_PING_ON_CREATE,
            'single_instance_visibility': DEFAULT_VISIBILITY,
        }
        self._dirty = False

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def history_capacity(self) -> int:
        return self._values['history_capacity']

    @history_capacity.setter
    def history_capacity(self, value: int) -> None:
        self._set('history_capacity', max(MIN_CAPACITY, int(value)))

    @property
    def favorites_capacity(self) -> int:
        return self._values['favorites_capacity']

    @favorites_capacity.setter
    def favorites_capacity(self, value: int) -> None:
        self._set('favorites_capacity', max(MIN_CAPACITY, int(value)))

    @property
    def overwrite_existing(self) -> bool:
        return self._values['overwrite_existing']

    @overwrite_existing.setter
    def overwrite_existing(self, value: bool) -> None:
        self._set('overwrite_existing', bool(value))

    @property
    def ping_on_create(self) -> bool:
        return self._values['ping_on_create']

    @ping_on_create.setter
    def ping_on_create(self, value: bool) -> None:
        self._set('ping_on_create', bool(value))

    @property
    def single_instance_visibility(self) -> Visibility:
        return self._values['single_instance_visibility']

    @single_instance_visibility.setter
    def single_instance_visibility(self, value: Visibility) -> None:
        self._set('single_instance_visibility', Visibility(value))

    @property
    def dirty(self) -> bool:
        """True once any field changed since construction or ``mark_clean``."""
        return self._dirty

    def mark_clean(self) -> None:
        self._dirty = False

    # =========================================================================
    # Bulk operations
    # =========================================================================

    def snapshot(self) -> SettingsRecord:
        return SettingsRecord(**self._values)

    def reset(self) -> None:
        """Restore the documented defaults, notifying only fields that move."""
        self.history_capacity = DEFAULT_HISTORY_CAPACITY
        self.favorites_capacity = DEFAULT_FAVORITES_CAPACITY
        self.overwrite_existing = DEFAULT_OVERWRITE_EXISTING
        self.ping_on_create = DEFAULT_PING_ON_CREATE
        self.single_instance_visibility = DEFAULT_VISIBILITY

    def apply_persisted(
        self,
        *,
        history_capacity: Optional[int] = None,
        favorites_capacity: Optional[int] = None,
        overwrite_existing: Optional[bool] = None,
        ping_on_create: Optional[bool] = None,
        single_instance_visibility: Optional[Visibility] = None,
    ) -> None:
        """Load raw persisted values, then clamp capacities to the persisted bands.

        ``None`` means the key was absent and the current value is kept.
        """
        if history_capacity is not None:
            self.history_capacity = history_capacity
        if favorites_capacity is not None:
            self.favorites_capacity = favorites_capacity
        if overwrite_existing is not None:
            self.overwrite_existing = overwrite_existing
        if ping_on_create is not None:
            self.ping_on_create = ping_on_create
        if single_instance_visibility is not None:
            self.single_instance_visibility = single_instance_visibility

        self.history_capacity = _clamp(self.history_capacity, *PERSISTED_HISTORY_RANGE)
        self.favorites_capacity = _clamp(self.favorites_capacity, *PERSISTED_FAVORITES_RANGE)

    def request_clear_history(self) -> None:
        self._publish(EventType.HISTORY_CLEARED, None)

    def request_clear_favorites(self) -> None:
        self._publish(EventType.FAVORITES_CLEARED, None)

    # =========================================================================
    # Internal
    # =========================================================================

    def _set(self, name: str, value: Any) -> None:
        old_value = self._values[name]
        if old_value == value:
            return

        self._values[name] = value
        self._dirty = True
        self.logger.info("Setting %s: %s -> %s", name, _display(old_value), _display(value))
        self._publish(FIELD_EVENTS[name], SettingChange(name, old_value, value))

    def _publish(self, event: EventType, payload: Any) -> None:
        if self._bus is not None:
            self._bus.publish(event, payload)


def _display(value: Any) -> Any:
    return value.name if isinstance(value, Enum) else value


__all__ = [
    'Visibility',
    'SettingsRecord',
    'SettingsStore',
    'FIELD_EVENTS',
    'SETTING_NAMES',
    'DEFAULT_HISTORY_CAPACITY',
    'DEFAULT_FAVORITES_CAPACITY',
    'PERSISTED_HISTORY_RANGE',
    'PERSISTED_FAVORITES_RANGE',
]
