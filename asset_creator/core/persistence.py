"""
Persistence Codec - Flat key/value form of history, favorites and settings.

Layout of the persisted map:
    h_0 .. h_{n-1}          history identities, oldest first
    f_0 .. f_{m-1}          favorites identities, oldest first
    history_capacity, favorites_capacity, overwrite_existing,
    ping_on_create, single_instance_visibility (int value of the enum)

There is no version field. Reading tolerates missing and extra keys: each
list is scanned from index 0 until its own first gap, identities that no
longer resolve are skipped, and absent settings keep their current value.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, MutableMapping, Optional

from asset_creator.core.config_manager import ConfigManager, get_config_manager
from asset_creator.core.logging_utils import get_module_logger
from asset_creator.core.recency import FavoritesStore, HistoryStore
from asset_creator.core.settings import SettingsStore, Visibility
from asset_creator.core.single_instance import SingleInstanceTracker
from asset_creator.core.type_catalog import TypeDescriptor

HISTORY_PREFIX = "h_"
FAVORITES_PREFIX = "f_"

PersistedMap = Dict[str, Any]
Resolver = Callable[[str], Optional[TypeDescriptor]]


def history_key(index: int) -> str:
    return f"{HISTORY_PREFIX}{index}"


def favorites_key(index: int) -> str:
    return f"{FAVORITES_PREFIX}{index}"


class PersistenceCodec:

    def __init__(
        self,
        resolver: Resolver,
        tracker: SingleInstanceTracker,
        config_manager: Optional[ConfigManager] = None,
    ):
        self.logger = get_module_logger("PersistenceCodec")
        self._resolve = resolver
        self._tracker = tracker
        self._config = config_manager or get_config_manager()

    # =========================================================================
    # Serialize
    # =========================================================================

    def serialize(
        self,
        history: HistoryStore,
        favorites: FavoritesStore,
        settings: SettingsStore,
        target: Optional[MutableMapping[str, Any]] = None,
        *,
        overwrite: bool = True,
    ) -> MutableMapping[str, Any]:
        """Write the stores into ``target`` (a new dict when omitted).

        With ``overwrite=False`` only keys absent from ``target`` are written.
        """
        mapping: MutableMapping[str, Any] = {} if target is None else target

        def put(key: str, value: Any) -> None:
            if overwrite or key not in mapping:
                mapping[key] = value

        for index, descriptor in enumerate(history.items):
            put(history_key(index), descriptor.identity)
        for index, descriptor in enumerate(favorites.items):
            put(favorites_key(index), descriptor.identity)

        record = settings.snapshot()
        put('history_capacity', record.history_capacity)
        put('favorites_capacity', record.favorites_capacity)
        put('overwrite_existing', record.overwrite_existing)
        put('ping_on_create', record.ping_on_create)
        put('single_instance_visibility', record.single_instance_visibility.value)

        return mapping

    # =========================================================================
    # Deserialize
    # =========================================================================

    def deserialize(
        self,
        mapping: MutableMapping[str, Any],
        history: HistoryStore,
        favorites: FavoritesStore,
        settings: SettingsStore,
    ) -> None:
        """Load ``mapping`` into the stores, replacing list contents."""
        history.restore(self._scan(mapping, history_key, "history"))
        favorites.restore(
            d for d in self._scan(mapping, favorites_key, "favorites")
            if not self._drop_favorite(d)
        )
        self._load_settings(mapping, settings)

    def _scan(self, mapping: MutableMapping[str, Any], key_for: Callable[[int], str], label: str) -> List[TypeDescriptor]:
        found: List[TypeDescriptor] = []
        index = 0
        while True:
            key = key_for(index)
            identity = mapping.get(key)
            if identity is None:
                break
            descriptor = self._resolve(str(identity))
            if descriptor is None:
                self.logger.debug("Skipping stale %s identity %s", label, identity)
            else:
                found.append(descriptor)
            index += 1
        return found

    def _drop_favorite(self, descriptor: TypeDescriptor) -> bool:
        if self._tracker.is_instantiated(descriptor):
            self.logger.debug("Dropping favorite %s: single instance already exists", descriptor.identity)
            return True
        return False

    def _load_settings(self, mapping: MutableMapping[str, Any], settings: SettingsStore) -> None:
        # Absent or unparseable keys come back as None and keep the current value
        config = self._config
        settings.apply_persisted(
            history_capacity=config.get_int(mapping, 'history_capacity', default=None),
            favorites_capacity=config.get_int(mapping, 'favorites_capacity', default=None),
            overwrite_existing=config.get_bool(mapping, 'overwrite_existing', default=None),
            ping_on_create=config.get_bool(mapping, 'ping_on_create', default=None),
            single_instance_visibility=self._visibility(mapping),
        )

    def _visibility(self, mapping: MutableMapping[str, Any]) -> Optional[Visibility]:
        name = self._config.get_str(mapping, 'single_instance_visibility')
        if name is not None and name.upper() in Visibility.__members__:
            return Visibility[name.upper()]

        number = self._config.get_int(mapping, 'single_instance_visibility', default=None)
        if number is None:
            return None
        try:
            return Visibility(number)
        except ValueError:
            self.logger.warning("Unknown visibility %s, keeping current", number)
            return None


__all__ = [
    'PersistenceCodec',
    'PersistedMap',
    'history_key',
    'favorites_key',
    'HISTORY_PREFIX',
    'FAVORITES_PREFIX',
]
