"""
Asset Creator Session - Composition root for one editing session.

The session builds the bus, settings, catalog, single-instance tracker,
cart, history, favorites, search engine and persistence, and is the only
object the host talks to:

    session = AssetCreatorSession(factory, existence)
    session.open()                    # discover types, load configuration
    session.on_content_changed()      # host's "relevant files changed" signal
    session.toggle_cart(descriptor)   # operator actions ...
    session.create_cart()
    session.close()                   # save configuration, drop subscriptions
"""

from pathlib import Path
from typing import Any, Callable, Optional

from asset_creator.core.cart import CartStore, CreationReport, default_asset_path
from asset_creator.core.collaborators import AssetFactory, AssetPinger, ExistenceQuery, NullPinger
from asset_creator.core.config_manager import ConfigManager
from asset_creator.core.events import AssetCreated, BusEvent, EventBus, EventType
from asset_creator.core.logging_utils import get_module_logger
from asset_creator.core.paths import DEFAULT_ASSET_DIR
from asset_creator.core.persistence import PersistenceCodec
from asset_creator.core.recency import FavoritesStore, HistoryStore
from asset_creator.core.search import QUIET_INTERVAL, SearchEngine
from asset_creator.core.settings import SettingsStore
from asset_creator.core.single_instance import SingleInstanceTracker
from asset_creator.core.state_persistence import ConfigurationPersistence
from asset_creator.core.type_catalog import SubclassTypeProvider, TypeCatalog, TypeDescriptor, TypeProvider


class AssetCreatorSession:
    """Owns every store for the lifetime of one editing session."""

    def __init__(
        self,
        factory: AssetFactory,
        existence: ExistenceQuery,
        *,
        provider: Optional[TypeProvider] = None,
        pinger: Optional[AssetPinger] = None,
        config_path: Optional[Path] = None,
        config_manager: Optional[ConfigManager] = None,
        default_directory: str = DEFAULT_ASSET_DIR,
        quiet_interval: float = QUIET_INTERVAL,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.logger = get_module_logger("AssetCreatorSession")
        self._factory = factory
        self._pinger = pinger or NullPinger()
        self._default_directory = default_directory
        self._open = False

        self.bus = EventBus()
        self.settings = SettingsStore(self.bus)
        self.catalog = TypeCatalog(provider or SubclassTypeProvider(), self.bus)
        # Must subscribe to CATALOG_REBUILT before the search engine
        self.tracker = SingleInstanceTracker(existence, self.bus)

        self.cart = CartStore(
            self.bus, self.settings, factory, self.tracker, default_directory=default_directory
        )
        self.history = HistoryStore(self.bus, self.settings)
        self.favorites = FavoritesStore(self.bus, self.settings, self.tracker)

        search_options = {'quiet_interval': quiet_interval}
        if clock is not None:
            search_options['clock'] = clock
        self.search = SearchEngine(self.catalog, self.tracker, self.settings, self.bus, **search_options)

        self.codec = PersistenceCodec(self.catalog.resolve, self.tracker, config_manager)
        self.persistence = ConfigurationPersistence(
            self.codec,
            self.history,
            self.favorites,
            self.settings,
            config_path=config_path,
            config_manager=config_manager,
        )

        self.bus.subscribe(EventType.ASSET_CREATED, self._on_asset_created)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self) -> None:
        """Discover types, then restore the persisted operator state.

        A closed session can be opened again; its stores rejoin the bus.
        """
        if self._open:
            return
        self._subscribe_all()
        self.on_content_changed()
        self.persistence.load()
        self._open = True
        self.logger.info("Session opened with %d creatable types", len(self.catalog))

    def close(self) -> bool:
        """Persist operator state and release every bus subscription."""
        if not self._open:
            return True
        saved = self.persistence.save()
        self._unsubscribe_all()
        self._open = False
        self.logger.info("Session closed (saved=%s)", saved)
        return saved

    def _subscribe_all(self) -> None:
        # Tracker first: it must refresh before the search engine re-filters
        self.tracker.subscribe()
        self.cart.subscribe()
        self.history.subscribe()
        self.favorites.subscribe()
        self.search.subscribe()
        self.bus.subscribe(EventType.ASSET_CREATED, self._on_asset_created)

    def _unsubscribe_all(self) -> None:
        self.bus.unsubscribe(EventType.ASSET_CREATED, self._on_asset_created)
        self.search.unsubscribe()
        self.favorites.unsubscribe()
        self.history.unsubscribe()
        self.cart.unsubscribe()
        self.tracker.unsubscribe()

    def on_content_changed(self) -> None:
        """Entry point for the host's "relevant files changed" signal."""
        self.catalog.rebuild()

    # =========================================================================
    # Operator actions
    # =========================================================================

    def toggle_cart(self, descriptor: TypeDescriptor) -> bool:
        """Queue ``descriptor`` or take it back out; returns True if now queued."""
        if self.cart.contains(descriptor):
            self.bus.publish(EventType.CART_REMOVE_REQUESTED, descriptor)
            return False
        self.bus.publish(EventType.CART_ADD_REQUESTED, descriptor)
        return self.cart.contains(descriptor)

    def can_favorite(self, descriptor: TypeDescriptor) -> bool:
        return not descriptor.single_instance

    def toggle_favorite(self, descriptor: TypeDescriptor) -> bool:
        """Add or remove a favorite; returns True if now favorited."""
        if self.favorites.contains(descriptor):
            self.bus.publish(EventType.FAVORITE_REMOVED, descriptor)
            return False
        if not self.can_favorite(descriptor):
            self.logger.debug("Single-instance type %s cannot be favorited", descriptor.identity)
            return False
        self.bus.publish(EventType.FAVORITE_ADDED, descriptor)
        return True

    def create_cart(self) -> CreationReport:
        return self.cart.drain_and_create()

    def quick_create(self, descriptor: TypeDescriptor) -> Optional[Any]:
        """Create one instance right away at the default location."""
        if descriptor is None:
            raise TypeError("cannot create an asset from a None type")
        if not self.is_available(descriptor):
            self.logger.info("Quick create of %s refused: its single instance already exists", descriptor.identity)
            return None

        path = default_asset_path(descriptor, self._default_directory)
        try:
            instance = self._factory.create(descriptor, path, not self.settings.overwrite_existing)
        except Exception as e:
            self.logger.error("Quick create of %s failed: %s", descriptor.identity, e, exc_info=True)
            return None

        self.bus.publish(EventType.ASSET_CREATED, AssetCreated(type=descriptor, instance=instance, path=path))
        return instance

    def is_available(self, descriptor: TypeDescriptor) -> bool:
        """False when a single-instance type already has its one instance."""
        return not self.tracker.is_instantiated(descriptor)

    # =========================================================================
    # Event Listeners
    # =========================================================================

    def _on_asset_created(self, message: BusEvent) -> None:
        created: AssetCreated = message.payload
        if created.type.single_instance and not self.tracker.is_instantiated(created.type):
            # A new single instance changes what may be created next
            self.on_content_changed()

        if self.settings.ping_on_create:
            try:
                self._pinger.ping(created.instance)
            except Exception as e:
                self.logger.warning("Ping failed for %s: %s", created.type.identity, e)


__all__ = ['AssetCreatorSession']
