
from .capabilities import CreatableAsset, SingleInstanceAsset
from .cart import CartEntry, CartStore, CreationReport
from .collaborators import AssetFactory, AssetPinger, ExistenceQuery
from .config_manager import ConfigManager, get_config_manager
from .events import AssetCreated, BusEvent, EventBus, EventType, SettingChange
from .logging_config import configure_logging
from .persistence import PersistenceCodec
from .recency import FavoritesStore, HistoryStore, RecencyList
from .search import SearchEngine, SearchState
from .session import AssetCreatorSession
from .settings import SettingsRecord, SettingsStore, Visibility
from .single_instance import SingleInstanceTracker
from .state_persistence import ConfigurationPersistence
from .type_catalog import (
    StaticTypeProvider,
    SubclassTypeProvider,
    TypeCatalog,
    TypeDescriptor,
)

__version__ = "1.0.0"

__all__ = [
    'CreatableAsset',
    'SingleInstanceAsset',
    'CartEntry',
    'CartStore',
    'CreationReport',
    'AssetFactory',
    'AssetPinger',
    'ExistenceQuery',
    'ConfigManager',
    'get_config_manager',
    'AssetCreated',
    'BusEvent',
    'EventBus',
    'EventType',
    'SettingChange',
    'configure_logging',
    'PersistenceCodec',
    'FavoritesStore',
    'HistoryStore',
    'RecencyList',
    'SearchEngine',
    'SearchState',
    'AssetCreatorSession',
    'SettingsRecord',
    'SettingsStore',
    'Visibility',
    'SingleInstanceTracker',
    'ConfigurationPersistence',
    'StaticTypeProvider',
    'SubclassTypeProvider',
    'TypeCatalog',
    'TypeDescriptor',
    '__version__',
]
