"""
Configuration Persistence - Session-boundary load/save of operator state.

Persistence Rules:
1. Load happens once at session open. A missing or unreadable document is
   not fatal: a warning is logged and the stores keep their defaults.
2. Save happens once at session close. Keys owned by the asset creator are
   rewritten; any other keys already in the document are preserved.
3. ``seed`` writes only the keys the document lacks, so an existing
   operator configuration is never clobbered.
"""

from pathlib import Path
from typing import Any, Dict, Optional

from asset_creator.core.config_manager import ConfigManager, get_config_manager
from asset_creator.core.logging_utils import get_module_logger
from asset_creator.core.paths import CONFIGURATION_FILE
from asset_creator.core.persistence import FAVORITES_PREFIX, HISTORY_PREFIX, PersistenceCodec
from asset_creator.core.recency import FavoritesStore, HistoryStore
from asset_creator.core.settings import SettingsStore


def _is_list_key(key: str) -> bool:
    for prefix in (HISTORY_PREFIX, FAVORITES_PREFIX):
        if key.startswith(prefix) and key[len(prefix):].isdigit():
            return True
    return False


class ConfigurationPersistence:
    """Moves history, favorites and settings between the stores and disk.

    Usage:
        persistence = ConfigurationPersistence(codec, history, favorites, settings)
        persistence.load()      # session open
        ...
        persistence.save()      # session close
    """

    def __init__(
        self,
        codec: PersistenceCodec,
        history: HistoryStore,
        favorites: FavoritesStore,
        settings: SettingsStore,
        *,
        config_path: Optional[Path] = None,
        config_manager: Optional[ConfigManager] = None,
    ):
        self.logger = get_module_logger("ConfigurationPersistence")
        self._codec = codec
        self._history = history
        self._favorites = favorites
        self._settings = settings
        self._config_path = Path(config_path) if config_path else CONFIGURATION_FILE
        self._config_manager = config_manager or get_config_manager()

    @property
    def config_path(self) -> Path:
        return self._config_path

    # =========================================================================
    # Load
    # =========================================================================

    def load(self) -> bool:
        """Apply the persisted document to the stores; False when nothing was loaded."""
        document = self._config_manager.read_config(self._config_path)
        return self._apply(document)

    async def load_async(self) -> bool:
        document = await self._config_manager.read_config_async(self._config_path)
        return self._apply(document)

    def _apply(self, document: Dict[str, Any]) -> bool:
        if not document:
            self.logger.warning(
                "No asset creator configuration at %s, using defaults", self._config_path
            )
            return False

        self._codec.deserialize(document, self._history, self._favorites, self._settings)
        self._settings.mark_clean()
        self.logger.info(
            "LOAD: %d history, %d favorites from %s",
            len(self._history), len(self._favorites), self._config_path
        )
        return True

    # =========================================================================
    # Save
    # =========================================================================

    def save(self) -> bool:
        document = self._build_document(self._config_manager.read_config(self._config_path))
        success = self._config_manager.write_config(self._config_path, document)
        return self._after_save(success)

    async def save_async(self) -> bool:
        existing = await self._config_manager.read_config_async(self._config_path)
        document = self._build_document(existing)
        success = await self._config_manager.write_config_async(self._config_path, document)
        return self._after_save(success)

    def seed(self) -> bool:
        """Add any missing keys to the document without touching present ones."""
        document = self._config_manager.read_config(self._config_path)
        before = len(document)
        self._codec.serialize(
            self._history, self._favorites, self._settings, document, overwrite=False
        )
        if len(document) == before:
            return True
        return self._config_manager.write_config(self._config_path, document)

    def _build_document(self, existing: Dict[str, Any]) -> Dict[str, Any]:
        # Stale indices past the current list lengths must not survive
        document = {key: value for key, value in existing.items() if not _is_list_key(key)}
        self._codec.serialize(
            self._history, self._favorites, self._settings, document, overwrite=True
        )
        return document

    def _after_save(self, success: bool) -> bool:
        if success:
            self._settings.mark_clean()
            self.logger.info(
                "SAVE: %d history, %d favorites to %s",
                len(self._history), len(self._favorites), self._config_path
            )
        else:
            self.logger.error("SAVE FAILED: %s", self._config_path)
        return success


__all__ = ['ConfigurationPersistence']
