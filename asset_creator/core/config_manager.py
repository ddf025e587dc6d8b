import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

import aiofiles

from asset_creator.core.logging_utils import get_module_logger


logger = get_module_logger("ConfigManager")

Primitive = (str, int, bool)


class ConfigManager:
    """Reads and writes the persisted configuration document.

    The document is a flat JSON object whose values are strings, ints or
    bools. Each call opens, fully reads or writes, and closes the file.
    """

    def __init__(self):
        self.logger = get_module_logger("ConfigManager")
        self.lock = asyncio.Lock()

    # ------------------------------------------------------------------
    # Internal helpers

    def _parse_document(self, text: str, config_path: Path) -> Dict[str, Any]:
        if not text.strip():
            return {}

        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError(f"expected a JSON object, got {type(data).__name__}")

        config: Dict[str, Any] = {}
        for key, value in data.items():
            if not isinstance(value, Primitive):
                self.logger.warning(
                    "Dropping non-primitive value for %s in %s", key, config_path
                )
                continue
            config[str(key)] = value
        return config

    @staticmethod
    def _render_document(config: Dict[str, Any]) -> str:
        return json.dumps(config, indent=2)

    def _replace_atomically(self, config_path: Path, payload: str) -> None:
        config_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path: Optional[Path] = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                dir=str(config_path.parent),
                delete=False,
                encoding="utf-8",
            ) as tmp:
                tmp_path = Path(tmp.name)
                tmp.write(payload)
                tmp.flush()
                os.fsync(tmp.fileno())

            os.replace(tmp_path, config_path)
        finally:
            if tmp_path is not None:
                try:
                    tmp_path.unlink()
                except FileNotFoundError:
                    pass

    # ------------------------------------------------------------------
    # Reading

    def read_config(self, config_path: Path) -> Dict[str, Any]:
        """Return the document as an ordered dict; {} when missing or unreadable."""
        if not config_path.exists():
            logger.warning("Configuration file not found: %s", config_path)
            return {}

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                text = f.read()
            return self._parse_document(text, config_path)
        except (OSError, ValueError) as e:
            logger.error("Failed to read config %s: %s", config_path, e)
            return {}

    async def read_config_async(self, config_path: Path) -> Dict[str, Any]:
        """Async version for use in async contexts."""
        if not await asyncio.to_thread(config_path.exists):
            logger.warning("Configuration file not found: %s", config_path)
            return {}

        try:
            async with aiofiles.open(config_path, 'r', encoding='utf-8') as f:
                text = await f.read()
            return self._parse_document(text, config_path)
        except (OSError, ValueError) as e:
            logger.error("Failed to read config %s: %s", config_path, e)
            return {}

    # ------------------------------------------------------------------
    # Writing

    def write_config(self, config_path: Path, config: Dict[str, Any]) -> bool:
        """Replace the whole document with ``config``."""
        try:
            self._replace_atomically(config_path, self._render_document(config))
            logger.debug("Wrote %d keys to %s", len(config), config_path)
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error("Failed to write config %s: %s", config_path, e, exc_info=True)
            return False

    async def write_config_async(self, config_path: Path, config: Dict[str, Any]) -> bool:
        """Async version for use in async contexts."""
        async with self.lock:
            tmp_path = config_path.with_name(f".{config_path.name}.tmp")
            try:
                payload = self._render_document(config)
                await asyncio.to_thread(config_path.parent.mkdir, parents=True, exist_ok=True)
                async with aiofiles.open(tmp_path, 'w', encoding='utf-8') as f:
                    await f.write(payload)
                    await f.flush()
                await asyncio.to_thread(os.replace, tmp_path, config_path)
                logger.debug("Wrote %d keys to %s", len(config), config_path)
                return True
            except (OSError, TypeError, ValueError) as e:
                logger.error("Failed to write config %s: %s", config_path, e, exc_info=True)
                return False
            finally:
                # Gone already after a successful replace
                try:
                    await asyncio.to_thread(tmp_path.unlink)
                except FileNotFoundError:
                    pass

    # ------------------------------------------------------------------
    # Typed getters
    #
    # Absent keys and values that do not parse yield ``default``.

    _TRUE_WORDS = frozenset({'true', '1', 'yes', 'on'})
    _FALSE_WORDS = frozenset({'false', '0', 'no', 'off'})

    def get_bool(self, config: Dict[str, Any], key: str, default: Optional[bool] = False) -> Optional[bool]:
        if key not in config:
            return default

        value = config[key]
        if isinstance(value, bool):
            return value
        if isinstance(value, int):
            return value != 0

        normalized = str(value).strip().lower()
        if normalized in self._TRUE_WORDS:
            return True
        if normalized in self._FALSE_WORDS:
            return False
        logger.warning("Invalid bool value for %s: %s, using default %s", key, value, default)
        return default

    def get_int(self, config: Dict[str, Any], key: str, default: Optional[int] = 0) -> Optional[int]:
        if key not in config:
            return default

        value = config[key]
        if isinstance(value, bool):
            return int(value)
        try:
            return int(value)
        except (TypeError, ValueError):
            logger.warning("Invalid int value for %s: %s, using default %s", key, value, default)
            return default

    def get_str(self, config: Dict[str, Any], key: str, default: Optional[str] = None) -> Optional[str]:
        value = config.get(key)
        if value is None:
            return default
        return str(value)


_config_manager = ConfigManager()


def get_config_manager() -> ConfigManager:
    return _config_manager
