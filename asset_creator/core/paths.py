"""Path constants for the asset creator."""

from __future__ import annotations

import os
from pathlib import Path

PACKAGE_ROOT = Path(__file__).resolve().parents[1]
PROJECT_ROOT = PACKAGE_ROOT.parent

# Operator state lives outside the project so read-only installs still work
_STATE_DIR_ENV = os.environ.get("ASSET_CREATOR_STATE_DIR")
USER_STATE_DIR = Path(_STATE_DIR_ENV).expanduser() if _STATE_DIR_ENV else (Path.home() / ".asset_creator")
CONFIGURATION_FILE = USER_STATE_DIR / "configurations.json"

LOGS_DIR = USER_STATE_DIR / "logs"
LOG_FILE = LOGS_DIR / "asset_creator.log"

# Where assets land when a cart entry has no explicit target path
DEFAULT_ASSET_DIR = "Assets/Scriptable Objects"
ASSET_EXTENSION = ".asset"


def ensure_directories() -> None:
    """Create the state and log directories if they don't exist."""
    USER_STATE_DIR.mkdir(parents=True, exist_ok=True)
    LOGS_DIR.mkdir(parents=True, exist_ok=True)


__all__ = [
    'PACKAGE_ROOT',
    'PROJECT_ROOT',
    'USER_STATE_DIR',
    'CONFIGURATION_FILE',
    'LOGS_DIR',
    'LOG_FILE',
    'DEFAULT_ASSET_DIR',
    'ASSET_EXTENSION',
    'ensure_directories',
]
