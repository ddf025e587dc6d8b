"""Root logging setup for hosts embedding the asset creator.

Records from every store land under the ``asset_creator`` logger namespace.
A host that has no logging of its own calls ``configure_logging`` once:

    configure_logging("debug", log_file=True)   # rotating file at paths.LOG_FILE
"""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterable, List, Optional, Union

from asset_creator.core import paths

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
MAX_LOG_BYTES = 256 * 1024
LOG_BACKUPS = 2

LogFile = Union[None, bool, str, Path]

# Handlers installed by configure_logging; anything else on the root is left alone
_installed: List[logging.Handler] = []


def _resolve_level(level: Union[int, str]) -> int:
    if isinstance(level, int):
        return level
    numeric = logging.getLevelName(str(level).upper())
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level '{level}'")
    return numeric


def _resolve_log_file(log_file: LogFile) -> Optional[Path]:
    if log_file is True:
        return paths.LOG_FILE
    if not log_file:
        return None
    return Path(log_file)


def _file_handler(path: Path) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    return RotatingFileHandler(path, maxBytes=MAX_LOG_BYTES, backupCount=LOG_BACKUPS, encoding="utf-8")


def is_configured() -> bool:
    return bool(_installed)


def reset_logging() -> None:
    """Detach and close the handlers installed by ``configure_logging``."""
    root = logging.getLogger()
    while _installed:
        handler = _installed.pop()
        root.removeHandler(handler)
        try:
            handler.close()
        except OSError:
            pass


def configure_logging(
    level: Union[int, str] = logging.INFO,
    *,
    force: bool = False,
    console: bool = True,
    log_file: LogFile = None,
    quiet_loggers: Iterable[str] = (),
) -> None:
    """Attach console and rotating file handlers to the root logger.

    Once configured, later calls only change the level unless ``force`` is
    set, in which case the previously installed handlers are replaced.
    """
    numeric_level = _resolve_level(level)
    root = logging.getLogger()

    if is_configured() and not force:
        root.setLevel(numeric_level)
        return
    reset_logging()

    handlers: List[logging.Handler] = []
    if console:
        handlers.append(logging.StreamHandler(sys.stdout))
    file_path = _resolve_log_file(log_file)
    if file_path is not None:
        handlers.append(_file_handler(file_path))

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)
    for handler in handlers:
        handler.setFormatter(formatter)
        handler.setLevel(numeric_level)
        root.addHandler(handler)
        _installed.append(handler)

    root.setLevel(numeric_level)
    for name in quiet_loggers:
        logging.getLogger(name).setLevel(logging.ERROR)


__all__ = ["configure_logging", "reset_logging", "is_configured", "LOG_FORMAT", "LOG_DATEFMT"]
