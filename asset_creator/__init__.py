"""Type catalog and state engine behind the asset creator workspace."""

from .core import __version__

__all__ = ['__version__']
