"""Host-side collaborators the core calls out to.

The host owns instantiation, saving, path uniquification and focusing of
assets. The core only decides when to call and with which arguments.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from asset_creator.core.type_catalog import TypeDescriptor


@runtime_checkable
class AssetFactory(Protocol):
    """Instantiates and saves one asset; raises on failure."""

    def create(self, descriptor: TypeDescriptor, path: str, allow_multiple: bool) -> Any:
        ...


@runtime_checkable
class ExistenceQuery(Protocol):
    """Answers whether at least one instance of a type exists in the project."""

    def exists(self, descriptor: TypeDescriptor) -> bool:
        ...


@runtime_checkable
class AssetPinger(Protocol):
    """Highlights a freshly created asset in the host's project view."""

    def ping(self, instance: Any) -> None:
        ...


class NullPinger:
    def ping(self, instance: Any) -> None:
        return None


__all__ = ['AssetFactory', 'ExistenceQuery', 'AssetPinger', 'NullPinger']
