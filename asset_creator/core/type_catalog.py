"""
Type Catalog - Discovery and caching of creatable asset types.

The catalog owns the authoritative list of ``TypeDescriptor`` values. Every
other store holds descriptors (or their identities) obtained from here.

Enumeration of loaded types is delegated to a ``TypeProvider`` so the
catalog only sees "a list of candidate classes", whatever the host does to
find them.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Protocol, Sequence, Tuple, Type

from asset_creator.core.capabilities import CreatableAsset, SingleInstanceAsset
from asset_creator.core.events import EventBus, EventType
from asset_creator.core.logging_utils import get_module_logger

logger = get_module_logger("TypeCatalog")


def type_identity(cls: type) -> str:
    """Globally unique identity string for a class (``module.QualName``)."""
    return f"{cls.__module__}.{cls.__qualname__}"


@dataclass(frozen=True)
class TypeDescriptor:
    """A creatable type as seen by the rest of the system.

    Only ``TypeCatalog`` builds these. Equality and hashing use the identity
    alone, so a descriptor from an older rebuild still matches its successor.
    """

    identity: str
    name: str
    creatable: bool
    single_instance: bool
    cls: type = field(compare=False, repr=False)

    def __str__(self) -> str:
        return self.name


class TypeProvider(Protocol):
    """Enumerates candidate classes currently loaded in the host."""

    def loaded_types(self) -> Iterable[type]:
        ...


class SubclassTypeProvider:
    """Finds every loaded subclass of ``base``, however deeply nested."""

    def __init__(self, base: Type = CreatableAsset):
        self._base = base

    def loaded_types(self) -> Iterable[type]:
        seen = set()
        pending = list(self._base.__subclasses__())
        while pending:
            cls = pending.pop()
            if cls in seen:
                continue
            seen.add(cls)
            pending.extend(cls.__subclasses__())
        # Deterministic order for listing
        return sorted(seen, key=type_identity)


class StaticTypeProvider:
    """Serves a fixed, caller-managed list of classes."""

    def __init__(self, types: Sequence[type] = ()):
        self._types: List[type] = list(types)

    def set_types(self, types: Sequence[type]) -> None:
        self._types = list(types)

    def loaded_types(self) -> Iterable[type]:
        return list(self._types)


def is_creatable(cls: type) -> bool:
    """Concrete, instantiable class implementing the creatable capability."""
    if not inspect.isclass(cls):
        return False
    if not issubclass(cls, CreatableAsset):
        return False
    if inspect.isabstract(cls):
        return False
    return cls not in (CreatableAsset, SingleInstanceAsset)


def describe(cls: type) -> TypeDescriptor:
    return TypeDescriptor(
        identity=type_identity(cls),
        name=cls.__name__,
        creatable=is_creatable(cls),
        single_instance=issubclass(cls, SingleInstanceAsset),
        cls=cls,
    )


class TypeCatalog:
    """Cache of every creatable type, rebuilt wholesale on demand."""

    def __init__(self, provider: TypeProvider, bus: Optional[EventBus] = None):
        self.logger = get_module_logger("TypeCatalog")
        self._provider = provider
        self._bus = bus
        self._types: Tuple[TypeDescriptor, ...] = ()
        self._by_identity: Dict[str, TypeDescriptor] = {}

    @property
    def types(self) -> Tuple[TypeDescriptor, ...]:
        return self._types

    def __iter__(self):
        return iter(self._types)

    def __len__(self) -> int:
        return len(self._types)

    def __contains__(self, descriptor: object) -> bool:
        return isinstance(descriptor, TypeDescriptor) and descriptor.identity in self._by_identity

    def rebuild(self) -> Tuple[TypeDescriptor, ...]:
        """Rescan loaded types and replace the catalog contents in one step.

        Publishes ``CATALOG_REBUILT``; derived views must re-derive.
        """
        descriptors: List[TypeDescriptor] = []
        by_identity: Dict[str, TypeDescriptor] = {}

        for cls in self._provider.loaded_types():
            if not is_creatable(cls):
                continue
            descriptor = describe(cls)
            if descriptor.identity in by_identity:
                continue
            descriptors.append(descriptor)
            by_identity[descriptor.identity] = descriptor

        # Swap both views together so readers never see a partial rebuild
        self._types, self._by_identity = tuple(descriptors), by_identity
        self.logger.info("Catalog rebuilt with %d creatable types", len(descriptors))

        if self._bus is not None:
            self._bus.publish(EventType.CATALOG_REBUILT, self._types)
        return self._types

    def resolve(self, identity: Optional[str]) -> Optional[TypeDescriptor]:
        """Look up a live descriptor by identity; None if it is not in the catalog."""
        if not identity:
            return None
        return self._by_identity.get(identity)

    def descriptor_for(self, cls: type) -> Optional[TypeDescriptor]:
        return self._by_identity.get(type_identity(cls))

    def single_instance_types(self) -> List[TypeDescriptor]:
        return [descriptor for descriptor in self._types if descriptor.single_instance]


__all__ = [
    'TypeDescriptor',
    'TypeProvider',
    'SubclassTypeProvider',
    'StaticTypeProvider',
    'TypeCatalog',
    'describe',
    'is_creatable',
    'type_identity',
]
