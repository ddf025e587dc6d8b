"""Capability markers that asset classes opt into.

A class becomes visible to the asset creator by inheriting from
``CreatableAsset``. Mixing in ``SingleInstanceAsset`` restricts it to one
live instance per project.
"""


class CreatableAsset:
    """Marker for asset classes that may be instantiated by the asset creator."""

    __slots__ = ()


class SingleInstanceAsset:
    """Marker for asset classes limited to a single live instance."""

    __slots__ = ()


__all__ = ['CreatableAsset', 'SingleInstanceAsset']
