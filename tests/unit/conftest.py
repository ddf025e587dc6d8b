"""Unit test fixtures for the asset creator stores.

Every store is built on a private EventBus with in-memory host
collaborators, so tests run without a project on disk:
- bus, settings: fresh per test
- provider, catalog: StaticTypeProvider over the sample asset classes
- existence, factory, pinger, clock: fakes from tests.infrastructure.mocks
- descriptor fixtures for the sample classes (weapon, enemy, ...)
"""

from __future__ import annotations

import pytest

from asset_creator.core.events import EventBus, EventType
from asset_creator.core.settings import SettingsStore
from asset_creator.core.single_instance import SingleInstanceTracker
from asset_creator.core.type_catalog import StaticTypeProvider, TypeCatalog
from tests.infrastructure.mocks import (
    FakeAssetFactory,
    FakeClock,
    FakeExistenceQuery,
    RecordingPinger,
)
from tests.infrastructure.sample_assets import (
    ALL_SAMPLE_TYPES,
    AudioMixerConfig,
    BossProfile,
    EnemyProfile,
    GameSettings,
    LootTable,
    WeaponData,
)


# =============================================================================
# Bus and Settings
# =============================================================================

@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def recorded(bus):
    """Subscribe a recorder to every topic; returns the list of deliveries."""
    deliveries = []
    for event in EventType:
        bus.subscribe(event, deliveries.append)
    return deliveries


@pytest.fixture
def settings(bus) -> SettingsStore:
    return SettingsStore(bus)


# =============================================================================
# Host Collaborators
# =============================================================================

@pytest.fixture
def existence() -> FakeExistenceQuery:
    return FakeExistenceQuery()


@pytest.fixture
def factory(existence) -> FakeAssetFactory:
    """Factory that registers what it creates with ``existence``."""
    return FakeAssetFactory(existence)


@pytest.fixture
def pinger() -> RecordingPinger:
    return RecordingPinger()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# =============================================================================
# Catalog
# =============================================================================

@pytest.fixture
def provider() -> StaticTypeProvider:
    return StaticTypeProvider(ALL_SAMPLE_TYPES)


@pytest.fixture
def tracker(existence, bus) -> SingleInstanceTracker:
    """Tracker subscribed before the catalog publishes its first rebuild."""
    return SingleInstanceTracker(existence, bus)


@pytest.fixture
def catalog(provider, bus, tracker) -> TypeCatalog:
    catalog = TypeCatalog(provider, bus)
    catalog.rebuild()
    return catalog


@pytest.fixture
def weapon(catalog):
    return catalog.descriptor_for(WeaponData)


@pytest.fixture
def enemy(catalog):
    return catalog.descriptor_for(EnemyProfile)


@pytest.fixture
def boss(catalog):
    return catalog.descriptor_for(BossProfile)


@pytest.fixture
def loot(catalog):
    return catalog.descriptor_for(LootTable)


@pytest.fixture
def game_settings(catalog):
    return catalog.descriptor_for(GameSettings)


@pytest.fixture
def mixer(catalog):
    return catalog.descriptor_for(AudioMixerConfig)
