"""Unit tests for AssetCreatorSession wiring."""

import json

import pytest

from asset_creator.core.config_manager import ConfigManager
from asset_creator.core.session import AssetCreatorSession
from asset_creator.core.settings import Visibility
from asset_creator.core.type_catalog import StaticTypeProvider, type_identity
from tests.infrastructure.mocks import FakeClock
from tests.infrastructure.sample_assets import ALL_SAMPLE_TYPES, GameSettings, LootTable, WeaponData


@pytest.fixture
def make_session(existence, factory, pinger, config_path):
    def _make(**overrides):
        options = dict(
            provider=StaticTypeProvider(ALL_SAMPLE_TYPES),
            pinger=pinger,
            config_path=config_path,
            config_manager=ConfigManager(),
            default_directory="Assets/Data",
            quiet_interval=0.5,
            clock=FakeClock(),
        )
        options.update(overrides)
        return AssetCreatorSession(factory, existence, **options)
    return _make


@pytest.fixture
def session(make_session):
    session = make_session()
    session.open()
    yield session
    session.close()


def _get(session, cls):
    return session.catalog.descriptor_for(cls)


class TestLifecycle:

    def test_open_discovers_types(self, session):
        assert session.is_open
        assert len(session.catalog) == 6
        assert len(session.search.results) == 6

    def test_open_twice_is_noop(self, session):
        passes = session.search.pass_count
        session.open()
        assert session.search.pass_count == passes

    def test_close_saves_and_releases_subscriptions(self, make_session, config_path):
        session = make_session()
        session.open()
        session.history.touch(_get(session, WeaponData))

        assert session.close() is True

        assert not session.is_open
        assert session.bus.subscriber_count() == 0
        document = json.loads(config_path.read_text(encoding="utf-8"))
        assert document["h_0"] == type_identity(WeaponData)

    def test_close_when_not_open(self, make_session):
        assert make_session().close() is True

    def test_state_survives_between_sessions(self, make_session):
        first = make_session()
        first.open()
        first.toggle_favorite(_get(first, LootTable))
        first.settings.single_instance_visibility = Visibility.HIDDEN
        first.close()

        second = make_session()
        second.open()

        assert second.favorites.items == (_get(second, LootTable),)
        assert second.settings.single_instance_visibility is Visibility.HIDDEN
        second.close()

    def test_content_change_rebuilds_catalog(self, make_session):
        provider = StaticTypeProvider([WeaponData])
        session = make_session(provider=provider)
        session.open()

        provider.set_types([WeaponData, LootTable])
        session.on_content_changed()

        assert [d.name for d in session.search.results] == ["WeaponData", "LootTable"]
        session.close()

    def test_reopen_after_close_rejoins_bus(self, make_session, existence):
        session = make_session()
        session.open()
        session.close()
        session.open()

        game_settings = _get(session, GameSettings)
        existence.add(game_settings)
        session.on_content_changed()

        assert not session.is_available(game_settings)
        assert not session.search.is_interactive(game_settings)
        assert session.toggle_cart(_get(session, WeaponData)) is True
        session.close()
        assert session.bus.subscriber_count() == 0


class TestOperatorActions:

    def test_toggle_cart(self, session):
        weapon = _get(session, WeaponData)
        assert session.toggle_cart(weapon) is True
        assert session.cart.contains(weapon)

        assert session.toggle_cart(weapon) is False
        assert not session.cart.contains(weapon)

    def test_toggle_favorite(self, session):
        loot = _get(session, LootTable)
        assert session.toggle_favorite(loot) is True
        assert session.favorites.items == (loot,)
        assert session.toggle_favorite(loot) is False
        assert session.favorites.items == ()

    def test_single_instance_type_cannot_be_favorited(self, session):
        game_settings = _get(session, GameSettings)
        assert not session.can_favorite(game_settings)
        assert session.toggle_favorite(game_settings) is False
        assert len(session.favorites) == 0

    def test_create_cart_records_history(self, session, factory):
        weapon = _get(session, WeaponData)
        loot = _get(session, LootTable)
        session.toggle_cart(weapon)
        session.toggle_cart(loot)

        report = session.create_cart()

        assert report.ok
        assert session.history.items == (weapon, loot)
        assert session.cart.count == 0
        assert [call[1] for call in factory.calls] == ["Assets/Data/WeaponData.asset", "Assets/Data/LootTable.asset"]

    def test_creating_single_instance_type_marks_it_unavailable(self, session):
        game_settings = _get(session, GameSettings)
        assert session.is_available(game_settings)

        session.toggle_cart(game_settings)
        session.create_cart()

        assert not session.is_available(game_settings)
        assert not session.search.is_interactive(game_settings)

        session.settings.single_instance_visibility = Visibility.HIDDEN
        assert game_settings not in session.search.results

    def test_quick_create(self, session, factory):
        weapon = _get(session, WeaponData)

        instance = session.quick_create(weapon)

        assert instance is factory.created[-1]
        assert factory.calls[-1] == (weapon.identity, "Assets/Data/WeaponData.asset", True)
        assert session.history.items == (weapon,)

    def test_quick_create_respects_overwrite(self, session, factory):
        session.settings.overwrite_existing = True
        session.quick_create(_get(session, WeaponData))
        assert factory.calls[-1][2] is False

    def test_quick_create_failure_returns_none(self, session, factory):
        weapon = _get(session, WeaponData)
        factory.fail_for(weapon)

        assert session.quick_create(weapon) is None
        assert len(session.history) == 0

    def test_quick_create_none_is_rejected(self, session):
        with pytest.raises(TypeError):
            session.quick_create(None)

    def test_ping_on_create(self, session, pinger):
        session.quick_create(_get(session, WeaponData))
        assert pinger.pinged == []

        session.settings.ping_on_create = True
        instance = session.quick_create(_get(session, LootTable))
        assert pinger.pinged == [instance]


class TestSingleInstanceGuards:

    def test_second_quick_create_is_refused(self, session, factory):
        game_settings = _get(session, GameSettings)

        assert session.quick_create(game_settings) is not None
        assert session.quick_create(game_settings) is None
        assert len(factory.calls) == 1

    def test_cart_refuses_type_after_quick_create(self, session, factory):
        game_settings = _get(session, GameSettings)
        session.quick_create(game_settings)

        assert session.toggle_cart(game_settings) is False
        report = session.create_cart()

        assert report.created == []
        assert len(factory.calls) == 1

    def test_queued_type_created_elsewhere_is_skipped_on_drain(self, session, factory):
        game_settings = _get(session, GameSettings)
        session.toggle_cart(game_settings)
        session.quick_create(game_settings)

        report = session.create_cart()

        assert len(factory.calls) == 1
        assert [failure.type for failure in report.failures] == [game_settings]
        assert session.cart.count == 0
