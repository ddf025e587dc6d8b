"""Unit tests for PersistenceCodec."""

import pytest

from asset_creator.core.config_manager import ConfigManager
from asset_creator.core.persistence import PersistenceCodec, favorites_key, history_key
from asset_creator.core.recency import FavoritesStore, HistoryStore
from asset_creator.core.settings import SettingsStore, Visibility


@pytest.fixture
def history(bus, settings):
    return HistoryStore(bus, settings)


@pytest.fixture
def favorites(bus, settings, tracker):
    return FavoritesStore(bus, settings, tracker)


@pytest.fixture
def codec(catalog, tracker):
    return PersistenceCodec(catalog.resolve, tracker)


class TestSerialize:

    def test_layout(self, codec, history, favorites, settings, weapon, enemy, loot):
        history.restore([weapon, enemy])
        favorites.restore([loot])
        settings.single_instance_visibility = Visibility.HIDDEN

        mapping = codec.serialize(history, favorites, settings)

        assert mapping == {
            "h_0": weapon.identity,
            "h_1": enemy.identity,
            "f_0": loot.identity,
            "history_capacity": 10,
            "favorites_capacity": 10,
            "overwrite_existing": False,
            "ping_on_create": False,
            "single_instance_visibility": 0,
        }

    def test_keys(self):
        assert history_key(3) == "h_3"
        assert favorites_key(0) == "f_0"

    def test_overwrite_false_only_fills_missing(self, codec, history, favorites, settings, weapon):
        history.restore([weapon])
        target = {"history_capacity": 42, "unrelated": "kept"}

        codec.serialize(history, favorites, settings, target, overwrite=False)

        assert target["history_capacity"] == 42
        assert target["unrelated"] == "kept"
        assert target["h_0"] == weapon.identity
        assert target["favorites_capacity"] == 10

    def test_writes_into_given_target(self, codec, history, favorites, settings):
        target = {"h_0": "old"}
        result = codec.serialize(history, favorites, settings, target)
        assert result is target


class TestDeserialize:

    def test_round_trip_restores_state(self, codec, history, favorites, settings, bus, tracker, weapon, enemy, loot):
        history.restore([weapon, enemy, loot])
        favorites.restore([enemy])
        settings.history_capacity = 40
        settings.favorites_capacity = 20
        settings.overwrite_existing = True
        settings.ping_on_create = True
        mapping = codec.serialize(history, favorites, settings)

        fresh_settings = SettingsStore()
        fresh_history = HistoryStore(bus, fresh_settings)
        fresh_favorites = FavoritesStore(bus, fresh_settings, tracker)
        codec.deserialize(mapping, fresh_history, fresh_favorites, fresh_settings)

        assert fresh_history.items == (weapon, enemy, loot)
        assert fresh_favorites.items == (enemy,)
        assert fresh_settings.snapshot() == settings.snapshot()

    def test_scan_stops_at_first_gap(self, codec, history, favorites, settings, weapon, enemy, loot):
        mapping = {"h_0": weapon.identity, "h_1": enemy.identity, "h_3": loot.identity}
        codec.deserialize(mapping, history, favorites, settings)
        assert history.items == (weapon, enemy)

    def test_lists_are_scanned_independently(self, codec, history, favorites, settings, weapon, enemy):
        mapping = {"h_0": weapon.identity, "f_1": enemy.identity}
        codec.deserialize(mapping, history, favorites, settings)
        assert history.items == (weapon,)
        assert favorites.items == ()

    def test_unresolvable_identity_is_skipped(self, codec, history, favorites, settings, weapon, enemy):
        mapping = {"h_0": "gone.Type", "h_1": weapon.identity, "f_0": enemy.identity, "f_1": "gone.Other"}
        codec.deserialize(mapping, history, favorites, settings)
        assert history.items == (weapon,)
        assert favorites.items == (enemy,)

    def test_instantiated_single_instance_favorite_is_dropped(self, codec, existence, catalog, history, favorites, settings, weapon, game_settings):
        existence.add(game_settings)
        catalog.rebuild()

        mapping = {"f_0": game_settings.identity, "f_1": weapon.identity, "h_0": game_settings.identity}
        codec.deserialize(mapping, history, favorites, settings)

        assert favorites.items == (weapon,)
        assert history.items == (game_settings,)

    def test_deserialize_replaces_existing_lists(self, codec, history, favorites, settings, weapon, loot):
        history.restore([loot])
        codec.deserialize({"h_0": weapon.identity}, history, favorites, settings)
        assert history.items == (weapon,)

    def test_missing_settings_keep_current(self, codec, history, favorites, settings):
        settings.overwrite_existing = True
        settings.history_capacity = 50
        codec.deserialize({"ping_on_create": True}, history, favorites, settings)

        assert settings.overwrite_existing is True
        assert settings.history_capacity == 50
        assert settings.ping_on_create is True

    def test_capacities_are_clamped(self, codec, history, favorites, settings):
        codec.deserialize({"history_capacity": 1, "favorites_capacity": 500}, history, favorites, settings)
        assert settings.history_capacity == 10
        assert settings.favorites_capacity == 30

    def test_restored_lists_are_not_trimmed(self, codec, catalog, history, favorites, settings):
        mapping = {favorites_key(i): d.identity for i, d in enumerate(catalog)}
        mapping["favorites_capacity"] = 5

        codec.deserialize(mapping, history, favorites, settings)

        assert settings.favorites_capacity == 5
        assert len(favorites) == len(catalog) == 6

    @pytest.mark.parametrize("raw, expected", [
        ("true", True), ("0", False), (1, True), (False, False),
    ])
    def test_bool_values_are_coerced(self, codec, history, favorites, settings, raw, expected):
        codec.deserialize({"overwrite_existing": raw}, history, favorites, settings)
        assert settings.overwrite_existing is expected

    @pytest.mark.parametrize("raw, expected", [
        (0, Visibility.HIDDEN), ("1", Visibility.DISABLED), ("hidden", Visibility.HIDDEN), (7, Visibility.DISABLED),
    ])
    def test_visibility_values_are_coerced(self, codec, history, favorites, settings, raw, expected):
        codec.deserialize({"single_instance_visibility": raw}, history, favorites, settings)
        assert settings.single_instance_visibility is expected

    def test_malformed_capacity_keeps_current(self, codec, history, favorites, settings):
        codec.deserialize({"history_capacity": "many"}, history, favorites, settings)
        assert settings.history_capacity == 10

    def test_unparseable_bool_keeps_current(self, codec, history, favorites, settings):
        settings.ping_on_create = True
        codec.deserialize({"ping_on_create": "sometimes"}, history, favorites, settings)
        assert settings.ping_on_create is True

    def test_settings_are_read_through_config_manager(self, catalog, tracker, history, favorites, settings):
        class CountingConfigManager(ConfigManager):
            def __init__(self):
                super().__init__()
                self.keys = []

            def get_int(self, config, key, default=0):
                self.keys.append(key)
                return super().get_int(config, key, default)

            def get_bool(self, config, key, default=False):
                self.keys.append(key)
                return super().get_bool(config, key, default)

        manager = CountingConfigManager()
        codec = PersistenceCodec(catalog.resolve, tracker, manager)

        codec.deserialize({"history_capacity": "25"}, history, favorites, settings)

        assert settings.history_capacity == 25
        assert {"history_capacity", "favorites_capacity", "overwrite_existing", "ping_on_create"} <= set(manager.keys)
