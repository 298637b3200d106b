"""Tests for feature flag persistence and defaults."""

import json
import logging

import pytest

from datasource.feature_flags import DEFAULT_FLAGS, FeatureFlagManager, MemoryFlagStore


class BrokenStore:
    """Store whose backing file cannot be read or written."""

    def load(self):
        raise OSError("disco indisponível")

    def save(self, value):
        raise OSError("disco indisponível")


class ListStore(MemoryFlagStore):
    """Store holding something other than a JSON object."""

    def load(self):
        return ["use_real_accounts"]


class TestDefaults:
    """Test the starting state."""

    def test_defaults_without_stored_flags(self):
        flags = FeatureFlagManager(MemoryFlagStore())
        assert flags.get_all() == DEFAULT_FLAGS
        assert flags.is_enabled("use_real_categories")
        assert not flags.is_enabled("use_real_accounts")

    def test_stored_values_merge_over_defaults(self):
        flags = FeatureFlagManager(MemoryFlagStore({"use_real_accounts": 1, "obsolete": True}))
        assert flags.is_enabled("use_real_accounts") is True
        assert "obsolete" not in flags.get_all()
        assert flags.is_enabled("use_real_categories")

    def test_unknown_flag(self):
        with pytest.raises(KeyError):
            FeatureFlagManager(MemoryFlagStore()).is_enabled("use_real_goals")

    def test_unreadable_store_falls_back(self, caplog):
        with caplog.at_level(logging.WARNING):
            flags = FeatureFlagManager(BrokenStore())
        assert flags.get_all() == DEFAULT_FLAGS
        assert "using defaults" in caplog.text

    def test_malformed_store_falls_back(self):
        assert FeatureFlagManager(ListStore()).get_all() == DEFAULT_FLAGS


class TestMutations:
    """Test changes and their persistence."""

    def test_toggle_persists(self):
        store = MemoryFlagStore()
        flags = FeatureFlagManager(store)
        assert flags.toggle("use_real_accounts") is True
        assert store.load()["use_real_accounts"] is True
        assert FeatureFlagManager(store).is_enabled("use_real_accounts")

    def test_enable_disable(self):
        flags = FeatureFlagManager(MemoryFlagStore())
        flags.enable("use_real_budgets")
        assert flags.is_enabled("use_real_budgets")
        flags.disable("use_real_budgets")
        assert not flags.is_enabled("use_real_budgets")

    def test_update_is_all_or_nothing(self):
        flags = FeatureFlagManager(MemoryFlagStore())
        with pytest.raises(KeyError):
            flags.update(use_real_accounts=True, use_real_goals=True)
        assert not flags.is_enabled("use_real_accounts")

    def test_enable_all_real_features(self):
        flags = FeatureFlagManager(MemoryFlagStore())
        flags.enable_all_real_features()
        real = {k: v for k, v in flags.get_all().items() if k.startswith("use_real_")}
        assert all(real.values())
        assert not flags.is_enabled("debug_mode")

    def test_reset_to_defaults(self):
        flags = FeatureFlagManager(MemoryFlagStore())
        flags.enable_all_real_features()
        flags.reset_to_defaults()
        assert flags.get_all() == DEFAULT_FLAGS

    def test_save_failure_keeps_memory_value(self, caplog):
        flags = FeatureFlagManager(BrokenStore())
        flags.enable("use_real_accounts")
        assert flags.is_enabled("use_real_accounts")
        assert "Could not save" in caplog.text

    def test_debug_mode_logs_changes(self, caplog):
        flags = FeatureFlagManager(MemoryFlagStore({"debug_mode": True}))
        with caplog.at_level(logging.INFO, logger="datasource.feature_flags"):
            flags.enable("use_real_accounts")
        assert "use_real_accounts = True" in caplog.text


class TestJsonStore:
    """Test the default store backed by config.json."""

    def test_flags_written_to_config(self, isolated_config):
        FeatureFlagManager().enable("use_real_transactions")
        with open(isolated_config / "config.json", encoding="utf-8") as f:
            stored = json.load(f)["feature_flags"]
        assert stored["use_real_transactions"] is True
        assert FeatureFlagManager().is_enabled("use_real_transactions")
