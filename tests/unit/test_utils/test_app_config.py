"""Tests for the JSON bootstrap config."""

import json

from utils import app_config


class TestConfigFile:
    """Test reading and writing config.json."""

    def test_missing_file_is_empty(self):
        assert app_config.load_config() == {}

    def test_corrupt_file_is_empty(self, isolated_config):
        isolated_config.mkdir(parents=True)
        (isolated_config / "config.json").write_text("{not json", encoding="utf-8")
        assert app_config.load_config() == {}

    def test_non_object_is_empty(self, isolated_config):
        isolated_config.mkdir(parents=True)
        (isolated_config / "config.json").write_text("[1, 2]", encoding="utf-8")
        assert app_config.load_config() == {}

    def test_set_value_persists(self, isolated_config):
        app_config.set_value("log_level", "DEBUG")
        assert app_config.get_value("log_level") == "DEBUG"
        with open(isolated_config / "config.json", encoding="utf-8") as f:
            assert json.load(f) == {"log_level": "DEBUG"}
        assert not (isolated_config / "config.tmp").exists()

    def test_none_removes_key(self):
        app_config.set_value("db_folder", "/tmp/x")
        app_config.set_value("db_folder", None)
        assert "db_folder" not in app_config.load_config()


class TestAccessors:
    """Test typed accessors and env overrides."""

    def test_db_folder_round_trip(self):
        assert app_config.get_db_folder() is None
        app_config.set_db_folder("/data/financas")
        assert app_config.get_db_folder() == "/data/financas"

    def test_api_url_env_wins(self, monkeypatch):
        app_config.set_value("api_base_url", "http://config:5000")
        assert app_config.get_api_base_url() == "http://config:5000"
        monkeypatch.setenv("DETETIVE_API_URL", "http://env:5000")
        assert app_config.get_api_base_url() == "http://env:5000"

    def test_log_level_default_and_env(self, monkeypatch):
        assert app_config.get_log_level() == "INFO"
        monkeypatch.setenv("DETETIVE_LOG_LEVEL", "WARNING")
        assert app_config.get_log_level() == "WARNING"

    def test_secret_key_generated_once(self):
        first = app_config.get_secret_key()
        assert len(first) == 64
        assert app_config.get_secret_key() == first
