"""Pre-DB bootstrap configuration. Zero imports from the rest of the app.

Stores values that must be known before opening the DB (db_folder, log level,
API base URL) plus the persisted feature flags and the Flask session key.
Config lives in ~/.detetive_financeiro/config.json unless DETETIVE_CONFIG_DIR
points elsewhere.
"""
import json
import logging
import os
import secrets
from pathlib import Path

logger = logging.getLogger(__name__)

CONFIG_DIR_ENV = "DETETIVE_CONFIG_DIR"


def config_dir() -> Path:
    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override)
    return Path.home() / ".detetive_financeiro"


def config_file() -> Path:
    return config_dir() / "config.json"


def load_config() -> dict:
    """Returns {} on missing or corrupt file; never raises."""
    path = config_file()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        return {}
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Ignoring unreadable config %s: %s", path, e)
        return {}
    return data if isinstance(data, dict) else {}


def save_config(config: dict) -> None:
    """Creates the config dir if needed; atomic write via .tmp + os.replace()."""
    path = config_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(".tmp")
    try:
        with open(tmp, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2, ensure_ascii=False)
        os.replace(tmp, path)
    except OSError:
        tmp.unlink(missing_ok=True)
        raise


def get_value(key: str, default=None):
    return load_config().get(key, default)


def set_value(key: str, value) -> None:
    """Update one key in config and save. None removes the key."""
    config = load_config()
    if value is None:
        config.pop(key, None)
    else:
        config[key] = value
    save_config(config)


def get_db_folder() -> str | None:
    return get_value("db_folder")


def set_db_folder(path: str | None) -> None:
    set_value("db_folder", path)


def get_api_base_url() -> str | None:
    """Base URL of a remote REST server, e.g. 'http://localhost:5000'."""
    return os.environ.get("DETETIVE_API_URL") or get_value("api_base_url")


def get_log_level() -> str:
    return os.environ.get("DETETIVE_LOG_LEVEL") or get_value("log_level", "INFO")


def get_secret_key() -> str:
    """Return the persisted Flask session key, generating it on first use."""
    key = get_value("secret_key")
    if not key:
        key = secrets.token_hex(32)
        set_value("secret_key", key)
    return key


class JsonConfigStore:
    """Key-scoped view over the JSON config, used by the feature-flag manager."""

    def __init__(self, key: str):
        self._key = key

    def load(self) -> dict | None:
        return get_value(self._key)

    def save(self, value: dict) -> None:
        set_value(self._key, value)
