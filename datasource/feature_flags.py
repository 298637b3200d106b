"""Feature flags for the gradual move from mock fixtures to the real data store.

Each ``use_real_*`` flag switches one data domain. Flags persist through a
config store (the JSON app config by default) and stored values are merged
over DEFAULT_FLAGS, so flags added later pick up their defaults.
"""
import logging

from utils.app_config import JsonConfigStore

logger = logging.getLogger(__name__)

FEATURE_FLAGS_KEY = "feature_flags"

DEFAULT_FLAGS: dict[str, bool] = {
    "use_real_categories": True,
    "use_real_accounts": False,
    "use_real_transactions": False,
    "use_real_credit_cards": False,
    "use_real_auth": False,
    "use_real_budgets": False,
    "use_real_reports": False,
    "debug_mode": False,
    "parallel_mode": False,
}

FLAG_LABELS = {
    "use_real_categories": "Categorias reais",
    "use_real_accounts": "Contas reais",
    "use_real_transactions": "Transações reais",
    "use_real_credit_cards": "Cartões reais",
    "use_real_auth": "Autenticação real",
    "use_real_budgets": "Orçamentos reais",
    "use_real_reports": "Relatórios reais",
    "debug_mode": "Modo debug",
    "parallel_mode": "Modo paralelo",
}


class MemoryFlagStore:
    """Non-persistent store; used by tests and the REST server's overrides."""

    def __init__(self, initial: dict | None = None):
        self._value = dict(initial) if initial else None

    def load(self) -> dict | None:
        return dict(self._value) if self._value is not None else None

    def save(self, value: dict) -> None:
        self._value = dict(value)


class FeatureFlagManager:
    def __init__(self, store=None):
        self._store = store if store is not None else JsonConfigStore(FEATURE_FLAGS_KEY)
        self._flags = self._load()

    def _load(self) -> dict[str, bool]:
        flags = dict(DEFAULT_FLAGS)
        try:
            stored = self._store.load()
        except (OSError, ValueError) as e:
            logger.warning("Could not load feature flags, using defaults: %s", e)
            return flags
        if stored is None:
            return flags
        if not isinstance(stored, dict):
            logger.warning("Ignoring malformed feature flag store: %r", stored)
            return flags
        for name, value in stored.items():
            if name in flags:
                flags[name] = bool(value)
        return flags

    def _save(self):
        try:
            self._store.save(dict(self._flags))
        except OSError as e:
            logger.warning("Could not save feature flags: %s", e)

    def _check(self, name: str):
        if name not in self._flags:
            raise KeyError(f"Unknown feature flag '{name}'.")

    def _changed(self, name: str):
        if self._flags["debug_mode"] or name == "debug_mode":
            logger.info("Feature flag %s = %s", name, self._flags[name])

    # ── Queries ──────────────────────────────────────────────────────────────

    def is_enabled(self, name: str) -> bool:
        self._check(name)
        return self._flags[name]

    def get_all(self) -> dict[str, bool]:
        return dict(self._flags)

    # ── Mutations ────────────────────────────────────────────────────────────

    def enable(self, name: str):
        self._check(name)
        self._flags[name] = True
        self._save()
        self._changed(name)

    def disable(self, name: str):
        self._check(name)
        self._flags[name] = False
        self._save()
        self._changed(name)

    def toggle(self, name: str) -> bool:
        self._check(name)
        self._flags[name] = not self._flags[name]
        self._save()
        self._changed(name)
        return self._flags[name]

    def update(self, **flags: bool):
        for name in flags:
            self._check(name)
        for name, value in flags.items():
            self._flags[name] = bool(value)
        self._save()
        for name in flags:
            self._changed(name)

    def reset_to_defaults(self):
        self._flags = dict(DEFAULT_FLAGS)
        self._save()
        logger.info("Feature flags reset to defaults")

    def enable_all_real_features(self):
        for name in self._flags:
            if name.startswith("use_real_"):
                self._flags[name] = True
        self._save()
        logger.info("All real data sources enabled")
