"""
Pytest Configuration and Shared Fixtures

Every test gets its own sqlite file and its own config directory, so nothing
touches ~/.detetive_financeiro or the working directory.
"""

from datetime import date

import pytest

from api.server import create_app
from database.db_manager import DatabaseManager
from datasource.feature_flags import FeatureFlagManager, MemoryFlagStore
from datasource.mock_store import MockStore
from datasource.sources import DataSources
from services.registry import build_services

# Fixed "today" for the mock fixtures; all of them land in March 2024
REF_DATE = date(2024, 3, 20)

ALL_REAL = {
    "use_real_categories": True,
    "use_real_accounts": True,
    "use_real_transactions": True,
    "use_real_credit_cards": True,
    "use_real_budgets": True,
    "use_real_reports": True,
    "use_real_auth": False,
}
ALL_MOCK = {name: False for name in ALL_REAL}


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Point the JSON app config at a throwaway directory."""
    config_dir = tmp_path / "config"
    monkeypatch.setenv("DETETIVE_CONFIG_DIR", str(config_dir))
    monkeypatch.delenv("DETETIVE_API_URL", raising=False)
    monkeypatch.delenv("DETETIVE_LOG_LEVEL", raising=False)
    return config_dir


@pytest.fixture
def db(tmp_path):
    """Initialized sqlite database in a temp file."""
    manager = DatabaseManager(str(tmp_path / "detetive_test.db"))
    manager.initialize()
    yield manager
    manager.close()


@pytest.fixture
def user_id(db) -> int:
    return db.local_user_id()


@pytest.fixture
def real_flags() -> FeatureFlagManager:
    """Every data domain on the sqlite store; auth off."""
    return FeatureFlagManager(MemoryFlagStore(ALL_REAL))


@pytest.fixture
def mock_flags() -> FeatureFlagManager:
    """Every data domain on the mock store."""
    return FeatureFlagManager(MemoryFlagStore(ALL_MOCK))


@pytest.fixture
def mock_store() -> MockStore:
    return MockStore(ref_date=REF_DATE)


@pytest.fixture
def sources(real_flags, mock_store, db, user_id) -> DataSources:
    return DataSources(real_flags, mock_store, db, user_id)


@pytest.fixture
def services(sources):
    """Service bundle over the sqlite store."""
    return build_services(sources)


@pytest.fixture
def mock_services(mock_flags, mock_store, db, user_id):
    """Service bundle over the mock fixtures (settings and states still in sqlite)."""
    return build_services(DataSources(mock_flags, mock_store, db, user_id))


@pytest.fixture
def checking(services):
    """A default checking account holding R$ 5.000,00."""
    return services.accounts.create("Conta Corrente", initial_balance=5000.0)


@pytest.fixture
def credit_card(services):
    """A credit card with a R$ 3.000,00 limit closing on day 5."""
    return services.cards.create(
        "Cartão Roxo", brand="mastercard", last_digits="4321",
        credit_limit=3000.0, closing_day=5, due_day=15,
    )


@pytest.fixture
def category_ids(services) -> dict[str, int]:
    """System category name → id."""
    return {c.name: c.id for c in services.categories.get_all()}


def _make_app(tmp_path, flags, mock_store):
    return create_app({
        "DATABASE": str(tmp_path / "detetive_api.db"),
        "FEATURE_FLAGS": flags,
        "MOCK_STORE": mock_store,
        "SECRET_KEY": "test-secret",
        "TESTING": True,
    })


@pytest.fixture
def app(tmp_path, real_flags, mock_store):
    flask_app = _make_app(tmp_path, real_flags, mock_store)
    yield flask_app
    flask_app.extensions["detetive.db"].close()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_app(tmp_path, mock_store):
    """App with use_real_auth on: every data route needs a session."""
    flags = FeatureFlagManager(MemoryFlagStore(dict(ALL_REAL, use_real_auth=True)))
    flask_app = _make_app(tmp_path, flags, mock_store)
    yield flask_app
    flask_app.extensions["detetive.db"].close()


@pytest.fixture
def auth_client(auth_app):
    return auth_app.test_client()


# Test markers for categorizing tests
def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests for individual components"
    )
    config.addinivalue_line(
        "markers", "integration: Tests that go through sqlite or the Flask app"
    )
    config.addinivalue_line(
        "markers", "currency: Tests for pt-BR money parsing and formatting"
    )
    config.addinivalue_line(
        "markers", "api: Tests for the REST server and its client"
    )
    config.addinivalue_line(
        "markers", "notifications: Tests for notification rules and states"
    )
