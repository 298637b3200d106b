"""Tests for flag-driven repository selection."""

from unittest.mock import MagicMock

import pytest

from database.account_dao import AccountDAO
from database.bill_dao import BillDAO
from database.budget_dao import BudgetDAO
from database.monthly_plan_dao import MonthlyPlanDAO
from datasource.api_client import ApiClient
from datasource.feature_flags import FeatureFlagManager, MemoryFlagStore
from datasource.mock_store import MockAccountRepository, MockBillRepository
from datasource.remote import RemoteAccountRepository, RemoteTransactionRepository
from datasource.sources import DataSources


@pytest.fixture
def api_client():
    return ApiClient("http://localhost:5000", session=MagicMock())


class TestSourceSelection:
    """Test source_for and describe."""

    def test_default_flags(self, mock_store, db, user_id):
        sources = DataSources(FeatureFlagManager(MemoryFlagStore()), mock_store, db, user_id)
        assert sources.describe() == {
            "accounts": "mock",
            "categories": "local",
            "transactions": "mock",
            "credit_cards": "mock",
            "bills": "mock",
            "budgets": "mock",
            "reports": "mock",
        }

    def test_local_repositories(self, sources):
        assert isinstance(sources.accounts(), AccountDAO)
        assert isinstance(sources.bills(), BillDAO)
        assert isinstance(sources.budgets(), BudgetDAO)

    def test_mock_repositories(self, mock_flags, mock_store, db, user_id):
        sources = DataSources(mock_flags, mock_store, db, user_id)
        assert isinstance(sources.accounts(), MockAccountRepository)
        assert isinstance(sources.bills(), MockBillRepository)

    def test_remote_when_client_configured(self, real_flags, mock_store, db, user_id, api_client):
        sources = DataSources(real_flags, mock_store, db, user_id, api_client)
        assert sources.source_for("accounts") == "remote"
        assert isinstance(sources.accounts(), RemoteAccountRepository)
        assert isinstance(sources.transactions(), RemoteTransactionRepository)
        # No endpoint for these; they stay on sqlite
        assert sources.source_for("bills") == "local"
        assert sources.source_for("budgets") == "local"

    def test_plans_and_states_always_local(self, mock_flags, mock_store, db, user_id):
        sources = DataSources(mock_flags, mock_store, db, user_id)
        assert isinstance(sources.monthly_plans(), MonthlyPlanDAO)

    def test_flag_change_is_seen(self, real_flags, mock_store, db, user_id):
        sources = DataSources(real_flags, mock_store, db, user_id)
        real_flags.disable("use_real_accounts")
        assert sources.source_for("accounts") == "mock"

    def test_reports_follow_their_own_flag(self, real_flags, mock_store, db, user_id):
        sources = DataSources(real_flags, mock_store, db, user_id)
        assert sources.source_for("reports") == "local"
        assert isinstance(sources.report_repositories()[2], AccountDAO)
        real_flags.disable("use_real_reports")
        assert sources.source_for("reports") == "mock"
        tx_repo, _, account_repo = sources.report_repositories()
        assert isinstance(account_repo, MockAccountRepository)
        assert tx_repo.get_all()

    def test_unknown_domain(self, sources):
        with pytest.raises(KeyError):
            sources.source_for("goals")
