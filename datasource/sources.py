import logging

from database.account_dao import AccountDAO
from database.bill_dao import BillDAO
from database.budget_dao import BudgetDAO
from database.category_dao import CategoryDAO
from database.credit_card_dao import CreditCardDAO
from database.db_manager import DatabaseManager
from database.monthly_plan_dao import MonthlyPlanDAO
from database.notification_state_dao import NotificationStateDAO
from database.transaction_dao import TransactionDAO
from datasource.api_client import ApiClient
from datasource.feature_flags import FeatureFlagManager
from datasource.mock_store import MockStore
from datasource.remote import (
    RemoteAccountRepository,
    RemoteCategoryRepository,
    RemoteCreditCardRepository,
    RemoteTransactionRepository,
)

logger = logging.getLogger(__name__)

# domain → (flag, whether a remote repository exists)
DOMAINS = {
    "accounts": ("use_real_accounts", True),
    "categories": ("use_real_categories", True),
    "transactions": ("use_real_transactions", True),
    "credit_cards": ("use_real_credit_cards", True),
    "bills": ("use_real_credit_cards", False),
    "budgets": ("use_real_budgets", False),
    # reads whatever the transactions domain reads
    "reports": ("use_real_reports", True),
}


class DataSources:
    """Hands out one repository per data domain according to the feature flags.

    Flag off: the in-memory mock store. Flag on: the sqlite DAO, or the REST
    server when an ApiClient is configured and the domain has an endpoint.
    """

    def __init__(
        self,
        flags: FeatureFlagManager,
        mock_store: MockStore,
        db: DatabaseManager,
        user_id: int,
        api_client: ApiClient | None = None,
    ):
        self.flags = flags
        self.mock_store = mock_store
        self.db = db
        self.user_id = user_id
        self.api_client = api_client

    def source_for(self, domain: str) -> str:
        """'mock', 'local' or 'remote'."""
        flag, has_remote = DOMAINS[domain]
        if not self.flags.is_enabled(flag):
            return "mock"
        if domain == "reports":
            return self.source_for("transactions")
        if has_remote and self.api_client is not None:
            return "remote"
        return "local"

    def describe(self) -> dict[str, str]:
        return {domain: self.source_for(domain) for domain in DOMAINS}

    # ── Repositories ─────────────────────────────────────────────────────────

    def accounts(self):
        source = self.source_for("accounts")
        if source == "mock":
            return self.mock_store.account_repository()
        if source == "remote":
            return RemoteAccountRepository(self.api_client)
        return AccountDAO(self.db, self.user_id)

    def categories(self):
        source = self.source_for("categories")
        if source == "mock":
            return self.mock_store.category_repository()
        if source == "remote":
            return RemoteCategoryRepository(self.api_client)
        return CategoryDAO(self.db, self.user_id)

    def transactions(self):
        source = self.source_for("transactions")
        if source == "mock":
            return self.mock_store.transaction_repository()
        if source == "remote":
            return RemoteTransactionRepository(self.api_client)
        return TransactionDAO(self.db, self.user_id)

    def credit_cards(self):
        source = self.source_for("credit_cards")
        if source == "mock":
            return self.mock_store.credit_card_repository()
        if source == "remote":
            return RemoteCreditCardRepository(self.api_client)
        return CreditCardDAO(self.db, self.user_id)

    def bills(self):
        if self.source_for("bills") == "mock":
            return self.mock_store.bill_repository()
        return BillDAO(self.db, self.user_id)

    def budgets(self):
        if self.source_for("budgets") == "mock":
            return self.mock_store.budget_repository()
        return BudgetDAO(self.db, self.user_id)

    def report_repositories(self) -> tuple:
        """(transactions, categories, accounts) for the report service."""
        if self.source_for("reports") == "mock":
            return (
                self.mock_store.transaction_repository(),
                self.mock_store.category_repository(),
                self.mock_store.account_repository(),
            )
        return self.transactions(), self.categories(), self.accounts()

    def monthly_plans(self) -> MonthlyPlanDAO:
        return MonthlyPlanDAO(self.db, self.user_id)

    def notification_states(self) -> NotificationStateDAO:
        return NotificationStateDAO(self.db, self.user_id)
