from dataclasses import dataclass
from database.db_manager import DatabaseManager
from database.user_dao import UserDAO
from datasource.sources import DataSources
from services.account_service import AccountService
from services.auth_service import AuthService
from services.bill_service import BillService
from services.budget_service import BudgetService
from services.category_service import CategoryService
from services.credit_card_service import CreditCardService
from services.monthly_plan_service import MonthlyPlanService
from services.notification_service import NotificationService
from services.report_service import ReportService
from services.transaction_service import TransactionService


@dataclass
class Services:
    accounts: AccountService
    cards: CreditCardService
    transactions: TransactionService
    bills: BillService
    categories: CategoryService
    budgets: BudgetService
    plans: MonthlyPlanService
    notifications: NotificationService
    reports: ReportService
    auth: AuthService


def build_services(sources: DataSources) -> Services:
    """Wire every service to the repositories the feature flags currently select.

    Rebuild after toggling a flag; the bundle does not follow flag changes.
    """
    db: DatabaseManager = sources.db

    # ── Repositories ─────────────────────────────────────────────────────────
    account_repo = sources.accounts()
    card_repo = sources.credit_cards()
    bill_repo = sources.bills()
    category_repo = sources.categories()
    tx_repo = sources.transactions()
    budget_repo = sources.budgets()

    # ── Services ─────────────────────────────────────────────────────────────
    tx_svc = TransactionService(tx_repo, account_repo, card_repo, bill_repo)
    budget_svc = BudgetService(budget_repo, tx_repo, category_repo)
    return Services(
        accounts=AccountService(account_repo),
        cards=CreditCardService(card_repo),
        transactions=tx_svc,
        bills=BillService(bill_repo, card_repo, account_repo, tx_svc),
        categories=CategoryService(category_repo),
        budgets=budget_svc,
        plans=MonthlyPlanService(sources.monthly_plans(), tx_repo, category_repo),
        notifications=NotificationService(
            account_repo,
            card_repo,
            bill_repo,
            tx_repo,
            budget_svc,
            sources.notification_states(),
            db,
            sources.user_id,
        ),
        reports=ReportService(*sources.report_repositories()),
        auth=AuthService(UserDAO(db)),
    )
