"""Development fixtures served by the mock store.

Dates are relative to a reference day so bills stay "due soon" and budgets
stay current whenever the app is started.
"""
from datetime import date, timedelta

from models.account import Account
from models.bill import CreditCardBill
from models.budget import Budget
from models.category import Category
from models.credit_card import CreditCard
from models.transaction import Transaction
from models.user import User
from utils.constants import DEFAULT_CATEGORIES
from utils.date_helpers import format_date, format_month, month_range, add_months

MOCK_USER_ID = 1


def mock_user() -> User:
    return User(id=MOCK_USER_ID, email="usuario@exemplo.com", full_name="Usuário Exemplo")


def mock_categories() -> list[Category]:
    return [
        Category(
            id=i,
            name=c["name"],
            type=c["type"],
            color=c["color"],
            icon=c["icon"],
            is_system=True,
        )
        for i, c in enumerate(DEFAULT_CATEGORIES, start=1)
    ]


def _category_id(name: str) -> int:
    for i, c in enumerate(DEFAULT_CATEGORIES, start=1):
        if c["name"] == name:
            return i
    raise KeyError(name)


def mock_accounts() -> list[Account]:
    return [
        Account(id=1, name="Conta Corrente Nubank", account_type="checking",
                balance=5420.50, initial_balance=1000.0, bank_name="Nubank",
                bank_code="260", agency_number="0001", account_number="12345678-9",
                color="#8A05BE", is_default=True, user_id=MOCK_USER_ID),
        Account(id=2, name="Poupança Itaú", account_type="savings",
                balance=15000.0, initial_balance=15000.0, bank_name="Itaú",
                bank_code="341", agency_number="1234", account_number="56789-0",
                color="#EC7000", user_id=MOCK_USER_ID),
        Account(id=3, name="Carteira", account_type="cash",
                balance=350.0, initial_balance=350.0, color="#4CAF50",
                user_id=MOCK_USER_ID),
        Account(id=4, name="Investimentos XP", account_type="investment",
                balance=25000.0, initial_balance=25000.0, bank_name="XP",
                bank_code="102", color="#000000", include_in_total=False,
                user_id=MOCK_USER_ID),
        Account(id=5, name="Conta Antiga", account_type="checking",
                balance=0.0, bank_name="Bradesco", bank_code="237",
                is_active=False, user_id=MOCK_USER_ID),
    ]


def mock_credit_cards() -> list[CreditCard]:
    return [
        CreditCard(id=1, name="Nubank Roxinho", brand="mastercard", card_type="credit",
                   last_digits="1234", credit_limit=8000.0, available_limit=5200.0,
                   closing_day=5, due_day=15, color="#8A05BE", is_default=True,
                   user_id=MOCK_USER_ID),
        CreditCard(id=2, name="Itaú Click", brand="visa", card_type="credit",
                   last_digits="5678", credit_limit=5000.0, available_limit=4650.0,
                   closing_day=10, due_day=20, color="#EC7000", user_id=MOCK_USER_ID),
        CreditCard(id=3, name="Nubank Virtual", brand="mastercard", card_type="virtual",
                   last_digits="9012", is_virtual=True, parent_card_id=1,
                   color="#B15CE6", user_id=MOCK_USER_ID),
    ]


def mock_bills(ref: date) -> list[CreditCardBill]:
    current = format_month(ref)
    previous = format_month(add_months(ref.replace(day=1), -1))
    return [
        CreditCardBill(id=1, card_id=1, reference_month=previous,
                       closing_date=format_date(ref - timedelta(days=20)),
                       due_date=format_date(ref - timedelta(days=10)),
                       total_amount=2100.0, is_paid=True,
                       paid_at=format_date(ref - timedelta(days=11)),
                       card_name="Nubank Roxinho"),
        CreditCardBill(id=2, card_id=1, reference_month=current,
                       closing_date=format_date(ref - timedelta(days=8)),
                       due_date=format_date(ref + timedelta(days=2)),
                       total_amount=2800.0, card_name="Nubank Roxinho"),
        CreditCardBill(id=3, card_id=2, reference_month=previous,
                       closing_date=format_date(ref - timedelta(days=13)),
                       due_date=format_date(ref - timedelta(days=3)),
                       total_amount=350.0, card_name="Itaú Click"),
    ]


def mock_transactions(ref: date) -> list[Transaction]:
    def tx(id_, desc, amount, type_, days_ago, **kw) -> Transaction:
        d = ref - timedelta(days=days_ago)
        return Transaction(
            id=id_, description=desc, amount=amount, type=type_, date=format_date(d),
            competence_month=d.month, competence_year=d.year,
            user_id=MOCK_USER_ID, **kw,
        )

    return [
        tx(1, "Salário", 7500.0, "income", 10, account_id=1,
           category_id=_category_id("Salário")),
        tx(2, "Aluguel", 1800.0, "expense", 9, account_id=1,
           category_id=_category_id("Moradia")),
        tx(3, "Supermercado Pão de Açúcar", 450.30, "expense", 6, account_id=1,
           category_id=_category_id("Alimentação")),
        tx(4, "Uber", 38.90, "expense", 4, account_id=1,
           category_id=_category_id("Transporte")),
        tx(5, "Restaurante Japonês", 120.0, "credit_card_expense", 3, credit_card_id=1,
           bill_id=2, category_id=_category_id("Alimentação")),
        tx(6, "Farmácia", 85.50, "expense", 2, account_id=3,
           category_id=_category_id("Saúde")),
        tx(7, "Netflix", 55.90, "credit_card_expense", 2, credit_card_id=2,
           category_id=_category_id("Lazer")),
        tx(8, "Reserva de emergência", 500.0, "transfer", 1, account_id=1,
           transfer_to_account_id=2),
        tx(9, "Projeto freelance", 1200.0, "income", 1, account_id=1,
           category_id=_category_id("Freelance")),
        tx(10, "Conta de luz", 210.75, "expense", 0, account_id=1,
           category_id=_category_id("Contas e Serviços"), is_paid=False),
    ]


def mock_budgets(ref: date) -> list[Budget]:
    start, end = month_range(format_month(ref))
    return [
        Budget(id=1, name="Orçamento do Mês", amount=3000.0, start_date=start,
               end_date=end, category_ids=[
                   _category_id("Alimentação"),
                   _category_id("Transporte"),
                   _category_id("Lazer"),
               ], user_id=MOCK_USER_ID),
        Budget(id=2, name="Casa", amount=2500.0, start_date=start, end_date=end,
               category_ids=[_category_id("Moradia"), _category_id("Contas e Serviços")],
               alert_percentage=90.0, color="#9C27B0", user_id=MOCK_USER_ID),
    ]
