"""In-memory fixture store used while a domain's real source is switched off.

Every repository here mirrors the method set of the matching sqlite DAO so
services never know which one they were handed. Models are copied on the way
in and out, so callers cannot mutate the store by accident.
"""
import logging
from dataclasses import replace
from datetime import date
from typing import Optional

from datasource import fixtures
from models.account import Account
from models.bill import CreditCardBill
from models.budget import Budget
from models.category import Category
from models.credit_card import CreditCard
from models.transaction import Transaction, TransactionFilters, sort_newest_first
from utils.date_helpers import now_str, today

logger = logging.getLogger(__name__)


class _MockTable:
    def __init__(self, rows: list):
        self.rows: dict[int, object] = {r.id: r for r in rows}
        self._next_id = max(self.rows, default=0) + 1

    def next_id(self) -> int:
        value = self._next_id
        self._next_id += 1
        return value

    def get(self, row_id: int):
        row = self.rows.get(row_id)
        return replace(row) if row is not None else None

    def values(self) -> list:
        return [replace(r) for r in self.rows.values()]

    def insert(self, model):
        model = replace(model, id=self.next_id())
        self.rows[model.id] = model
        return replace(model)

    def put(self, model):
        if model.id not in self.rows:
            raise LookupError(f"Record {model.id} not found.")
        self.rows[model.id] = replace(model)
        return replace(model)


class MockAccountRepository:
    def __init__(self, store: "MockStore"):
        self._t = store.accounts

    def get_all(self, include_inactive: bool = False) -> list[Account]:
        rows = sorted(self._t.values(), key=lambda a: (not a.is_default, a.name))
        return rows if include_inactive else [a for a in rows if a.is_active]

    def get_by_id(self, account_id: int) -> Optional[Account]:
        return self._t.get(account_id)

    def create(self, account: Account) -> Account:
        return self._t.insert(replace(account, user_id=fixtures.MOCK_USER_ID,
                                      created_at=now_str(), updated_at=now_str()))

    def update(self, account: Account) -> Account:
        return self._t.put(replace(account, updated_at=now_str()))

    def delete(self, account_id: int):
        row = self._t.rows.get(account_id)
        if row is not None:
            row.is_active = False
            row.is_default = False

    def set_default(self, account_id: int):
        for row in self._t.rows.values():
            row.is_default = row.id == account_id

    def adjust_balance(self, account_id: int, delta: float):
        row = self._t.rows.get(account_id)
        if row is not None:
            row.balance = round(row.balance + delta, 2)


class MockCreditCardRepository:
    def __init__(self, store: "MockStore"):
        self._t = store.credit_cards

    def get_all(self, include_inactive: bool = False) -> list[CreditCard]:
        rows = sorted(self._t.values(), key=lambda c: (not c.is_default, c.name))
        return rows if include_inactive else [c for c in rows if c.is_active]

    def get_by_id(self, card_id: int) -> Optional[CreditCard]:
        return self._t.get(card_id)

    def create(self, card: CreditCard) -> CreditCard:
        return self._t.insert(replace(card, user_id=fixtures.MOCK_USER_ID,
                                      created_at=now_str(), updated_at=now_str()))

    def update(self, card: CreditCard) -> CreditCard:
        return self._t.put(replace(card, updated_at=now_str()))

    def delete(self, card_id: int):
        row = self._t.rows.get(card_id)
        if row is not None:
            row.is_active = False
            row.is_default = False

    def set_default(self, card_id: int):
        for row in self._t.rows.values():
            row.is_default = row.id == card_id

    def adjust_available_limit(self, card_id: int, delta: float):
        row = self._t.rows.get(card_id)
        if row is not None:
            row.available_limit = max(0.0, min(row.credit_limit,
                                               round(row.available_limit + delta, 2)))


class MockBillRepository:
    def __init__(self, store: "MockStore"):
        self._t = store.bills
        self._cards = store.credit_cards

    def _with_card_name(self, bill: CreditCardBill) -> CreditCardBill:
        card = self._cards.rows.get(bill.card_id)
        bill.card_name = card.name if card else ""
        return bill

    def get_all(self) -> list[CreditCardBill]:
        return sorted(self._t.values(), key=lambda b: b.due_date)

    def get_by_card(self, card_id: int) -> list[CreditCardBill]:
        rows = [b for b in self._t.values() if b.card_id == card_id]
        return sorted(rows, key=lambda b: b.reference_month, reverse=True)

    def get_by_id(self, bill_id: int) -> Optional[CreditCardBill]:
        return self._t.get(bill_id)

    def get_by_card_month(self, card_id: int, reference_month: str) -> Optional[CreditCardBill]:
        for b in self._t.values():
            if b.card_id == card_id and b.reference_month == reference_month:
                return b
        return None

    def create(self, bill: CreditCardBill) -> CreditCardBill:
        return self._t.insert(self._with_card_name(replace(bill)))

    def update(self, bill: CreditCardBill) -> CreditCardBill:
        return self._t.put(bill)


class MockCategoryRepository:
    def __init__(self, store: "MockStore"):
        self._t = store.categories
        self._transactions = store.transactions

    def get_all(self) -> list[Category]:
        return sorted(self._t.values(), key=lambda c: (c.type, c.name))

    def get_by_id(self, category_id: int) -> Optional[Category]:
        return self._t.get(category_id)

    def get_by_type(self, type_filter: str) -> list[Category]:
        return [c for c in self.get_all() if c.type == type_filter]

    def create(self, category: Category) -> Category:
        return self._t.insert(replace(category, user_id=fixtures.MOCK_USER_ID,
                                      is_system=False))

    def update(self, category: Category) -> Category:
        return self._t.put(category)

    def delete(self, category_id: int):
        self._t.rows.pop(category_id, None)

    def has_transactions(self, category_id: int) -> bool:
        return any(t.category_id == category_id for t in self._transactions.rows.values())


class MockTransactionRepository:
    def __init__(self, store: "MockStore"):
        self._t = store.transactions
        self._categories = store.categories

    def _with_category_name(self, tx: Transaction) -> Transaction:
        cat = self._categories.rows.get(tx.category_id) if tx.category_id else None
        tx.category_name = cat.name if cat else ""
        return tx

    def get_all(self, filters: TransactionFilters | None = None) -> list[Transaction]:
        f = filters or TransactionFilters()
        rows = [self._with_category_name(t) for t in self._t.values() if f.matches(t)]
        return sort_newest_first(rows)

    def get_by_id(self, tx_id: int) -> Optional[Transaction]:
        tx = self._t.get(tx_id)
        return self._with_category_name(tx) if tx else None

    def get_by_bill(self, bill_id: int) -> list[Transaction]:
        return sort_newest_first([t for t in self._t.values() if t.bill_id == bill_id])

    def create(self, tx: Transaction) -> Transaction:
        created = self._t.insert(replace(tx, user_id=fixtures.MOCK_USER_ID,
                                         created_at=now_str(), updated_at=now_str()))
        return self._with_category_name(created)

    def update(self, tx: Transaction) -> Transaction:
        return self._with_category_name(self._t.put(replace(tx, updated_at=now_str())))

    def delete(self, tx_id: int):
        self._t.rows.pop(tx_id, None)


class MockBudgetRepository:
    def __init__(self, store: "MockStore"):
        self._t = store.budgets

    def get_all(self, include_inactive: bool = False) -> list[Budget]:
        rows = sorted(self._t.values(), key=lambda b: (b.start_date, b.name))
        return rows if include_inactive else [b for b in rows if b.is_active]

    def get_by_id(self, budget_id: int) -> Optional[Budget]:
        return self._t.get(budget_id)

    def create(self, budget: Budget) -> Budget:
        return self._t.insert(replace(budget, user_id=fixtures.MOCK_USER_ID,
                                      created_at=now_str()))

    def update(self, budget: Budget) -> Budget:
        return self._t.put(budget)

    def delete(self, budget_id: int):
        row = self._t.rows.get(budget_id)
        if row is not None:
            row.is_active = False
            row.status = "inactive"


class MockStore:
    def __init__(self, ref_date: date | None = None):
        self._ref_date = ref_date
        self.reset()

    def reset(self):
        """Reload every table from the fixtures."""
        ref = self._ref_date or today()
        self.user = fixtures.mock_user()
        self.accounts = _MockTable(fixtures.mock_accounts())
        self.credit_cards = _MockTable(fixtures.mock_credit_cards())
        self.bills = _MockTable(fixtures.mock_bills(ref))
        self.categories = _MockTable(fixtures.mock_categories())
        self.transactions = _MockTable(fixtures.mock_transactions(ref))
        self.budgets = _MockTable(fixtures.mock_budgets(ref))
        logger.debug("Mock store loaded for %s", ref)

    # ── Repositories ─────────────────────────────────────────────────────────

    def account_repository(self) -> MockAccountRepository:
        return MockAccountRepository(self)

    def credit_card_repository(self) -> MockCreditCardRepository:
        return MockCreditCardRepository(self)

    def bill_repository(self) -> MockBillRepository:
        return MockBillRepository(self)

    def category_repository(self) -> MockCategoryRepository:
        return MockCategoryRepository(self)

    def transaction_repository(self) -> MockTransactionRepository:
        return MockTransactionRepository(self)

    def budget_repository(self) -> MockBudgetRepository:
        return MockBudgetRepository(self)

    # ── Stats ────────────────────────────────────────────────────────────────

    def stats(self) -> dict:
        accounts = [a for a in self.accounts.rows.values() if a.is_active]
        cards = [c for c in self.credit_cards.rows.values() if c.is_active]
        return {
            "total_balance": round(
                sum(a.balance for a in accounts if a.include_in_total), 2
            ),
            "total_credit_limit": round(sum(c.credit_limit for c in cards), 2),
            "total_available_limit": round(sum(c.available_limit for c in cards), 2),
            "total_open_bills": round(
                sum(b.total_amount for b in self.bills.rows.values() if not b.is_paid), 2
            ),
            "account_count": len(accounts),
            "card_count": len(cards),
            "transaction_count": len(self.transactions.rows),
        }
