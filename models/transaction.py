from dataclasses import dataclass
from typing import Optional

TRANSACTION_TYPES = ("income", "expense", "transfer", "credit_card_expense")
EXPENSE_TYPES = ("expense", "credit_card_expense")

TRANSACTION_TYPE_LABELS = {
    "income": "Receita",
    "expense": "Despesa",
    "transfer": "Transferência",
    "credit_card_expense": "Despesa no Cartão",
}


@dataclass
class Transaction:
    id: int | None
    description: str
    amount: float
    type: str               # one of TRANSACTION_TYPES
    date: str               # 'YYYY-MM-DD'
    competence_month: Optional[int] = None
    competence_year: Optional[int] = None
    account_id: Optional[int] = None
    category_id: Optional[int] = None
    credit_card_id: Optional[int] = None
    bill_id: Optional[int] = None
    transfer_to_account_id: Optional[int] = None
    installment_number: Optional[int] = None
    installment_total: Optional[int] = None
    is_paid: bool = True
    notes: str = ""
    category_name: str = ""
    user_id: int | None = None
    created_at: str = ""
    updated_at: str = ""

    @property
    def is_expense(self) -> bool:
        return self.type in EXPENSE_TYPES

    @property
    def competence(self) -> str:
        """'YYYY-MM' of the month the transaction counts toward."""
        if self.competence_month and self.competence_year:
            return f"{self.competence_year:04d}-{self.competence_month:02d}"
        return self.date[:7]


@dataclass
class TransactionFilters:
    type: Optional[str] = None
    competence_month: Optional[int] = None
    competence_year: Optional[int] = None
    account_id: Optional[int] = None
    category_id: Optional[int] = None
    credit_card_id: Optional[int] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    min_amount: Optional[float] = None
    max_amount: Optional[float] = None
    search: Optional[str] = None

    def matches(self, tx: Transaction) -> bool:
        """In-memory equivalent of the SQL filter; used by mock and report code."""
        if self.type and tx.type != self.type:
            return False
        if self.competence_month and tx.competence_month != self.competence_month:
            return False
        if self.competence_year and tx.competence_year != self.competence_year:
            return False
        if self.account_id is not None and self.account_id not in (
            tx.account_id, tx.transfer_to_account_id
        ):
            return False
        if self.category_id is not None and tx.category_id != self.category_id:
            return False
        if self.credit_card_id is not None and tx.credit_card_id != self.credit_card_id:
            return False
        if self.start_date and tx.date < self.start_date:
            return False
        if self.end_date and tx.date > self.end_date:
            return False
        if self.min_amount is not None and tx.amount < self.min_amount:
            return False
        if self.max_amount is not None and tx.amount > self.max_amount:
            return False
        if self.search and self.search.lower() not in tx.description.lower():
            return False
        return True


def sort_newest_first(transactions: list[Transaction]) -> list[Transaction]:
    return sorted(transactions, key=lambda t: (t.date, t.id or 0), reverse=True)
