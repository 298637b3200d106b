from dataclasses import dataclass
from datetime import date
from typing import Optional

from utils.date_helpers import parse_date


@dataclass
class CreditCardBill:
    id: int | None
    card_id: int
    reference_month: str    # 'YYYY-MM'
    closing_date: str       # 'YYYY-MM-DD'
    due_date: str           # 'YYYY-MM-DD'
    total_amount: float = 0.0
    is_paid: bool = False
    paid_at: Optional[str] = None
    payment_transaction_id: Optional[int] = None
    card_name: str = ""

    def days_until_due(self, ref: date) -> int:
        """Negative once the due date has passed."""
        return (parse_date(self.due_date) - ref).days

    def is_overdue(self, ref: date) -> bool:
        return not self.is_paid and self.days_until_due(ref) < 0
