from dataclasses import dataclass
from typing import Optional

CARD_BRANDS = ("visa", "mastercard", "elo", "amex", "hipercard", "other")
CARD_TYPES = ("credit", "debit", "credit_debit", "prepaid", "virtual")
CREDIT_CARD_TYPES = ("credit", "credit_debit")

CARD_BRAND_LABELS = {
    "visa": "Visa",
    "mastercard": "Mastercard",
    "elo": "Elo",
    "amex": "American Express",
    "hipercard": "Hipercard",
    "other": "Outro",
}

CARD_TYPE_LABELS = {
    "credit": "Crédito",
    "debit": "Débito",
    "credit_debit": "Crédito e Débito",
    "prepaid": "Pré-pago",
    "virtual": "Virtual",
}


@dataclass
class CreditCard:
    id: int | None
    name: str
    brand: str = "visa"
    card_type: str = "credit"
    last_digits: str = ""
    credit_limit: float = 0.0
    available_limit: float = 0.0
    closing_day: Optional[int] = None
    due_day: Optional[int] = None
    color: str = "#6B7280"
    is_default: bool = False
    is_active: bool = True
    is_virtual: bool = False
    parent_card_id: Optional[int] = None
    user_id: int | None = None
    created_at: str = ""
    updated_at: str = ""

    @property
    def has_credit_function(self) -> bool:
        return self.card_type in CREDIT_CARD_TYPES

    @property
    def used_limit(self) -> float:
        return max(0.0, self.credit_limit - self.available_limit)

    @property
    def usage_percentage(self) -> float:
        """Percent of the credit limit in use (0-100+)."""
        if self.credit_limit <= 0:
            return 0.0
        return self.used_limit / self.credit_limit * 100

    @property
    def display_name(self) -> str:
        if self.last_digits:
            return f"{self.name} •••• {self.last_digits}"
        return self.name
