from dataclasses import dataclass

ACCOUNT_TYPES = ("checking", "savings", "investment", "cash", "prepaid", "other")

ACCOUNT_TYPE_LABELS = {
    "checking": "Conta Corrente",
    "savings": "Poupança",
    "investment": "Investimento",
    "cash": "Dinheiro",
    "prepaid": "Pré-pago",
    "other": "Outro",
}


@dataclass
class Account:
    id: int | None
    name: str
    account_type: str = "checking"
    balance: float = 0.0
    initial_balance: float = 0.0
    bank_name: str = ""
    bank_code: str = ""
    agency_number: str = ""
    account_number: str = ""
    color: str = "#2196F3"
    icon: str = ""
    is_default: bool = False
    include_in_total: bool = True
    is_active: bool = True
    user_id: int | None = None
    created_at: str = ""
    updated_at: str = ""

    @property
    def type_label(self) -> str:
        return ACCOUNT_TYPE_LABELS.get(self.account_type, self.account_type)
