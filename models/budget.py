from dataclasses import dataclass, field
from typing import Optional

BUDGET_PERIODS = ("monthly", "quarterly", "yearly", "custom")
BUDGET_STATUSES = ("active", "inactive", "exceeded", "completed")
BUDGET_ALERT_TYPES = (
    "threshold_reached",
    "budget_exceeded",
    "category_exceeded",
    "projected_overspending",
)

BUDGET_PERIOD_LABELS = {
    "monthly": "Mensal",
    "quarterly": "Trimestral",
    "yearly": "Anual",
    "custom": "Personalizado",
}


@dataclass
class Budget:
    id: int | None
    name: str
    amount: float
    start_date: str         # 'YYYY-MM-DD'
    end_date: str           # 'YYYY-MM-DD'
    period: str = "monthly"
    description: str = ""
    status: str = "active"
    category_ids: list[int] = field(default_factory=list)
    account_ids: list[int] = field(default_factory=list)
    alert_percentage: float = 80.0
    is_active: bool = True
    color: str = "#FF9800"
    user_id: int | None = None
    created_at: str = ""


@dataclass
class CategorySpending:
    category_id: int
    category_name: str
    budgeted: float
    spent: float = 0.0
    transaction_count: int = 0
    last_transaction_date: Optional[str] = None

    @property
    def remaining(self) -> float:
        return max(0.0, self.budgeted - self.spent)

    @property
    def percentage_used(self) -> float:
        if self.budgeted <= 0:
            return 0.0
        return self.spent / self.budgeted * 100


@dataclass
class BudgetSummary:
    budget: Budget
    categories: list[CategorySpending]
    total_spent: float
    total_remaining: float
    percentage_used: float
    days_remaining: int
    daily_budget_remaining: float
    projected_spending: float
    is_over_budget: bool


@dataclass
class BudgetAlert:
    type: str               # one of BUDGET_ALERT_TYPES
    budget_id: int | None
    message: str
    percentage: float = 0.0
    category_id: Optional[int] = None
    amount_over: float = 0.0
