from dataclasses import dataclass, field

PLAN_STATUSES = ("safe", "warning", "danger", "exceeded")


@dataclass
class CategoryPlan:
    category_id: int
    planned_amount: float


@dataclass
class MonthlyPlan:
    id: int | None
    month: int
    year: int
    total_budget: float = 0.0
    category_budgets: list[CategoryPlan] = field(default_factory=list)
    created_from_previous: bool = False
    user_id: int | None = None
    created_at: str = ""

    def planned_for(self, category_id: int) -> float | None:
        for cb in self.category_budgets:
            if cb.category_id == category_id:
                return cb.planned_amount
        return None


@dataclass
class CategoryPlanStatus:
    category_id: int
    category_name: str
    planned: float
    spent: float
    status: str             # one of PLAN_STATUSES

    @property
    def remaining(self) -> float:
        return self.planned - self.spent

    @property
    def percentage(self) -> float:
        if self.planned <= 0:
            return 0.0
        return self.spent / self.planned * 100


@dataclass
class PlanAlert:
    type: str               # 'exceeded' | 'approaching_limit' | 'no_budget'
    category_id: int
    category_name: str
    message: str
    percentage: float = 0.0


@dataclass
class MonthlyPlanSummary:
    plan: MonthlyPlan
    categories: list[CategoryPlanStatus]
    total_planned: float
    total_spent: float
    alerts: list[PlanAlert] = field(default_factory=list)

    @property
    def total_remaining(self) -> float:
        return self.total_planned - self.total_spent
