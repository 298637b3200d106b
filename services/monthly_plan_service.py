import logging
from models.category import Category
from models.monthly_plan import (
    CategoryPlan,
    CategoryPlanStatus,
    MonthlyPlan,
    MonthlyPlanSummary,
    PlanAlert,
)
from models.transaction import Transaction, TransactionFilters, EXPENSE_TYPES
from utils.constants import PLAN_DANGER_PCT, PLAN_WARNING_PCT, UNKNOWN_CATEGORY_NAME
from utils.currency import format_currency
from utils.date_helpers import month_range, month_str, prev_month, parse_month

logger = logging.getLogger(__name__)


def plan_status(spent: float, planned: float) -> str:
    """'exceeded' above 100%, 'danger' from 90%, 'warning' from 70%, else 'safe'."""
    if planned <= 0:
        return "exceeded" if spent > 0 else "safe"
    pct = spent / planned * 100
    if pct > 100:
        return "exceeded"
    if pct >= PLAN_DANGER_PCT:
        return "danger"
    if pct >= PLAN_WARNING_PCT:
        return "warning"
    return "safe"


class MonthlyPlanService:
    def __init__(self, plan_repo, tx_repo, category_repo):
        self._repo = plan_repo
        self._tx_repo = tx_repo
        self._category_repo = category_repo

    def get(self, month: int, year: int) -> MonthlyPlan | None:
        self._validate_period(month, year)
        return self._repo.get(month, year)

    def save(
        self,
        month: int,
        year: int,
        total_budget: float,
        category_budgets: list[CategoryPlan],
        created_from_previous: bool = False,
    ) -> MonthlyPlan:
        self._validate_period(month, year)
        if total_budget is None or total_budget < 0:
            raise ValueError("O orçamento total deve ser 0 ou maior.")
        seen = set()
        for cb in category_budgets:
            if cb.planned_amount < 0:
                raise ValueError("Os valores planejados devem ser 0 ou maiores.")
            if cb.category_id in seen:
                raise ValueError("Categoria repetida no planejamento.")
            seen.add(cb.category_id)
        planned = sum(cb.planned_amount for cb in category_budgets)
        if planned > total_budget + 0.005:
            raise ValueError(
                f"A soma das categorias ({format_currency(planned)}) ultrapassa o "
                f"orçamento total ({format_currency(total_budget)})."
            )
        plan = MonthlyPlan(
            id=None,
            month=month,
            year=year,
            total_budget=total_budget,
            category_budgets=list(category_budgets),
            created_from_previous=created_from_previous,
        )
        saved = self._repo.save(plan)
        logger.info("Monthly plan saved for %02d/%d", month, year)
        return saved

    def copy_from_previous(self, month: int, year: int) -> MonthlyPlan:
        self._validate_period(month, year)
        prev = parse_month(prev_month(month_str(month, year)))
        source = self._repo.get(prev.month, prev.year)
        if source is None:
            raise ValueError("Não há planejamento no mês anterior para copiar.")
        return self.save(
            month,
            year,
            source.total_budget,
            [CategoryPlan(cb.category_id, cb.planned_amount) for cb in source.category_budgets],
            created_from_previous=True,
        )

    def get_summary(self, month: int, year: int) -> MonthlyPlanSummary | None:
        plan = self.get(month, year)
        if plan is None:
            return None
        start, end = month_range(month_str(month, year))
        transactions = self._tx_repo.get_all(TransactionFilters(start_date=start, end_date=end))
        return self.calculate_summary(plan, transactions, self._category_repo.get_all())

    @staticmethod
    def calculate_summary(
        plan: MonthlyPlan,
        transactions: list[Transaction],
        categories: list[Category],
    ) -> MonthlyPlanSummary:
        """Compare planned amounts with the month's expenses per category."""
        names = {c.id: c.name for c in categories}
        month_key = month_str(plan.month, plan.year)
        spent_by_category: dict[int, float] = {}
        for t in transactions:
            if t.type in EXPENSE_TYPES and t.date[:7] == month_key and t.category_id:
                spent_by_category[t.category_id] = spent_by_category.get(t.category_id, 0.0) + t.amount

        statuses: list[CategoryPlanStatus] = []
        alerts: list[PlanAlert] = []
        for cb in plan.category_budgets:
            spent = round(spent_by_category.get(cb.category_id, 0.0), 2)
            status = CategoryPlanStatus(
                category_id=cb.category_id,
                category_name=names.get(cb.category_id, UNKNOWN_CATEGORY_NAME),
                planned=cb.planned_amount,
                spent=spent,
                status=plan_status(spent, cb.planned_amount),
            )
            statuses.append(status)
            if status.status == "exceeded":
                alerts.append(PlanAlert(
                    type="exceeded",
                    category_id=cb.category_id,
                    category_name=status.category_name,
                    message=(
                        f"{status.category_name}: gasto de {format_currency(spent)} "
                        f"ultrapassou o planejado de {format_currency(cb.planned_amount)}."
                    ),
                    percentage=status.percentage,
                ))
            elif status.status == "danger":
                alerts.append(PlanAlert(
                    type="approaching_limit",
                    category_id=cb.category_id,
                    category_name=status.category_name,
                    message=(
                        f"{status.category_name}: {status.percentage:.0f}% do planejado já foi usado."
                    ),
                    percentage=status.percentage,
                ))

        total_spent = round(sum(s.spent for s in statuses), 2)
        return MonthlyPlanSummary(
            plan=plan,
            categories=statuses,
            total_planned=round(sum(cb.planned_amount for cb in plan.category_budgets), 2),
            total_spent=total_spent,
            alerts=alerts,
        )

    @staticmethod
    def check_transaction_alert(
        plan: MonthlyPlan | None,
        category_id: int,
        amount: float,
        current_spent: float,
        category_name: str = "",
    ) -> PlanAlert | None:
        """Warn before saving an expense that would break the plan."""
        label = category_name or UNKNOWN_CATEGORY_NAME
        planned = plan.planned_for(category_id) if plan else None
        if planned is None:
            return PlanAlert(
                type="no_budget",
                category_id=category_id,
                category_name=label,
                message=f"{label} não tem valor planejado para este mês.",
            )
        new_total = current_spent + amount
        pct = new_total / planned * 100 if planned > 0 else 100.0
        if new_total > planned:
            return PlanAlert(
                type="exceeded",
                category_id=category_id,
                category_name=label,
                message=(
                    f"Com este gasto, {label} passará do planejado em "
                    f"{format_currency(new_total - planned)}."
                ),
                percentage=pct,
            )
        if pct >= PLAN_DANGER_PCT:
            return PlanAlert(
                type="approaching_limit",
                category_id=category_id,
                category_name=label,
                message=f"Com este gasto, {label} chegará a {pct:.0f}% do planejado.",
                percentage=pct,
            )
        return None

    @staticmethod
    def _validate_period(month: int, year: int):
        if not 1 <= month <= 12:
            raise ValueError("O mês deve estar entre 1 e 12.")
        if not 1900 <= year <= 9999:
            raise ValueError("Ano inválido.")
