import logging
import re
from dataclasses import replace
from datetime import date, timedelta
from models.budget import (
    Budget,
    BudgetAlert,
    BudgetSummary,
    CategorySpending,
    BUDGET_PERIODS,
)
from models.category import Category
from models.transaction import Transaction, TransactionFilters, EXPENSE_TYPES
from utils.constants import DEFAULT_BUDGET_COLOR, UNKNOWN_CATEGORY_NAME, BUDGET_ALERT_PERCENTAGE
from utils.currency import format_currency
from utils.date_helpers import today, parse_date, format_date, add_months

logger = logging.getLogger(__name__)

_HEX_COLOR = re.compile(r"^#[0-9A-Fa-f]{6}$")
_PERIOD_MONTHS = {"monthly": 1, "quarterly": 3, "yearly": 12}


def period_end(start: date, period: str) -> date:
    """Last day of a budget period starting at `start`."""
    months = _PERIOD_MONTHS.get(period)
    if months is None:
        raise ValueError("Orçamentos personalizados precisam de uma data final.")
    return add_months(start, months) - timedelta(days=1)


def calculate_summary(
    budget: Budget,
    transactions: list[Transaction],
    categories: list[Category],
    ref_date: date | None = None,
) -> BudgetSummary:
    """Roll expenses up into a budget: per-category spend and a linear projection.

    Only expense and card-expense transactions dated inside [start, end] and
    belonging to one of the budget's categories count. The budget amount is
    split evenly across its categories.
    """
    ref = ref_date or today()
    start = parse_date(budget.start_date)
    end = parse_date(budget.end_date)
    names = {c.id: c.name for c in categories}

    relevant = [
        t for t in transactions
        if t.type in EXPENSE_TYPES
        and budget.start_date <= t.date <= budget.end_date
        and t.category_id in budget.category_ids
        and (not budget.account_ids or t.account_id in budget.account_ids)
    ]

    per_category = budget.amount / len(budget.category_ids) if budget.category_ids else 0.0
    spending: list[CategorySpending] = []
    for category_id in budget.category_ids:
        cs = CategorySpending(
            category_id=category_id,
            category_name=names.get(category_id, UNKNOWN_CATEGORY_NAME),
            budgeted=round(per_category, 2),
        )
        for t in relevant:
            if t.category_id != category_id:
                continue
            cs.spent += t.amount
            cs.transaction_count += 1
            if cs.last_transaction_date is None or t.date > cs.last_transaction_date:
                cs.last_transaction_date = t.date
        cs.spent = round(cs.spent, 2)
        spending.append(cs)

    total_spent = round(sum(t.amount for t in relevant), 2)
    percentage_used = total_spent / budget.amount * 100 if budget.amount > 0 else 0.0
    total_remaining = max(0.0, round(budget.amount - total_spent, 2))
    days_remaining = max(0, (end - ref).days)
    daily_budget_remaining = total_remaining / days_remaining if days_remaining > 0 else 0.0
    total_days = (end - start).days + 1
    # both ends count, and the elapsed part never runs past the period
    days_passed = min(total_days, max(1, (ref - start).days + 1))
    projected_spending = total_spent / days_passed * total_days

    return BudgetSummary(
        budget=budget,
        categories=spending,
        total_spent=total_spent,
        total_remaining=total_remaining,
        percentage_used=percentage_used,
        days_remaining=days_remaining,
        daily_budget_remaining=daily_budget_remaining,
        projected_spending=projected_spending,
        is_over_budget=total_spent > budget.amount,
    )


def generate_alerts(summary: BudgetSummary) -> list[BudgetAlert]:
    budget = summary.budget
    pct = summary.percentage_used
    alerts: list[BudgetAlert] = []

    if summary.is_over_budget:
        over = round(summary.total_spent - budget.amount, 2)
        alerts.append(BudgetAlert(
            type="budget_exceeded",
            budget_id=budget.id,
            message=(
                f"O orçamento '{budget.name}' foi excedido em {format_currency(over)}."
            ),
            percentage=pct,
            amount_over=over,
        ))
    elif pct >= budget.alert_percentage:
        alerts.append(BudgetAlert(
            type="threshold_reached",
            budget_id=budget.id,
            message=f"Você já usou {pct:.0f}% do orçamento '{budget.name}'.",
            percentage=pct,
        ))

    for cs in summary.categories:
        if cs.percentage_used > 100:
            alerts.append(BudgetAlert(
                type="category_exceeded",
                budget_id=budget.id,
                category_id=cs.category_id,
                message=(
                    f"A categoria {cs.category_name} passou do limite "
                    f"({cs.percentage_used:.0f}%)."
                ),
                percentage=cs.percentage_used,
                amount_over=round(cs.spent - cs.budgeted, 2),
            ))

    if summary.projected_spending > budget.amount and not summary.is_over_budget:
        alerts.append(BudgetAlert(
            type="projected_overspending",
            budget_id=budget.id,
            message=(
                f"No ritmo atual, '{budget.name}' deve fechar em "
                f"{format_currency(summary.projected_spending)}."
            ),
            percentage=summary.projected_spending / budget.amount * 100 if budget.amount else 0.0,
            amount_over=round(summary.projected_spending - budget.amount, 2),
        ))
    return alerts


class BudgetService:
    def __init__(self, budget_repo, tx_repo, category_repo):
        self._repo = budget_repo
        self._tx_repo = tx_repo
        self._category_repo = category_repo

    def get_all(self, include_inactive: bool = False) -> list[Budget]:
        return self._repo.get_all(include_inactive=include_inactive)

    def get_by_id(self, budget_id: int) -> Budget | None:
        return self._repo.get_by_id(budget_id)

    def create(
        self,
        name: str,
        amount: float,
        start_date: str,
        category_ids: list[int],
        end_date: str | None = None,
        period: str = "monthly",
        account_ids: list[int] | None = None,
        alert_percentage: float = BUDGET_ALERT_PERCENTAGE,
        description: str = "",
        color: str = DEFAULT_BUDGET_COLOR,
    ) -> Budget:
        budget = Budget(
            id=None,
            name=name.strip(),
            description=description.strip(),
            amount=amount,
            period=period,
            start_date=start_date,
            end_date=end_date or "",
            category_ids=list(category_ids),
            account_ids=list(account_ids or []),
            alert_percentage=alert_percentage,
            color=color or DEFAULT_BUDGET_COLOR,
        )
        self._normalize(budget)
        created = self._repo.create(budget)
        logger.info("Budget created: %s (id=%s)", created.name, created.id)
        return created

    def update(self, budget_id: int, **changes) -> Budget:
        current = self._require(budget_id)
        unknown = set(changes) - set(Budget.__dataclass_fields__)
        if unknown:
            raise ValueError(f"Campo(s) desconhecido(s): {', '.join(sorted(unknown))}.")
        updated = replace(current, **changes)
        if isinstance(updated.name, str):
            updated.name = updated.name.strip()
        if ("start_date" in changes or "period" in changes) and "end_date" not in changes:
            updated.end_date = ""
        self._normalize(updated)
        return self._repo.update(updated)

    def delete(self, budget_id: int):
        self._require(budget_id)
        self._repo.delete(budget_id)
        logger.info("Budget deactivated: id=%s", budget_id)

    # ── Summaries ────────────────────────────────────────────────────────────

    def get_summary(self, budget_id: int, ref_date: date | None = None) -> BudgetSummary:
        return self._summarize(self._require(budget_id), ref_date)

    def get_summaries(self, ref_date: date | None = None) -> list[BudgetSummary]:
        """Summaries of every active budget."""
        return [self._summarize(b, ref_date) for b in self._repo.get_all()]

    def get_alerts(self, ref_date: date | None = None) -> list[BudgetAlert]:
        alerts = []
        for summary in self.get_summaries(ref_date):
            alerts.extend(generate_alerts(summary))
        return alerts

    def refresh_statuses(self, ref_date: date | None = None) -> int:
        """Move budgets between active / exceeded / completed. Returns the change count."""
        ref = ref_date or today()
        changed = 0
        for summary in self.get_summaries(ref):
            budget = summary.budget
            if budget.end_date < format_date(ref):
                status = "completed"
            elif summary.is_over_budget:
                status = "exceeded"
            else:
                status = "active"
            if status != budget.status:
                budget.status = status
                self._repo.update(budget)
                logger.info("Budget %s is now %s", budget.id, status)
                changed += 1
        return changed

    # ── Helpers ──────────────────────────────────────────────────────────────

    def _summarize(self, budget: Budget, ref_date: date | None) -> BudgetSummary:
        transactions = self._tx_repo.get_all(
            TransactionFilters(start_date=budget.start_date, end_date=budget.end_date)
        )
        return calculate_summary(budget, transactions, self._category_repo.get_all(), ref_date)

    def _require(self, budget_id: int) -> Budget:
        budget = self._repo.get_by_id(budget_id)
        if budget is None:
            raise LookupError(f"Orçamento {budget_id} não encontrado.")
        return budget

    def _normalize(self, budget: Budget):
        """Validate in place and derive end_date from the period when missing."""
        if not budget.name:
            raise ValueError("O nome do orçamento é obrigatório.")
        if budget.amount is None or budget.amount < 0:
            raise ValueError("O valor do orçamento deve ser 0 ou maior.")
        if budget.period not in BUDGET_PERIODS:
            raise ValueError(
                f"Período inválido '{budget.period}'. Use um de: {', '.join(BUDGET_PERIODS)}."
            )
        start = parse_date(budget.start_date)
        if start is None:
            raise ValueError("Data inicial inválida.")
        end = parse_date(budget.end_date) if budget.end_date else period_end(start, budget.period)
        if end is None:
            raise ValueError("Data final inválida.")
        if end < start:
            raise ValueError("A data final deve ser posterior à data inicial.")
        if not 1 <= budget.alert_percentage <= 100:
            raise ValueError("O percentual de alerta deve estar entre 1 e 100.")
        if not budget.category_ids:
            raise ValueError("Selecione ao menos uma categoria.")
        if len(set(budget.category_ids)) != len(budget.category_ids):
            raise ValueError("Categorias repetidas no orçamento.")
        if not _HEX_COLOR.match(budget.color):
            raise ValueError("A cor deve estar no formato #RRGGBB.")
        budget.start_date = format_date(start)
        budget.end_date = format_date(end)
