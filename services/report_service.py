from models.transaction import TransactionFilters, TRANSACTION_TYPE_LABELS, EXPENSE_TYPES
from utils.constants import NO_CATEGORY_NAME


def _group_by_category(transactions, names: dict[int, str], colors: dict[int, str]) -> list[dict]:
    """[{category_id, category, color_hex, total, count, percentage}, ...] largest first."""
    groups: dict = {}
    for tx in transactions:
        key = tx.category_id if tx.category_id in names else None
        entry = groups.setdefault(key, {
            "category_id": key,
            "category": names.get(key, NO_CATEGORY_NAME),
            "color_hex": colors.get(key, "#888888"),
            "total": 0.0,
            "count": 0,
        })
        entry["total"] += tx.amount
        entry["count"] += 1
    grand_total = sum(e["total"] for e in groups.values())
    rows = sorted(groups.values(), key=lambda e: e["total"], reverse=True)
    for e in rows:
        e["total"] = round(e["total"], 2)
        e["percentage"] = round(e["total"] / grand_total * 100, 2) if grand_total else 0.0
    return rows


class ReportService:
    def __init__(self, tx_repo, category_repo, account_repo):
        self._tx_repo = tx_repo
        self._category_repo = category_repo
        self._account_repo = account_repo

    def get_report(self, filters: TransactionFilters | None = None) -> dict:
        """Totals, averages, category breakdowns and a monthly trend for the filter.

        Transfers move money between accounts and are excluded from totals.
        """
        transactions = self._tx_repo.get_all(filters)
        categories = self._category_repo.get_all()
        names = {c.id: c.name for c in categories}
        colors = {c.id: c.color for c in categories}

        incomes = [t for t in transactions if t.type == "income"]
        expenses = [t for t in transactions if t.type in EXPENSE_TYPES]
        total_income = round(sum(t.amount for t in incomes), 2)
        total_expenses = round(sum(t.amount for t in expenses), 2)

        trend: dict[str, dict] = {}
        for tx in incomes + expenses:
            month = trend.setdefault(tx.date[:7], {"income": 0.0, "expenses": 0.0})
            month["income" if tx.type == "income" else "expenses"] += tx.amount
        monthly_trend = []
        for month in sorted(trend):
            income = round(trend[month]["income"], 2)
            spent = round(trend[month]["expenses"], 2)
            monthly_trend.append({
                "month": month,
                "income": income,
                "expenses": spent,
                "balance": round(income - spent, 2),
            })

        return {
            "total_income": total_income,
            "total_expenses": total_expenses,
            "balance": round(total_income - total_expenses, 2),
            "transaction_count": len(transactions),
            "average_income": round(total_income / len(incomes), 2) if incomes else 0.0,
            "average_expense": round(total_expenses / len(expenses), 2) if expenses else 0.0,
            "expenses_by_category": _group_by_category(expenses, names, colors),
            "income_by_category": _group_by_category(incomes, names, colors),
            "monthly_trend": monthly_trend,
        }

    def export_rows(self, filters: TransactionFilters | None = None) -> list[list[str]]:
        """Return rows suitable for CSV export, oldest first, header included."""
        transactions = sorted(
            self._tx_repo.get_all(filters), key=lambda t: (t.date, t.id or 0)
        )
        names = {c.id: c.name for c in self._category_repo.get_all()}
        accounts = {a.id: a.name for a in self._account_repo.get_all(include_inactive=True)}

        rows = [["Data", "Tipo", "Categoria", "Descrição", "Valor", "Pago", "Conta"]]
        for tx in transactions:
            rows.append([
                tx.date,
                TRANSACTION_TYPE_LABELS.get(tx.type, tx.type),
                names.get(tx.category_id, tx.category_name or ""),
                tx.description,
                f"{tx.amount:.2f}",
                "Sim" if tx.is_paid else "Não",
                accounts.get(tx.account_id, ""),
            ])
        return rows
