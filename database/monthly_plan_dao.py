from typing import Optional
from database.db_manager import DatabaseManager
from models.monthly_plan import CategoryPlan, MonthlyPlan


class MonthlyPlanDAO:
    def __init__(self, db: DatabaseManager, user_id: int):
        self._db = db
        self._user_id = user_id

    def _row_to_model(self, row) -> MonthlyPlan:
        conn = self._db.get_connection()
        cat_rows = conn.execute(
            """SELECT category_id, planned_amount FROM monthly_plan_categories
               WHERE plan_id = ? ORDER BY category_id""",
            (row["id"],),
        ).fetchall()
        return MonthlyPlan(
            id=row["id"],
            user_id=row["user_id"],
            month=row["month"],
            year=row["year"],
            total_budget=row["total_budget"],
            category_budgets=[
                CategoryPlan(category_id=r["category_id"], planned_amount=r["planned_amount"])
                for r in cat_rows
            ],
            created_from_previous=bool(row["created_from_previous"]),
            created_at=row["created_at"],
        )

    def get(self, month: int, year: int) -> Optional[MonthlyPlan]:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM monthly_plans WHERE user_id = ? AND month = ? AND year = ?",
            (self._user_id, month, year),
        ).fetchone()
        return self._row_to_model(row) if row else None

    def save(self, plan: MonthlyPlan) -> MonthlyPlan:
        """Upsert the plan for (month, year) and replace its category lines."""
        conn = self._db.get_connection()
        conn.execute(
            """INSERT INTO monthly_plans(user_id, month, year, total_budget, created_from_previous)
               VALUES (?, ?, ?, ?, ?)
               ON CONFLICT(user_id, month, year)
               DO UPDATE SET total_budget = excluded.total_budget,
                             created_from_previous = excluded.created_from_previous""",
            (self._user_id, plan.month, plan.year, plan.total_budget,
             int(plan.created_from_previous)),
        )
        plan_id = conn.execute(
            "SELECT id FROM monthly_plans WHERE user_id = ? AND month = ? AND year = ?",
            (self._user_id, plan.month, plan.year),
        ).fetchone()["id"]
        conn.execute("DELETE FROM monthly_plan_categories WHERE plan_id = ?", (plan_id,))
        for cb in plan.category_budgets:
            conn.execute(
                """INSERT INTO monthly_plan_categories(plan_id, category_id, planned_amount)
                   VALUES (?, ?, ?)""",
                (plan_id, cb.category_id, cb.planned_amount),
            )
        conn.commit()
        return self.get(plan.month, plan.year)
