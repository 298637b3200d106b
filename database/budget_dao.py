import json
from typing import Optional
from database.db_manager import DatabaseManager
from models.budget import Budget


class BudgetDAO:
    def __init__(self, db: DatabaseManager, user_id: int):
        self._db = db
        self._user_id = user_id

    def _row_to_model(self, row) -> Budget:
        return Budget(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            description=row["description"],
            amount=row["amount"],
            period=row["period"],
            start_date=row["start_date"],
            end_date=row["end_date"],
            status=row["status"],
            category_ids=json.loads(row["category_ids"]),
            account_ids=json.loads(row["account_ids"]),
            alert_percentage=row["alert_percentage"],
            is_active=bool(row["is_active"]),
            color=row["color"],
            created_at=row["created_at"],
        )

    def get_all(self, include_inactive: bool = False) -> list[Budget]:
        conn = self._db.get_connection()
        sql = "SELECT * FROM budgets WHERE user_id = ?"
        if not include_inactive:
            sql += " AND is_active = 1"
        rows = conn.execute(sql + " ORDER BY start_date DESC, name", (self._user_id,)).fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_by_id(self, budget_id: int) -> Optional[Budget]:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM budgets WHERE id = ? AND user_id = ?", (budget_id, self._user_id)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def create(self, budget: Budget) -> Budget:
        conn = self._db.get_connection()
        cursor = conn.execute(
            """INSERT INTO budgets
               (user_id, name, description, amount, period, start_date, end_date,
                status, category_ids, account_ids, alert_percentage, is_active, color)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                self._user_id, budget.name, budget.description, budget.amount,
                budget.period, budget.start_date, budget.end_date, budget.status,
                json.dumps(budget.category_ids), json.dumps(budget.account_ids),
                budget.alert_percentage, int(budget.is_active), budget.color,
            ),
        )
        conn.commit()
        return self.get_by_id(cursor.lastrowid)

    def update(self, budget: Budget) -> Budget:
        conn = self._db.get_connection()
        conn.execute(
            """UPDATE budgets
               SET name=?, description=?, amount=?, period=?, start_date=?, end_date=?,
                   status=?, category_ids=?, account_ids=?, alert_percentage=?,
                   is_active=?, color=?
               WHERE id=? AND user_id=?""",
            (
                budget.name, budget.description, budget.amount, budget.period,
                budget.start_date, budget.end_date, budget.status,
                json.dumps(budget.category_ids), json.dumps(budget.account_ids),
                budget.alert_percentage, int(budget.is_active), budget.color,
                budget.id, self._user_id,
            ),
        )
        conn.commit()
        return self.get_by_id(budget.id)

    def delete(self, budget_id: int):
        """Soft delete."""
        conn = self._db.get_connection()
        conn.execute(
            "UPDATE budgets SET is_active = 0, status = 'inactive' WHERE id = ? AND user_id = ?",
            (budget_id, self._user_id),
        )
        conn.commit()
