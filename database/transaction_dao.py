from typing import Optional
from database.db_manager import DatabaseManager
from models.transaction import Transaction, TransactionFilters


class TransactionDAO:
    def __init__(self, db: DatabaseManager, user_id: int):
        self._db = db
        self._user_id = user_id

    def _row_to_model(self, row) -> Transaction:
        return Transaction(
            id=row["id"],
            user_id=row["user_id"],
            description=row["description"],
            amount=row["amount"],
            type=row["type"],
            date=row["date"],
            competence_month=row["competence_month"],
            competence_year=row["competence_year"],
            account_id=row["account_id"],
            category_id=row["category_id"],
            credit_card_id=row["credit_card_id"],
            bill_id=row["bill_id"],
            transfer_to_account_id=row["transfer_to_account_id"],
            installment_number=row["installment_number"],
            installment_total=row["installment_total"],
            is_paid=bool(row["is_paid"]),
            notes=row["notes"],
            category_name=row["category_name"] if "category_name" in row.keys() else "",
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def _select(self) -> str:
        return """
            SELECT t.*,
                   COALESCE(c.name, '') AS category_name
            FROM transactions t
            LEFT JOIN categories c ON t.category_id = c.id
            WHERE t.user_id = ?
        """

    def get_all(self, filters: TransactionFilters | None = None) -> list[Transaction]:
        """Newest first. Every filter field left as None is ignored."""
        f = filters or TransactionFilters()
        sql = self._select()
        params: list = [self._user_id]

        if f.type:
            sql += " AND t.type = ?"
            params.append(f.type)
        if f.competence_month:
            sql += " AND t.competence_month = ?"
            params.append(f.competence_month)
        if f.competence_year:
            sql += " AND t.competence_year = ?"
            params.append(f.competence_year)
        if f.account_id is not None:
            sql += " AND (t.account_id = ? OR t.transfer_to_account_id = ?)"
            params.extend([f.account_id, f.account_id])
        if f.category_id is not None:
            sql += " AND t.category_id = ?"
            params.append(f.category_id)
        if f.credit_card_id is not None:
            sql += " AND t.credit_card_id = ?"
            params.append(f.credit_card_id)
        if f.start_date:
            sql += " AND t.date >= ?"
            params.append(f.start_date)
        if f.end_date:
            sql += " AND t.date <= ?"
            params.append(f.end_date)
        if f.min_amount is not None:
            sql += " AND t.amount >= ?"
            params.append(f.min_amount)
        if f.max_amount is not None:
            sql += " AND t.amount <= ?"
            params.append(f.max_amount)
        if f.search:
            sql += " AND t.description LIKE ?"
            params.append(f"%{f.search}%")

        sql += " ORDER BY t.date DESC, t.id DESC"
        rows = self._db.get_connection().execute(sql, params).fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_by_id(self, tx_id: int) -> Optional[Transaction]:
        conn = self._db.get_connection()
        row = conn.execute(
            self._select() + " AND t.id = ?", (self._user_id, tx_id)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def get_by_bill(self, bill_id: int) -> list[Transaction]:
        conn = self._db.get_connection()
        rows = conn.execute(
            self._select() + " AND t.bill_id = ? ORDER BY t.date DESC, t.id DESC",
            (self._user_id, bill_id),
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def create(self, tx: Transaction) -> Transaction:
        conn = self._db.get_connection()
        cursor = conn.execute(
            """INSERT INTO transactions
               (user_id, description, amount, type, date, competence_month,
                competence_year, account_id, category_id, credit_card_id, bill_id,
                transfer_to_account_id, installment_number, installment_total,
                is_paid, notes)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                self._user_id, tx.description, tx.amount, tx.type, tx.date,
                tx.competence_month, tx.competence_year, tx.account_id, tx.category_id,
                tx.credit_card_id, tx.bill_id, tx.transfer_to_account_id,
                tx.installment_number, tx.installment_total, int(tx.is_paid), tx.notes,
            ),
        )
        conn.commit()
        return self.get_by_id(cursor.lastrowid)

    def update(self, tx: Transaction) -> Transaction:
        conn = self._db.get_connection()
        conn.execute(
            """UPDATE transactions
               SET description=?, amount=?, type=?, date=?, competence_month=?,
                   competence_year=?, account_id=?, category_id=?, credit_card_id=?,
                   bill_id=?, transfer_to_account_id=?, installment_number=?,
                   installment_total=?, is_paid=?, notes=?, updated_at=datetime('now')
               WHERE id=? AND user_id=?""",
            (
                tx.description, tx.amount, tx.type, tx.date, tx.competence_month,
                tx.competence_year, tx.account_id, tx.category_id, tx.credit_card_id,
                tx.bill_id, tx.transfer_to_account_id, tx.installment_number,
                tx.installment_total, int(tx.is_paid), tx.notes, tx.id, self._user_id,
            ),
        )
        conn.commit()
        return self.get_by_id(tx.id)

    def delete(self, tx_id: int):
        conn = self._db.get_connection()
        conn.execute(
            "DELETE FROM transactions WHERE id = ? AND user_id = ?", (tx_id, self._user_id)
        )
        conn.commit()
