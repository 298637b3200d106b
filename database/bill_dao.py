from typing import Optional
from database.db_manager import DatabaseManager
from models.bill import CreditCardBill


class BillDAO:
    """Credit card bills. Ownership is inherited from the card."""

    def __init__(self, db: DatabaseManager, user_id: int):
        self._db = db
        self._user_id = user_id

    def _row_to_model(self, row) -> CreditCardBill:
        return CreditCardBill(
            id=row["id"],
            card_id=row["card_id"],
            reference_month=row["reference_month"],
            closing_date=row["closing_date"],
            due_date=row["due_date"],
            total_amount=row["total_amount"],
            is_paid=bool(row["is_paid"]),
            paid_at=row["paid_at"],
            payment_transaction_id=row["payment_transaction_id"],
            card_name=row["card_name"] if "card_name" in row.keys() else "",
        )

    def _select(self) -> str:
        return """
            SELECT b.*, c.name AS card_name
            FROM credit_card_bills b
            JOIN credit_cards c ON b.card_id = c.id
            WHERE c.user_id = ?
        """

    def get_all(self) -> list[CreditCardBill]:
        conn = self._db.get_connection()
        rows = conn.execute(
            self._select() + " ORDER BY b.due_date", (self._user_id,)
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_by_card(self, card_id: int) -> list[CreditCardBill]:
        conn = self._db.get_connection()
        rows = conn.execute(
            self._select() + " AND b.card_id = ? ORDER BY b.reference_month DESC",
            (self._user_id, card_id),
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_by_id(self, bill_id: int) -> Optional[CreditCardBill]:
        conn = self._db.get_connection()
        row = conn.execute(
            self._select() + " AND b.id = ?", (self._user_id, bill_id)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def get_by_card_month(self, card_id: int, reference_month: str) -> Optional[CreditCardBill]:
        conn = self._db.get_connection()
        row = conn.execute(
            self._select() + " AND b.card_id = ? AND b.reference_month = ?",
            (self._user_id, card_id, reference_month),
        ).fetchone()
        return self._row_to_model(row) if row else None

    def create(self, bill: CreditCardBill) -> CreditCardBill:
        conn = self._db.get_connection()
        cursor = conn.execute(
            """INSERT INTO credit_card_bills
               (card_id, reference_month, closing_date, due_date, total_amount,
                is_paid, paid_at, payment_transaction_id)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                bill.card_id, bill.reference_month, bill.closing_date, bill.due_date,
                bill.total_amount, int(bill.is_paid), bill.paid_at,
                bill.payment_transaction_id,
            ),
        )
        conn.commit()
        return self.get_by_id(cursor.lastrowid)

    def update(self, bill: CreditCardBill) -> CreditCardBill:
        conn = self._db.get_connection()
        conn.execute(
            """UPDATE credit_card_bills
               SET closing_date=?, due_date=?, total_amount=?, is_paid=?, paid_at=?,
                   payment_transaction_id=?
               WHERE id=?""",
            (
                bill.closing_date, bill.due_date, bill.total_amount, int(bill.is_paid),
                bill.paid_at, bill.payment_transaction_id, bill.id,
            ),
        )
        conn.commit()
        return self.get_by_id(bill.id)
