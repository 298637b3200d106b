from typing import Optional
from database.db_manager import DatabaseManager
from models.credit_card import CreditCard


class CreditCardDAO:
    def __init__(self, db: DatabaseManager, user_id: int):
        self._db = db
        self._user_id = user_id
        self._all_cache: list | None = None

    def _invalidate_cache(self):
        self._all_cache = None

    def _row_to_model(self, row) -> CreditCard:
        return CreditCard(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            brand=row["brand"],
            card_type=row["card_type"],
            last_digits=row["last_digits"],
            credit_limit=row["credit_limit"],
            available_limit=row["available_limit"],
            closing_day=row["closing_day"],
            due_day=row["due_day"],
            color=row["color"],
            is_default=bool(row["is_default"]),
            is_active=bool(row["is_active"]),
            is_virtual=bool(row["is_virtual"]),
            parent_card_id=row["parent_card_id"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def get_all(self, include_inactive: bool = False) -> list[CreditCard]:
        if self._all_cache is None:
            conn = self._db.get_connection()
            rows = conn.execute(
                "SELECT * FROM credit_cards WHERE user_id = ? ORDER BY is_default DESC, name",
                (self._user_id,),
            ).fetchall()
            self._all_cache = [self._row_to_model(r) for r in rows]
        if include_inactive:
            return list(self._all_cache)
        return [c for c in self._all_cache if c.is_active]

    def get_by_id(self, card_id: int) -> Optional[CreditCard]:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM credit_cards WHERE id = ? AND user_id = ?",
            (card_id, self._user_id),
        ).fetchone()
        return self._row_to_model(row) if row else None

    def create(self, card: CreditCard) -> CreditCard:
        conn = self._db.get_connection()
        cursor = conn.execute(
            """INSERT INTO credit_cards
               (user_id, name, brand, card_type, last_digits, credit_limit,
                available_limit, closing_day, due_day, color, is_default,
                is_active, is_virtual, parent_card_id)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                self._user_id, card.name, card.brand, card.card_type, card.last_digits,
                card.credit_limit, card.available_limit, card.closing_day, card.due_day,
                card.color, int(card.is_default), int(card.is_active),
                int(card.is_virtual), card.parent_card_id,
            ),
        )
        conn.commit()
        self._invalidate_cache()
        return self.get_by_id(cursor.lastrowid)

    def update(self, card: CreditCard) -> CreditCard:
        conn = self._db.get_connection()
        conn.execute(
            """UPDATE credit_cards
               SET name=?, brand=?, card_type=?, last_digits=?, credit_limit=?,
                   available_limit=?, closing_day=?, due_day=?, color=?, is_default=?,
                   is_active=?, is_virtual=?, parent_card_id=?, updated_at=datetime('now')
               WHERE id=? AND user_id=?""",
            (
                card.name, card.brand, card.card_type, card.last_digits,
                card.credit_limit, card.available_limit, card.closing_day, card.due_day,
                card.color, int(card.is_default), int(card.is_active),
                int(card.is_virtual), card.parent_card_id, card.id, self._user_id,
            ),
        )
        conn.commit()
        self._invalidate_cache()
        return self.get_by_id(card.id)

    def delete(self, card_id: int):
        """Soft delete."""
        conn = self._db.get_connection()
        conn.execute(
            """UPDATE credit_cards SET is_active = 0, is_default = 0, updated_at = datetime('now')
               WHERE id = ? AND user_id = ?""",
            (card_id, self._user_id),
        )
        conn.commit()
        self._invalidate_cache()

    def set_default(self, card_id: int):
        conn = self._db.get_connection()
        conn.execute(
            "UPDATE credit_cards SET is_default = (id = ?) WHERE user_id = ?",
            (card_id, self._user_id),
        )
        conn.commit()
        self._invalidate_cache()

    def adjust_available_limit(self, card_id: int, delta: float):
        """Add delta to the available limit, clamped to [0, credit_limit]."""
        conn = self._db.get_connection()
        conn.execute(
            """UPDATE credit_cards
               SET available_limit = MAX(0, MIN(credit_limit, ROUND(available_limit + ?, 2))),
                   updated_at = datetime('now')
               WHERE id = ? AND user_id = ?""",
            (delta, card_id, self._user_id),
        )
        conn.commit()
        self._invalidate_cache()
