import logging
from typing import Optional
from database.db_manager import DatabaseManager
from models.account import Account

logger = logging.getLogger(__name__)


class AccountDAO:
    def __init__(self, db: DatabaseManager, user_id: int):
        self._db = db
        self._user_id = user_id
        self._all_cache: list | None = None

    def _invalidate_cache(self):
        self._all_cache = None

    def _row_to_model(self, row) -> Account:
        return Account(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            account_type=row["account_type"],
            balance=row["balance"],
            initial_balance=row["initial_balance"],
            bank_name=row["bank_name"],
            bank_code=row["bank_code"],
            agency_number=row["agency_number"],
            account_number=row["account_number"],
            color=row["color"],
            icon=row["icon"],
            is_default=bool(row["is_default"]),
            include_in_total=bool(row["include_in_total"]),
            is_active=bool(row["is_active"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def get_all(self, include_inactive: bool = False) -> list[Account]:
        if self._all_cache is None:
            conn = self._db.get_connection()
            rows = conn.execute(
                "SELECT * FROM accounts WHERE user_id = ? ORDER BY is_default DESC, name",
                (self._user_id,),
            ).fetchall()
            self._all_cache = [self._row_to_model(r) for r in rows]
        if include_inactive:
            return list(self._all_cache)
        return [a for a in self._all_cache if a.is_active]

    def get_by_id(self, account_id: int) -> Optional[Account]:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM accounts WHERE id = ? AND user_id = ?",
            (account_id, self._user_id),
        ).fetchone()
        return self._row_to_model(row) if row else None

    def create(self, account: Account) -> Account:
        conn = self._db.get_connection()
        cursor = conn.execute(
            """INSERT INTO accounts
               (user_id, name, account_type, balance, initial_balance, bank_name,
                bank_code, agency_number, account_number, color, icon,
                is_default, include_in_total, is_active)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                self._user_id, account.name, account.account_type, account.balance,
                account.initial_balance, account.bank_name, account.bank_code,
                account.agency_number, account.account_number, account.color,
                account.icon, int(account.is_default), int(account.include_in_total),
                int(account.is_active),
            ),
        )
        conn.commit()
        self._invalidate_cache()
        return self.get_by_id(cursor.lastrowid)

    def update(self, account: Account) -> Account:
        conn = self._db.get_connection()
        conn.execute(
            """UPDATE accounts
               SET name=?, account_type=?, balance=?, initial_balance=?, bank_name=?,
                   bank_code=?, agency_number=?, account_number=?, color=?, icon=?,
                   is_default=?, include_in_total=?, is_active=?,
                   updated_at=datetime('now')
               WHERE id=? AND user_id=?""",
            (
                account.name, account.account_type, account.balance,
                account.initial_balance, account.bank_name, account.bank_code,
                account.agency_number, account.account_number, account.color,
                account.icon, int(account.is_default), int(account.include_in_total),
                int(account.is_active), account.id, self._user_id,
            ),
        )
        conn.commit()
        self._invalidate_cache()
        return self.get_by_id(account.id)

    def delete(self, account_id: int):
        """Soft delete: the row stays so historical transactions keep their account."""
        conn = self._db.get_connection()
        conn.execute(
            """UPDATE accounts SET is_active = 0, is_default = 0, updated_at = datetime('now')
               WHERE id = ? AND user_id = ?""",
            (account_id, self._user_id),
        )
        conn.commit()
        self._invalidate_cache()

    def set_default(self, account_id: int):
        conn = self._db.get_connection()
        conn.execute(
            "UPDATE accounts SET is_default = (id = ?) WHERE user_id = ?",
            (account_id, self._user_id),
        )
        conn.commit()
        self._invalidate_cache()

    def adjust_balance(self, account_id: int, delta: float):
        conn = self._db.get_connection()
        conn.execute(
            """UPDATE accounts SET balance = ROUND(balance + ?, 2), updated_at = datetime('now')
               WHERE id = ? AND user_id = ?""",
            (delta, account_id, self._user_id),
        )
        conn.commit()
        self._invalidate_cache()
        logger.debug("Account %s balance adjusted by %.2f", account_id, delta)
