from database.db_manager import DatabaseManager


class NotificationStateDAO:
    """Persists per-notification read/dismissed status with expiry dates.

    Notifications themselves are regenerated on every refresh; only the
    user's reaction to them is stored, keyed by the notification key.
    """

    def __init__(self, db: DatabaseManager, user_id: int):
        self._db = db
        self._user_id = user_id

    def set_state(self, key: str, status: str, expires: str) -> None:
        """Insert or replace a state record. expires is YYYY-MM-DD."""
        conn = self._db.get_connection()
        conn.execute(
            """INSERT OR REPLACE INTO notification_states(user_id, key, status, expires)
               VALUES (?, ?, ?, ?)""",
            (self._user_id, key, status, expires),
        )
        conn.commit()

    def get_active_states(self, ref_date: str) -> dict[str, str]:
        """Purge expired rows, then return {key: status} for the rest."""
        conn = self._db.get_connection()
        conn.execute(
            "DELETE FROM notification_states WHERE user_id = ? AND expires < ?",
            (self._user_id, ref_date),
        )
        conn.commit()
        rows = conn.execute(
            "SELECT key, status FROM notification_states WHERE user_id = ?",
            (self._user_id,),
        ).fetchall()
        return {row["key"]: row["status"] for row in rows}

    def clear(self, key: str) -> None:
        conn = self._db.get_connection()
        conn.execute(
            "DELETE FROM notification_states WHERE user_id = ? AND key = ?",
            (self._user_id, key),
        )
        conn.commit()
