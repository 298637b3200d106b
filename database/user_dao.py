from typing import Optional
from database.db_manager import DatabaseManager
from models.user import User


class UserDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> User:
        return User(
            id=row["id"],
            email=row["email"],
            full_name=row["full_name"],
            password_hash=row["password_hash"],
            created_at=row["created_at"],
        )

    def get_by_id(self, user_id: int) -> Optional[User]:
        row = self._db.get_connection().execute(
            "SELECT * FROM users WHERE id = ?", (user_id,)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def get_by_email(self, email: str) -> Optional[User]:
        row = self._db.get_connection().execute(
            "SELECT * FROM users WHERE email = ? COLLATE NOCASE", (email,)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def create(self, email: str, full_name: str, password_hash: str) -> User:
        conn = self._db.get_connection()
        cursor = conn.execute(
            "INSERT INTO users(email, full_name, password_hash) VALUES (?, ?, ?)",
            (email, full_name, password_hash),
        )
        conn.commit()
        return self.get_by_id(cursor.lastrowid)
