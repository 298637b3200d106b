from typing import Optional
from database.db_manager import DatabaseManager
from models.category import Category


class CategoryDAO:
    """System categories (user_id NULL) plus the user's own."""

    def __init__(self, db: DatabaseManager, user_id: int):
        self._db = db
        self._user_id = user_id
        self._all_cache: list | None = None

    def _invalidate_cache(self):
        self._all_cache = None

    def _row_to_model(self, row) -> Category:
        return Category(
            id=row["id"],
            user_id=row["user_id"],
            name=row["name"],
            type=row["type"],
            color=row["color"],
            icon=row["icon"],
            is_system=bool(row["is_system"]),
        )

    def get_all(self) -> list[Category]:
        if self._all_cache is None:
            conn = self._db.get_connection()
            rows = conn.execute(
                """SELECT * FROM categories
                   WHERE user_id IS NULL OR user_id = ?
                   ORDER BY type, name""",
                (self._user_id,),
            ).fetchall()
            self._all_cache = [self._row_to_model(r) for r in rows]
        return self._all_cache

    def get_by_id(self, category_id: int) -> Optional[Category]:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM categories WHERE id = ? AND (user_id IS NULL OR user_id = ?)",
            (category_id, self._user_id),
        ).fetchone()
        return self._row_to_model(row) if row else None

    def get_by_type(self, type_filter: str) -> list[Category]:
        return [c for c in self.get_all() if c.type == type_filter]

    def create(self, category: Category) -> Category:
        conn = self._db.get_connection()
        cursor = conn.execute(
            "INSERT INTO categories(user_id, name, type, color, icon) VALUES (?, ?, ?, ?, ?)",
            (self._user_id, category.name, category.type, category.color, category.icon),
        )
        conn.commit()
        self._invalidate_cache()
        return self.get_by_id(cursor.lastrowid)

    def update(self, category: Category) -> Category:
        conn = self._db.get_connection()
        conn.execute(
            "UPDATE categories SET name=?, type=?, color=?, icon=? WHERE id=? AND user_id=?",
            (category.name, category.type, category.color, category.icon,
             category.id, self._user_id),
        )
        conn.commit()
        self._invalidate_cache()
        return self.get_by_id(category.id)

    def delete(self, category_id: int):
        conn = self._db.get_connection()
        conn.execute(
            "DELETE FROM categories WHERE id = ? AND user_id = ?",
            (category_id, self._user_id),
        )
        conn.commit()
        self._invalidate_cache()

    def has_transactions(self, category_id: int) -> bool:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT COUNT(*) as cnt FROM transactions WHERE category_id = ? AND user_id = ?",
            (category_id, self._user_id),
        ).fetchone()
        return row["cnt"] > 0
