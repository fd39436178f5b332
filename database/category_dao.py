import logging
from typing import Optional
from database.db_manager import DatabaseManager
from models.category import Category
from utils.constants import UNCATEGORIZED_NAME

logger = logging.getLogger(__name__)


class CategoryDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db
        self._all_cache: list | None = None

    def invalidate_cache(self):
        self._all_cache = None

    def _row_to_model(self, row) -> Category:
        return Category(
            id=row["id"],
            name=row["name"],
            type=row["type"],
            description=row["description"],
            color_hex=row["color_hex"],
            is_system=bool(row["is_system"]),
        )

    def get_all(self) -> list[Category]:
        """Snapshot of every category; callers get their own list."""
        if self._all_cache is None:
            conn = self._db.get_connection()
            rows = conn.execute(
                "SELECT * FROM categories ORDER BY name COLLATE NOCASE"
            ).fetchall()
            self._all_cache = [self._row_to_model(r) for r in rows]
        return list(self._all_cache)

    def get_by_id(self, category_id: int) -> Optional[Category]:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM categories WHERE id = ?", (category_id,)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def get_by_name(self, name: str) -> Optional[Category]:
        """Case-insensitive lookup."""
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM categories WHERE name = ? COLLATE NOCASE", (name.strip(),)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def get_uncategorized(self) -> Category:
        cat = self.get_by_name(UNCATEGORIZED_NAME)
        if cat is None:
            # Recreated if someone removed it behind the app's back
            logger.warning("Reserved category missing, recreating %s", UNCATEGORIZED_NAME)
            cat = self.create(UNCATEGORIZED_NAME, "both", "Default category", is_system=True)
        return cat

    def get_for_transaction_type(self, tx_type: str) -> list[Category]:
        """Get categories valid for income or expense transactions."""
        conn = self._db.get_connection()
        if tx_type in ("income", "expense"):
            rows = conn.execute(
                "SELECT * FROM categories WHERE type IN (?, 'both') ORDER BY name COLLATE NOCASE",
                (tx_type,),
            ).fetchall()
        else:
            rows = conn.execute(
                "SELECT * FROM categories ORDER BY name COLLATE NOCASE"
            ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def create(
        self,
        name: str,
        type_: str,
        description: str = "",
        color_hex: str = "#888888",
        is_system: bool = False,
        commit: bool = True,
    ) -> Category:
        conn = self._db.get_connection()
        cursor = conn.execute(
            """INSERT INTO categories(name, type, description, color_hex, is_system)
               VALUES (?, ?, ?, ?, ?)""",
            (name, type_, description, color_hex, 1 if is_system else 0),
        )
        if commit:
            conn.commit()
        self.invalidate_cache()
        logger.debug("Created category %s (%s)", name, type_)
        return self.get_by_id(cursor.lastrowid)

    def update(
        self, category_id: int, name: str, type_: str, description: str, color_hex: str
    ) -> Category:
        conn = self._db.get_connection()
        conn.execute(
            "UPDATE categories SET name=?, type=?, description=?, color_hex=? WHERE id=?",
            (name, type_, description, color_hex, category_id),
        )
        conn.commit()
        self.invalidate_cache()
        return self.get_by_id(category_id)

    def delete(self, category_id: int):
        conn = self._db.get_connection()
        conn.execute("DELETE FROM categories WHERE id = ?", (category_id,))
        conn.commit()
        self.invalidate_cache()

    def delete_user_categories(self, commit: bool = True):
        """Remove every category except the reserved one."""
        conn = self._db.get_connection()
        conn.execute("DELETE FROM categories WHERE is_system = 0")
        if commit:
            conn.commit()
        self.invalidate_cache()
