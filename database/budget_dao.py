import sqlite3
from decimal import Decimal
from typing import Optional
from database.db_manager import DatabaseManager
from models.budget import Budget
from models.validation import DuplicateBudgetError


class BudgetDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> Budget:
        return Budget(
            id=row["id"],
            category_id=row["category_id"],
            category_name=row["category_name"] or "",
            month=row["month"],
            planned_amount=Decimal(row["planned_amount"]),
            notes=row["notes"],
            color_hex=row["color_hex"] or "#888888",
        )

    def _select(self) -> str:
        return """
            SELECT b.*, c.name AS category_name, c.color_hex
            FROM budgets b
            LEFT JOIN categories c ON b.category_id = c.id
        """

    def get_all(self) -> list[Budget]:
        conn = self._db.get_connection()
        rows = conn.execute(
            self._select() + " ORDER BY b.month, c.name COLLATE NOCASE"
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_by_month(self, month: str) -> list[Budget]:
        conn = self._db.get_connection()
        rows = conn.execute(
            self._select() + " WHERE b.month = ? ORDER BY c.name COLLATE NOCASE",
            (month,),
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_by_id(self, budget_id: int) -> Optional[Budget]:
        conn = self._db.get_connection()
        row = conn.execute(self._select() + " WHERE b.id = ?", (budget_id,)).fetchone()
        return self._row_to_model(row) if row else None

    def get_by_category_month(self, category_id: int, month: str) -> Optional[Budget]:
        conn = self._db.get_connection()
        row = conn.execute(
            self._select() + " WHERE b.category_id = ? AND b.month = ?",
            (category_id, month),
        ).fetchone()
        return self._row_to_model(row) if row else None

    def create(
        self,
        category_id: int,
        month: str,
        planned_amount: Decimal,
        notes: str = "",
        category_name: str = "",
        commit: bool = True,
    ) -> Budget:
        """Insert a new budget. The (category, month) pair must be free."""
        conn = self._db.get_connection()
        try:
            cursor = conn.execute(
                """INSERT INTO budgets(category_id, month, planned_amount, notes)
                   VALUES (?, ?, ?, ?)""",
                (category_id, month, str(planned_amount), notes),
            )
        except sqlite3.IntegrityError:
            raise DuplicateBudgetError(category_name or str(category_id), month)
        if commit:
            conn.commit()
        return self.get_by_id(cursor.lastrowid)

    def update(self, budget_id: int, planned_amount: Decimal, notes: str = "") -> Budget:
        conn = self._db.get_connection()
        conn.execute(
            "UPDATE budgets SET planned_amount = ?, notes = ? WHERE id = ?",
            (str(planned_amount), notes, budget_id),
        )
        conn.commit()
        return self.get_by_id(budget_id)

    def delete(self, budget_id: int):
        conn = self._db.get_connection()
        conn.execute("DELETE FROM budgets WHERE id = ?", (budget_id,))
        conn.commit()

    def delete_all(self, commit: bool = True):
        conn = self._db.get_connection()
        conn.execute("DELETE FROM budgets")
        if commit:
            conn.commit()

    def copy_month(self, from_month: str, to_month: str) -> int:
        """Copy budget amounts from one month to another, skipping categories
        that already have a budget in the target month. Returns count copied."""
        conn = self._db.get_connection()
        rows = conn.execute(
            """SELECT category_id, planned_amount, notes FROM budgets
               WHERE month = ? AND category_id IS NOT NULL""",
            (from_month,),
        ).fetchall()
        count = 0
        for row in rows:
            cursor = conn.execute(
                """INSERT INTO budgets(category_id, month, planned_amount, notes)
                   VALUES (?, ?, ?, ?)
                   ON CONFLICT(category_id, month) DO NOTHING""",
                (row["category_id"], to_month, row["planned_amount"], row["notes"]),
            )
            count += cursor.rowcount
        conn.commit()
        return count
