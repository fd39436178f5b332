from decimal import Decimal
from typing import Optional
from database.db_manager import DatabaseManager
from models.transaction import Transaction


class TransactionDAO:
    def __init__(self, db: DatabaseManager):
        self._db = db

    def _row_to_model(self, row) -> Transaction:
        return Transaction(
            id=row["id"],
            type=row["type"],
            amount=Decimal(row["amount"]),
            description=row["description"],
            date=row["date"],
            category_id=row["category_id"],
            category_name=row["category_name"] if "category_name" in row.keys() else "",
            notes=row["notes"],
            essential=bool(row["essential"]),
            payment_method=row["payment_method"],
            income_source=row["income_source"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    def _select(self) -> str:
        return """
            SELECT t.*,
                   COALESCE(c.name, '') AS category_name
            FROM transactions t
            LEFT JOIN categories c ON t.category_id = c.id
        """

    def get_all(self) -> list[Transaction]:
        """Snapshot of every transaction, oldest first."""
        conn = self._db.get_connection()
        rows = conn.execute(
            self._select() + " ORDER BY t.date ASC, t.id ASC"
        ).fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_filtered(
        self,
        month: str | None = None,
        type_filter: str | None = None,
        search: str | None = None,
    ) -> list[Transaction]:
        conn = self._db.get_connection()
        sql = self._select() + " WHERE 1=1"
        params: list = []

        if month:
            sql += " AND strftime('%Y-%m', t.date) = ?"
            params.append(month)
        if type_filter and type_filter != "all":
            sql += " AND t.type = ?"
            params.append(type_filter)
        if search:
            sql += " AND (t.description LIKE ? OR COALESCE(c.name,'') LIKE ? OR t.notes LIKE ?)"
            params.extend([f"%{search}%"] * 3)

        sql += " ORDER BY t.date ASC, t.id ASC"
        rows = conn.execute(sql, params).fetchall()
        return [self._row_to_model(r) for r in rows]

    def get_by_id(self, tx_id: int) -> Optional[Transaction]:
        conn = self._db.get_connection()
        row = conn.execute(
            self._select() + " WHERE t.id = ?", (tx_id,)
        ).fetchone()
        return self._row_to_model(row) if row else None

    def create(
        self,
        type_: str,
        amount: Decimal,
        date: str,
        description: str,
        category_id: int | None,
        notes: str = "",
        essential: bool = False,
        payment_method: str | None = None,
        income_source: str | None = None,
        commit: bool = True,
    ) -> Transaction:
        conn = self._db.get_connection()
        cursor = conn.execute(
            """INSERT INTO transactions
               (type, amount, category_id, description, date, notes,
                essential, payment_method, income_source)
               VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)""",
            (
                type_, str(amount), category_id, description, date, notes,
                1 if essential else 0, payment_method, income_source,
            ),
        )
        if commit:
            conn.commit()
        return self.get_by_id(cursor.lastrowid)

    def update(
        self,
        tx_id: int,
        amount: Decimal,
        date: str,
        description: str,
        category_id: int | None,
        notes: str = "",
        essential: bool = False,
        payment_method: str | None = None,
        income_source: str | None = None,
    ) -> Transaction:
        """Update everything except the type, which is fixed at creation."""
        conn = self._db.get_connection()
        conn.execute(
            """UPDATE transactions
               SET amount=?, category_id=?, description=?, date=?, notes=?,
                   essential=?, payment_method=?, income_source=?,
                   updated_at=datetime('now')
               WHERE id=?""",
            (str(amount), category_id, description, date, notes,
             1 if essential else 0, payment_method, income_source, tx_id),
        )
        conn.commit()
        return self.get_by_id(tx_id)

    def reassign_category(self, from_category_id: int, to_category_id: int, commit: bool = True) -> int:
        """Move every transaction of one category to another. Returns count moved."""
        conn = self._db.get_connection()
        cursor = conn.execute(
            "UPDATE transactions SET category_id=?, updated_at=datetime('now') WHERE category_id=?",
            (to_category_id, from_category_id),
        )
        if commit:
            conn.commit()
        return cursor.rowcount

    def delete(self, tx_id: int):
        conn = self._db.get_connection()
        conn.execute("DELETE FROM transactions WHERE id = ?", (tx_id,))
        conn.commit()

    def delete_all(self, commit: bool = True):
        conn = self._db.get_connection()
        conn.execute("DELETE FROM transactions")
        if commit:
            conn.commit()
