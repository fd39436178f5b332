import logging
import os
import sqlite3

from utils.constants import DB_FILE, DEFAULT_CATEGORIES, UNCATEGORIZED_CATEGORY

logger = logging.getLogger(__name__)


class DatabaseManager:
    def __init__(self, db_path: str | None = None):
        self.db_path = db_path or DB_FILE
        self._conn: sqlite3.Connection | None = None

    def get_connection(self) -> sqlite3.Connection:
        if self._conn is None:
            self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.execute("PRAGMA foreign_keys = ON")
            self._conn.execute("PRAGMA journal_mode = WAL")
        return self._conn

    def initialize(self):
        """Create schema and seed defaults."""
        conn = self.get_connection()
        self._create_schema(conn)
        self._migrate_schema(conn)
        self._seed_defaults(conn)
        conn.commit()
        logger.info("Database ready at %s", self.db_path)

    def _migrate_schema(self, conn: sqlite3.Connection):
        """Idempotent ALTER TABLE for columns added after initial release."""
        tx_cols = {row[1] for row in conn.execute("PRAGMA table_info(transactions)").fetchall()}
        if "payment_method" not in tx_cols:
            conn.execute("ALTER TABLE transactions ADD COLUMN payment_method TEXT")
        if "income_source" not in tx_cols:
            conn.execute("ALTER TABLE transactions ADD COLUMN income_source TEXT")
        budget_cols = {row[1] for row in conn.execute("PRAGMA table_info(budgets)").fetchall()}
        if "notes" not in budget_cols:
            conn.execute("ALTER TABLE budgets ADD COLUMN notes TEXT NOT NULL DEFAULT ''")

    def _create_schema(self, conn: sqlite3.Connection):
        conn.executescript("""
            CREATE TABLE IF NOT EXISTS categories (
                id          INTEGER PRIMARY KEY AUTOINCREMENT,
                name        TEXT NOT NULL UNIQUE COLLATE NOCASE,
                type        TEXT NOT NULL DEFAULT 'both' CHECK(type IN ('income','expense','both')),
                description TEXT NOT NULL DEFAULT '',
                color_hex   TEXT NOT NULL DEFAULT '#888888',
                is_system   INTEGER NOT NULL DEFAULT 0
            );

            CREATE TABLE IF NOT EXISTS transactions (
                id             INTEGER PRIMARY KEY AUTOINCREMENT,
                type           TEXT NOT NULL CHECK(type IN ('income','expense')),
                amount         TEXT NOT NULL CHECK(CAST(amount AS REAL) > 0),
                category_id    INTEGER REFERENCES categories(id) ON DELETE SET NULL,
                description    TEXT NOT NULL,
                date           TEXT NOT NULL,
                notes          TEXT NOT NULL DEFAULT '',
                essential      INTEGER NOT NULL DEFAULT 0,
                payment_method TEXT,
                income_source  TEXT,
                created_at     TEXT NOT NULL DEFAULT (datetime('now')),
                updated_at     TEXT NOT NULL DEFAULT (datetime('now'))
            );

            CREATE TABLE IF NOT EXISTS budgets (
                id             INTEGER PRIMARY KEY AUTOINCREMENT,
                category_id    INTEGER REFERENCES categories(id) ON DELETE SET NULL,
                month          TEXT NOT NULL,
                planned_amount TEXT NOT NULL CHECK(CAST(planned_amount AS REAL) > 0),
                notes          TEXT NOT NULL DEFAULT '',
                UNIQUE(category_id, month)
            );

            CREATE TABLE IF NOT EXISTS app_settings (
                key   TEXT PRIMARY KEY,
                value TEXT NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_transactions_date        ON transactions(date);
            CREATE INDEX IF NOT EXISTS idx_transactions_category_id ON transactions(category_id);
            CREATE INDEX IF NOT EXISTS idx_budgets_month            ON budgets(month);
        """)

    def _seed_defaults(self, conn: sqlite3.Connection):
        # Default settings
        defaults = [
            ("currency_code", "USD"),
            ("locale", "en_US"),
            ("date_format", "MM/DD/YYYY"),
            ("appearance_mode", "system"),
            ("auto_save", "1"),
        ]
        for key, value in defaults:
            conn.execute(
                "INSERT OR IGNORE INTO app_settings(key, value) VALUES (?, ?)",
                (key, value),
            )

        # Reserved category, always present
        conn.execute(
            """INSERT OR IGNORE INTO categories(name, type, description, color_hex, is_system)
               VALUES (?, ?, ?, ?, 1)""",
            (UNCATEGORIZED_CATEGORY["name"], UNCATEGORIZED_CATEGORY["type"],
             UNCATEGORIZED_CATEGORY["description"], UNCATEGORIZED_CATEGORY["color_hex"]),
        )

        # Starter categories only on a fresh database; users may delete them later.
        if self.get_setting_from(conn, "categories_seeded") != "1":
            for cat in DEFAULT_CATEGORIES:
                conn.execute(
                    """INSERT OR IGNORE INTO categories(name, type, description, color_hex)
                       VALUES (?, ?, ?, ?)""",
                    (cat["name"], cat["type"], cat["description"], cat["color_hex"]),
                )
            conn.execute(
                "INSERT OR REPLACE INTO app_settings(key, value) VALUES ('categories_seeded', '1')"
            )

    @staticmethod
    def get_setting_from(conn: sqlite3.Connection, key: str, default: str = "") -> str:
        row = conn.execute(
            "SELECT value FROM app_settings WHERE key = ?", (key,)
        ).fetchone()
        return row["value"] if row else default

    def get_setting(self, key: str, default: str = "") -> str:
        return self.get_setting_from(self.get_connection(), key, default)

    def set_setting(self, key: str, value: str):
        conn = self.get_connection()
        conn.execute(
            "INSERT OR REPLACE INTO app_settings(key, value) VALUES (?, ?)",
            (key, value),
        )
        conn.commit()

    @staticmethod
    def open(db_folder: str | None = None) -> "DatabaseManager":
        """Startup factory: opens (and initializes) the DB file in db_folder or the CWD."""
        if db_folder:
            os.makedirs(db_folder, exist_ok=True)
            path = os.path.join(db_folder, DB_FILE)
        else:
            path = DB_FILE
        db = DatabaseManager(path)
        db.initialize()
        return db

    def close(self):
        if self._conn:
            self._conn.close()
            self._conn = None
