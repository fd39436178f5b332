"""Export and import all user data (categories, budgets, transactions,
preferences) as JSON or CSV-in-ZIP.
"""
import csv
import io
import json
import logging
import zipfile
from datetime import datetime
from pathlib import Path

from database.db_manager import DatabaseManager
from database.category_dao import CategoryDAO
from database.budget_dao import BudgetDAO
from database.transaction_dao import TransactionDAO
from models.category import CategoryType
from models.preferences import UserPreferences
from models.transaction import Transaction
from models.validation import ValidationError, require_month, to_amount, to_date
from services.preferences_service import PreferencesService
from utils.date_helpers import format_date

logger = logging.getLogger(__name__)

EXPORT_VERSION = 2
IMPORT_MODES = ("merge", "replace")
_ENTITIES = ("categories", "budgets", "transactions")


class DataService:
    def __init__(
        self,
        db: DatabaseManager,
        category_dao: CategoryDAO,
        budget_dao: BudgetDAO,
        tx_dao: TransactionDAO,
        preferences: PreferencesService,
    ):
        self._db = db
        self._category_dao = category_dao
        self._budget_dao = budget_dao
        self._tx_dao = tx_dao
        self._preferences = preferences

    # ── Export ────────────────────────────────────────────────────────────────

    def export_json(self) -> dict:
        """Return a full export dict (caller writes to disk)."""
        prefs = self._preferences.load()
        data = {
            "export_version": EXPORT_VERSION,
            "exported_at": datetime.now().isoformat(),
            "preferences": {
                "currency_code": prefs.currency_code,
                "locale": prefs.locale,
                "date_format": prefs.date_format,
                "appearance_mode": prefs.appearance_mode,
            },
            "categories": self._build_categories(),
            "budgets": self._build_budgets(),
            "transactions": self._build_transactions(),
        }
        logger.info(
            "Exported %d categories, %d budgets, %d transactions",
            len(data["categories"]), len(data["budgets"]), len(data["transactions"]),
        )
        return data

    def export_csv_zip(self, path: str) -> None:
        """Write a ZIP archive containing one CSV per entity type."""
        data = self.export_json()
        with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zf:
            for key in _ENTITIES:
                rows = data[key]
                if not rows:
                    continue
                buf = io.StringIO()
                writer = csv.DictWriter(buf, fieldnames=list(rows[0].keys()))
                writer.writeheader()
                writer.writerows(rows)
                zf.writestr(f"{key}.csv", buf.getvalue())

    def write_backup(self, folder: str) -> Path:
        """Write a timestamped JSON export into *folder* and return its path."""
        target = Path(folder)
        target.mkdir(parents=True, exist_ok=True)
        path = target / f"finance_backup_{datetime.now():%Y%m%d_%H%M%S}.json"
        with open(path, "w", encoding="utf-8") as f:
            json.dump(self.export_json(), f, indent=2, default=str)
        logger.info("Wrote backup to %s", path)
        return path

    # ── Import ────────────────────────────────────────────────────────────────

    def import_json(self, data: dict, mode: str) -> dict:
        """Import from a previously exported JSON dict.

        mode: 'merge' | 'replace'
        Returns stats dict with counts of created entities and skipped rows.
        """
        if not isinstance(data, dict):
            raise ValidationError("Import file must contain a JSON object.", field="data")
        stats = self._import_data(
            categories=data.get("categories", []),
            budgets=data.get("budgets", []),
            transactions=data.get("transactions", []),
            mode=mode,
        )
        prefs = data.get("preferences")
        if mode == "replace" and isinstance(prefs, dict):
            current = self._preferences.load()
            self._preferences.save(UserPreferences(
                currency_code=prefs.get("currency_code", current.currency_code),
                locale=prefs.get("locale", current.locale),
                date_format=prefs.get("date_format", current.date_format),
                appearance_mode=prefs.get("appearance_mode", current.appearance_mode),
                auto_save=current.auto_save,
                backup_location=current.backup_location,
            ))
        return stats

    def import_csv_zip(self, path: str, mode: str) -> dict:
        """Import from a ZIP archive of CSVs."""
        with zipfile.ZipFile(path, "r") as zf:
            names = zf.namelist()

            def read_csv(fname):
                if fname not in names:
                    return []
                with zf.open(fname) as f:
                    reader = csv.DictReader(io.TextIOWrapper(f, encoding="utf-8"))
                    return list(reader)

            categories = read_csv("categories.csv")
            budgets = read_csv("budgets.csv")
            transactions = read_csv("transactions.csv")

        # Coerce CSV string values to proper Python types
        for t in transactions:
            t["essential"] = _as_bool(t.get("essential"))

        return self._import_data(categories, budgets, transactions, mode)

    # ── Private builders ──────────────────────────────────────────────────────

    def _build_categories(self) -> list[dict]:
        return [
            {
                "name": c.name,
                "type": c.type.value,
                "description": c.description,
                "color_hex": c.color_hex,
            }
            for c in self._category_dao.get_all()
        ]

    def _build_budgets(self) -> list[dict]:
        return [
            {
                "category_name": b.category_name,
                "month": b.month,
                "planned_amount": str(b.planned_amount),
                "notes": b.notes,
            }
            for b in self._budget_dao.get_all()
            if b.category_id is not None
        ]

    def _build_transactions(self) -> list[dict]:
        return [
            {
                "date": format_date(tx.date),
                "type": tx.type.value,
                "amount": str(tx.amount),
                "category_name": tx.category_name or "",
                "description": tx.description,
                "notes": tx.notes,
                "essential": tx.essential,
                "payment_method": tx.payment_method.value if tx.payment_method else "",
                "income_source": tx.income_source.value if tx.income_source else "",
            }
            for tx in self._tx_dao.get_all()
        ]

    # ── Private import ────────────────────────────────────────────────────────

    def _import_data(
        self,
        categories: list[dict],
        budgets: list[dict],
        transactions: list[dict],
        mode: str,
    ) -> dict:
        if mode not in IMPORT_MODES:
            raise ValueError(f"Unknown import mode {mode!r}.")
        categories = _require_rows(categories, "categories")
        budgets = _require_rows(budgets, "budgets")
        transactions = _require_rows(transactions, "transactions")

        conn = self._db.get_connection()
        try:
            stats = self._write_rows(categories, budgets, transactions, mode)
            conn.commit()
        except Exception:
            conn.rollback()
            self._category_dao.invalidate_cache()
            raise

        logger.info("Imported (%s): %s", mode, stats)
        return stats

    def _write_rows(self, categories, budgets, transactions, mode: str) -> dict:
        """Apply an import inside the caller's transaction. Never commits."""
        stats = {"categories": 0, "budgets": 0, "transactions": 0, "skipped": 0}

        # Replace mode: clear all user data in FK-safe order
        if mode == "replace":
            self._tx_dao.delete_all(commit=False)
            self._budget_dao.delete_all(commit=False)
            self._category_dao.delete_user_categories(commit=False)

        # ── Categories ────────────────────────────────────────────────────────
        cat_map = {c.name.lower(): c.id for c in self._category_dao.get_all()}
        for c in categories:
            name = (c.get("name") or "").strip()
            if not name or name.lower() in cat_map:
                continue  # Already exists (system or user)
            try:
                type_ = CategoryType(c.get("type") or "both").value
            except ValueError:
                logger.warning("Skipping category %r with unknown type %r", name, c.get("type"))
                stats["skipped"] += 1
                continue
            new_c = self._category_dao.create(
                name, type_, c.get("description") or "", c.get("color_hex") or "#888888",
                commit=False,
            )
            cat_map[name.lower()] = new_c.id
            stats["categories"] += 1

        # ── Budgets ───────────────────────────────────────────────────────────
        for b in budgets:
            cat_id = cat_map.get((b.get("category_name") or "").strip().lower())
            try:
                month = require_month((b.get("month") or "").strip())
                amount = to_amount(b.get("planned_amount"))
            except ValidationError as e:
                logger.warning("Skipping budget row %r: %s", b, e)
                stats["skipped"] += 1
                continue
            if not cat_id:
                stats["skipped"] += 1
                continue
            if self._budget_dao.get_by_category_month(cat_id, month):
                continue
            self._budget_dao.create(cat_id, month, amount, b.get("notes") or "", commit=False)
            stats["budgets"] += 1

        # ── Transactions ──────────────────────────────────────────────────────
        # Build existing-tx key set for merge dedup
        existing_tx_keys: set[tuple] = set()
        if mode == "merge":
            for tx in self._tx_dao.get_all():
                existing_tx_keys.add(
                    (tx.date, tx.type.value, tx.amount, tx.description)
                )

        uncategorized_id = self._category_dao.get_uncategorized().id
        for t in transactions:
            cat_name = (t.get("category_name") or "").strip().lower()
            cat_id = cat_map.get(cat_name, uncategorized_id)
            try:
                tx = Transaction(
                    id=0,
                    type=t.get("type") or "expense",
                    amount=t.get("amount"),
                    description=t.get("description") or "",
                    date=to_date(t.get("date") or ""),
                    category_id=cat_id,
                    notes=t.get("notes") or "",
                    essential=_as_bool(t.get("essential")) if t.get("type") == "expense" else False,
                    payment_method=(t.get("payment_method") or None) if t.get("type") == "expense" else None,
                    income_source=(t.get("income_source") or None) if t.get("type") == "income" else None,
                )
            except ValueError as e:
                logger.warning("Skipping transaction row %r: %s", t, e)
                stats["skipped"] += 1
                continue

            if mode == "merge":
                key = (tx.date, tx.type.value, tx.amount, tx.description)
                if key in existing_tx_keys:
                    continue
                existing_tx_keys.add(key)

            self._tx_dao.create(
                type_=tx.type.value,
                amount=tx.amount,
                date=format_date(tx.date),
                description=tx.description,
                category_id=tx.category_id,
                notes=tx.notes,
                essential=tx.essential,
                payment_method=tx.payment_method.value if tx.payment_method else None,
                income_source=tx.income_source.value if tx.income_source else None,
                commit=False,
            )
            stats["transactions"] += 1
        return stats


def _require_rows(value, key: str) -> list:
    if not isinstance(value, list) or not all(isinstance(row, dict) for row in value):
        raise ValidationError(f"Import section '{key}' must be a list of records.", field=key)
    return value


def _as_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip() in ("1", "True", "true")
