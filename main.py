import logging
import os
import sys
import customtkinter as ctk

# Ensure project root is on sys.path when run directly
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from database.db_manager import DatabaseManager
from database.transaction_dao import TransactionDAO
from database.category_dao import CategoryDAO
from database.budget_dao import BudgetDAO

from services.transaction_service import TransactionService
from services.budget_service import BudgetService
from services.category_service import CategoryService
from services.preferences_service import PreferencesService
from services.report_service import ReportService
from services.data_service import DataService

from ui.app_window import AppWindow
from utils.app_config import get_db_folder
from utils.constants import APP_NAME
from utils.logging_config import configure_logging

logger = logging.getLogger(__name__)


def main():
    configure_logging()

    # ── Bootstrap: read DB folder from pre-DB config ──────────────────────────
    db_folder = get_db_folder()

    # ── Database ─────────────────────────────────────────────────────────────
    db = DatabaseManager.open(db_folder=db_folder)

    # ── DAOs ─────────────────────────────────────────────────────────────────
    tx_dao = TransactionDAO(db)
    category_dao = CategoryDAO(db)
    budget_dao = BudgetDAO(db)

    # ── Services ─────────────────────────────────────────────────────────────
    prefs_svc = PreferencesService(db)
    tx_svc = TransactionService(tx_dao, category_dao)
    budget_svc = BudgetService(budget_dao, tx_dao, category_dao)
    category_svc = CategoryService(category_dao, tx_dao)
    report_svc = ReportService(tx_dao, budget_dao, category_dao, prefs_svc)
    data_svc = DataService(db, category_dao, budget_dao, tx_dao, prefs_svc)

    # ── Appearance ───────────────────────────────────────────────────────────
    prefs = prefs_svc.load()
    ctk.set_appearance_mode(prefs.appearance_mode)
    ctk.set_default_color_theme("blue")

    # ── Launch UI ────────────────────────────────────────────────────────────
    logger.info("Starting %s", APP_NAME)
    app = AppWindow(
        tx_service=tx_svc,
        budget_service=budget_svc,
        category_service=category_svc,
        preferences_service=prefs_svc,
        report_service=report_svc,
        data_service=data_svc,
    )

    def on_close():
        current = prefs_svc.load()
        if current.auto_save:
            try:
                data_svc.write_backup(current.backup_location)
            except OSError as e:
                logger.error("Backup on exit failed: %s", e)
        db.close()
        app.destroy()

    app.protocol("WM_DELETE_WINDOW", on_close)
    app.mainloop()


if __name__ == "__main__":
    main()
