import logging
import customtkinter as ctk
from models.preferences import UserPreferences
from services.transaction_service import TransactionService
from services.budget_service import BudgetService
from services.category_service import CategoryService
from services.preferences_service import PreferencesService
from services.report_service import ReportService
from services.data_service import DataService
from ui.components.alert_banner import AlertBanner
from ui.tabs.register_tab import RegisterTab
from ui.tabs.budgets_tab import BudgetsTab
from ui.tabs.reports_tab import ReportsTab
from ui.tabs.categories_tab import CategoriesTab
from ui.tabs.settings_tab import SettingsTab
from utils.constants import APP_NAME, APP_WIDTH, APP_HEIGHT
from utils.currency import MoneyFormat
from utils.date_helpers import current_month_str, friendly_month

logger = logging.getLogger(__name__)

_REFRESH_SCOPES: dict[str, set[str]] = {
    "transaction": {"register", "budgets", "reports", "banner"},
    "budget":      {"budgets", "reports", "banner"},
    "category":    {"register", "budgets", "reports", "categories", "banner"},
    "preferences": {"register", "budgets", "reports"},
    "full":        {"register", "budgets", "reports", "categories", "settings", "banner"},
}


class AppWindow(ctk.CTk):
    def __init__(
        self,
        tx_service: TransactionService,
        budget_service: BudgetService,
        category_service: CategoryService,
        preferences_service: PreferencesService,
        report_service: ReportService,
        data_service: DataService,
        **kwargs,
    ):
        super().__init__(**kwargs)
        self._tx_svc = tx_service
        self._budget_svc = budget_service
        self._cat_svc = category_service
        self._prefs_svc = preferences_service
        self._report_svc = report_service
        self._data_svc = data_service

        self._prefs: UserPreferences = self._prefs_svc.load()
        self._money = MoneyFormat.create(self._prefs.currency_code, self._prefs.locale)

        self.title(APP_NAME)
        self.minsize(APP_WIDTH, APP_HEIGHT)
        self.geometry(f"{APP_WIDTH}x{APP_HEIGHT}")

        self.grid_columnconfigure(0, weight=1)
        self.grid_rowconfigure(1, weight=1)

        self._build_banner_area()
        self._build_tabs()

        # Let the window draw before the banner appears
        self.after(300, self._refresh_budget_banner)

    # ── Preferences ──────────────────────────────────────────────────────────
    def get_money(self) -> MoneyFormat:
        return self._money

    def get_date_format(self) -> str:
        return self._prefs.date_format

    def _reload_preferences(self, prefs: UserPreferences):
        self._prefs = prefs
        self._money = MoneyFormat.create(prefs.currency_code, prefs.locale)

    def _on_preferences_saved(self, prefs: UserPreferences):
        self._reload_preferences(prefs)
        logger.info("Preferences changed: %s / %s / %s",
                    prefs.currency_code, prefs.locale, prefs.date_format)
        self.notify_tabs_refresh("preferences")

    # ── Layout ───────────────────────────────────────────────────────────────
    def _build_banner_area(self):
        self._banner_frame = ctk.CTkFrame(self, fg_color="transparent", height=0)
        self._banner_frame.grid(row=0, column=0, sticky="ew", padx=8)

    def _build_tabs(self):
        self._tabview = ctk.CTkTabview(self)
        self._tabview.grid(row=1, column=0, sticky="nsew", padx=8, pady=(0, 8))

        for tab_name in ["Register", "Budgets", "Reports", "Categories", "Settings"]:
            self._tabview.add(tab_name)
            self._tabview.tab(tab_name).grid_columnconfigure(0, weight=1)
            self._tabview.tab(tab_name).grid_rowconfigure(0, weight=1)

        self._register_tab = RegisterTab(
            self._tabview.tab("Register"),
            tx_service=self._tx_svc,
            category_service=self._cat_svc,
            get_money=self.get_money,
            get_date_format=self.get_date_format,
            notify_refresh=self.notify_tabs_refresh,
        )
        self._register_tab.grid(row=0, column=0, sticky="nsew")

        self._budgets_tab = BudgetsTab(
            self._tabview.tab("Budgets"),
            budget_service=self._budget_svc,
            get_money=self.get_money,
            notify_refresh=self.notify_tabs_refresh,
        )
        self._budgets_tab.grid(row=0, column=0, sticky="nsew")

        self._reports_tab = ReportsTab(
            self._tabview.tab("Reports"),
            report_service=self._report_svc,
            get_money=self.get_money,
            get_date_format=self.get_date_format,
        )
        self._reports_tab.grid(row=0, column=0, sticky="nsew")

        self._categories_tab = CategoriesTab(
            self._tabview.tab("Categories"),
            category_service=self._cat_svc,
            notify_refresh=self.notify_tabs_refresh,
        )
        self._categories_tab.grid(row=0, column=0, sticky="nsew")

        self._settings_tab = SettingsTab(
            self._tabview.tab("Settings"),
            preferences_service=self._prefs_svc,
            data_service=self._data_svc,
            on_preferences_saved=self._on_preferences_saved,
            notify_refresh=self.notify_tabs_refresh,
        )
        self._settings_tab.grid(row=0, column=0, sticky="nsew")

    # ── Refresh ──────────────────────────────────────────────────────────────
    def notify_tabs_refresh(self, scope: str = "full"):
        tabs = _REFRESH_SCOPES.get(scope, _REFRESH_SCOPES["full"])
        if scope == "full":
            self._reload_preferences(self._prefs_svc.load())
        if "register"   in tabs: self._register_tab.refresh()
        if "budgets"    in tabs: self._budgets_tab.refresh()
        if "reports"    in tabs: self._reports_tab.refresh()
        if "categories" in tabs: self._categories_tab.refresh()
        if "settings"   in tabs: self._settings_tab.refresh()
        if "banner"     in tabs: self._refresh_budget_banner()

    # ── Banners ──────────────────────────────────────────────────────────────
    def _refresh_budget_banner(self):
        for w in self._banner_frame.winfo_children():
            w.destroy()
        month = current_month_str()
        over = self._budget_svc.get_over_budget(month)
        if not over:
            return
        money = self.get_money()
        details = [
            f"{s.category_name}: {money.money(s.actual_spent)} of {money.money(s.planned)} "
            f"(over by {money.money(-s.remaining)})"
            for s in over
        ]
        count = len(over)
        banner = AlertBanner(
            self._banner_frame,
            message=f"{count} budget{'s are' if count != 1 else ' is'} over the limit in {friendly_month(month)}.",
            severity="danger",
            details=details,
            action_text="View",
            action_cmd=lambda: self._tabview.set("Budgets"),
        )
        banner.pack(fill="x", pady=2)
