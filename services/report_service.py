import logging
from datetime import date

from database.transaction_dao import TransactionDAO
from database.budget_dao import BudgetDAO
from database.category_dao import CategoryDAO
from models.report import (
    BudgetStatus,
    CashFlowLedger,
    CategoryTotal,
    MonthTotals,
    PeriodSummary,
    SpendingInsights,
)
from services import financial_calculator as calc
from services.preferences_service import PreferencesService
from services.report_generator import ReportGenerator
from utils.constants import REPORT_MONTHLY, UNKNOWN_CATEGORY_NAME
from utils.date_helpers import current_month_str, format_date, month_bounds, today

logger = logging.getLogger(__name__)


class ReportService:
    """Feeds DAO snapshots to the aggregation engine and the report formatter."""

    def __init__(
        self,
        tx_dao: TransactionDAO,
        budget_dao: BudgetDAO,
        category_dao: CategoryDAO,
        preferences: PreferencesService,
    ):
        self._tx_dao = tx_dao
        self._budget_dao = budget_dao
        self._category_dao = category_dao
        self._preferences = preferences

    def get_summary(self, month: str | None = None) -> PeriodSummary:
        start, end = month_bounds(month or current_month_str())
        return calc.period_summary(self._tx_dao.get_all(), start, end)

    def get_period_summary(self, start: date, end: date) -> PeriodSummary:
        return calc.period_summary(self._tx_dao.get_all(), start, end)

    def get_category_breakdown(
        self, month: str | None = None, type_: str = "expense", limit: int | None = None
    ) -> list[dict]:
        """Return [{category, color_hex, total}, ...] for pie chart, largest first."""
        start, end = month_bounds(month or current_month_str())
        totals = calc.group_by_category(self._tx_dao.get_all(), start, end, type_)
        colors = {c.id: c.color_hex for c in self._category_dao.get_all()}
        return [
            {
                "category": ct.name,
                "color_hex": colors.get(ct.category.id, "#888888"),
                "total": ct.total,
            }
            for ct in calc.rank_categories(totals, limit=limit)
        ]

    def get_top_categories(self, start: date, end: date, limit: int = 5) -> list[CategoryTotal]:
        totals = calc.expenses_by_category(self._tx_dao.get_all(), start, end)
        return calc.rank_categories(totals, limit=limit)

    def get_monthly_totals(self, year: int | None = None) -> list[MonthTotals]:
        return calc.monthly_totals(self._tx_dao.get_all(), year or today().year)

    def get_budget_status(self, month: str | None = None) -> list[BudgetStatus]:
        month = month or current_month_str()
        return calc.budget_status(
            self._tx_dao.get_all(), self._budget_dao.get_by_month(month), month
        )

    def get_insights(self, start: date, end: date, months_back: int = 3) -> SpendingInsights:
        return calc.spending_insights(self._tx_dao.get_all(), start, end, today(), months_back)

    def get_ledger(self, start: date, end: date) -> CashFlowLedger:
        return calc.cash_flow_ledger(self._tx_dao.get_all(), start, end)

    def get_report(
        self,
        kind: str,
        *,
        period: str | None = None,
        year: int | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> str:
        generator = ReportGenerator(self._preferences.load())
        budgets = self._budget_dao.get_all() if kind == REPORT_MONTHLY else ()
        text = generator.generate(
            kind, self._tx_dao.get_all(), budgets,
            period=period, year=year, start=start, end=end,
        )
        logger.info("Generated %s report", kind)
        return text

    def export_csv(self, start: date, end: date) -> list[list[str]]:
        """Return rows suitable for CSV export."""
        ledger = self.get_ledger(start, end)
        rows = [["Date", "Type", "Category", "Description", "Amount", "Balance", "Notes"]]
        for row in ledger.rows:
            tx = row.transaction
            rows.append([
                format_date(tx.date),
                tx.type.value,
                tx.category_name or UNKNOWN_CATEGORY_NAME,
                tx.description,
                str(tx.signed_amount),
                str(row.balance),
                tx.notes,
            ])
        logger.info("Prepared %d rows for CSV export", len(rows) - 1)
        return rows
