"""Plain-text financial reports built from aggregation engine results."""
import logging
from datetime import date
from decimal import Decimal
from typing import Optional, Sequence

from models.budget import Budget
from models.preferences import UserPreferences
from models.report import CategoryRef, CategoryTotal
from models.transaction import Transaction
from services import financial_calculator as calc
from utils.constants import (
    REPORT_CASHFLOW,
    REPORT_MONTHLY,
    REPORT_TYPES,
    REPORT_YEARLY,
    TOP_CATEGORY_COUNT,
    UNKNOWN_CATEGORY_NAME,
)
from utils.currency import MoneyFormat
from utils.date_helpers import (
    MONTH_NAMES,
    format_display_date,
    friendly_month,
    month_bounds,
    short_date,
    year_bounds,
)

logger = logging.getLogger(__name__)

RULE = "=" * 38
LEDGER_RULE = "-" * 96
_LEDGER_ROW = "{:<12} {:<8} {:<18} {:<30} {:>12} {:>12}"


def _clip(text: str, width: int) -> str:
    return text if len(text) <= width else text[:width - 1] + "…"


class ReportGenerator:
    """Renders monthly, yearly and cash-flow reports.

    Output depends only on the inputs and the currency, locale and date
    format of the preferences it was built with.
    """

    def __init__(self, preferences: Optional[UserPreferences] = None):
        prefs = preferences or UserPreferences()
        self._money = MoneyFormat.create(prefs.currency_code, prefs.locale)
        self._date_format = prefs.date_format

    def generate(
        self,
        kind: str,
        transactions: Sequence[Transaction],
        budgets: Sequence[Budget] = (),
        *,
        period: Optional[str] = None,
        year: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> str:
        """Dispatch on report kind: 'monthly' needs ``period``, 'yearly' needs
        ``year``, 'cashflow' needs ``start`` and ``end``."""
        logger.debug("Generating %s report over %d transactions", kind, len(transactions or ()))
        if kind == REPORT_MONTHLY:
            if period is None:
                raise ValueError("A monthly report needs a period (YYYY-MM).")
            return self.monthly_summary(transactions, budgets, period)
        if kind == REPORT_YEARLY:
            if year is None:
                raise ValueError("A yearly report needs a year.")
            return self.yearly_summary(transactions, year)
        if kind == REPORT_CASHFLOW:
            if start is None or end is None:
                raise ValueError("A cash flow report needs a start and end date.")
            return self.cash_flow(transactions, start, end)
        raise ValueError(f"Unknown report type {kind!r}; expected one of {', '.join(REPORT_TYPES)}.")

    # ── Monthly ──────────────────────────────────────────────────────────────

    def monthly_summary(self, transactions, budgets, period: str) -> str:
        start, end = month_bounds(period)
        lines = [f"Monthly Financial Summary for {friendly_month(period)}", RULE, ""]

        summary = calc.period_summary(transactions, start, end)
        lines += ["INCOME & EXPENSE SUMMARY:"]
        lines += self._totals_block(summary.income, summary.expenses, summary.net, summary.savings_rate)
        lines.append("")

        lines.append("INCOME BREAKDOWN:")
        lines += self._breakdown(
            calc.income_by_category(transactions, start, end),
            summary.income,
            "No income recorded for this period.",
        )
        lines.append("")

        lines.append("EXPENSE BREAKDOWN:")
        lines += self._breakdown(
            calc.expenses_by_category(transactions, start, end),
            summary.expenses,
            "No expenses recorded for this period.",
        )
        lines.append("")

        lines.append("BUDGET STATUS:")
        statuses = calc.budget_status(transactions, budgets, period)
        if not statuses:
            lines.append("No budgets set for this period.")
        for status in statuses:
            line = (
                f"{status.category_name} - Planned: {self._money.money(status.planned)}, "
                f"Spent: {self._money.money(status.actual_spent)}"
            )
            if status.planned > 0:
                line += f" ({self._money.percent(status.percent_spent)})"
            lines.append(line)
            if status.is_over_budget:
                lines.append(f"  ⚠ OVER BUDGET by {self._money.money(-status.remaining)}")
            else:
                lines.append(f"  Remaining: {self._money.money(status.remaining)}")
        lines.append("")
        return "\n".join(lines) + "\n"

    # ── Yearly ───────────────────────────────────────────────────────────────

    def yearly_summary(self, transactions, year: int) -> str:
        start, end = year_bounds(year)
        lines = [f"Yearly Financial Summary for {year}", RULE, ""]

        summary = calc.period_summary(transactions, start, end)
        lines.append("YEARLY SUMMARY:")
        lines += self._totals_block(summary.income, summary.expenses, summary.net, summary.savings_rate)
        lines.append("")

        lines.append("MONTHLY BREAKDOWN:")
        for row in calc.monthly_totals(transactions, year):
            name = MONTH_NAMES[int(row.month[5:]) - 1]
            lines.append(
                f"{name}: Income = {self._money.money(row.income)}, "
                f"Expenses = {self._money.money(row.expenses)}, "
                f"Savings = {self._money.money(row.savings)}"
            )
        lines.append("")

        lines.append("TOP SPENDING CATEGORIES:")
        top = calc.rank_categories(
            calc.expenses_by_category(transactions, start, end), limit=TOP_CATEGORY_COUNT
        )
        if not top:
            lines.append("No expenses recorded for this year.")
        lines += [self._category_line(ct, summary.expenses) for ct in top]
        return "\n".join(lines) + "\n"

    # ── Cash flow ────────────────────────────────────────────────────────────

    def cash_flow(self, transactions, start: date, end: date) -> str:
        ledger = calc.cash_flow_ledger(transactions, start, end)
        lines = [
            f"Cash Flow Report: {short_date(start)} to {short_date(end)}",
            RULE,
            "",
            f"Opening Balance: {self._money.money(ledger.opening_balance)}",
            "",
            "TRANSACTIONS:",
            _LEDGER_ROW.format("Date", "Type", "Category", "Description", "Amount", "Balance"),
            LEDGER_RULE,
        ]
        if not ledger.rows:
            lines.append("No transactions in this period.")
        for row in ledger.rows:
            t = row.transaction
            lines.append(_LEDGER_ROW.format(
                format_display_date(t.date, self._date_format),
                t.type.label,
                _clip(t.category_name or UNKNOWN_CATEGORY_NAME, 18),
                _clip(t.description, 30),
                self._money.signed(t.signed_amount),
                self._money.money(row.balance),
            ))
        lines += [
            "",
            f"Closing Balance: {self._money.money(ledger.closing_balance)}",
            f"Net Change: {self._money.money(ledger.net_change)}",
        ]
        return "\n".join(lines) + "\n"

    # ── Helpers ──────────────────────────────────────────────────────────────

    def _totals_block(self, income, expenses, net, rate) -> list[str]:
        return [
            f"Total Income: {self._money.money(income)}",
            f"Total Expenses: {self._money.money(expenses)}",
            f"Net Savings: {self._money.money(net)}",
            f"Savings Rate: {self._money.percent(rate, places=2)}",
        ]

    def _breakdown(self, totals: dict[CategoryRef, Decimal], overall: Decimal, empty: str) -> list[str]:
        if not totals:
            return [empty]
        return [self._category_line(ct, overall) for ct in calc.rank_categories(totals)]

    def _category_line(self, ct: CategoryTotal, overall: Decimal) -> str:
        line = f"{ct.name}: {self._money.money(ct.total)}"
        # Share of the overall total for the type; omitted when that total is zero.
        if overall > 0:
            line += f" ({self._money.percent(ct.total / overall)})"
        return line
