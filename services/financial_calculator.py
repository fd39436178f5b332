"""Aggregation engine: pure functions over transaction and budget snapshots.

Every function takes the collections it needs as arguments, never mutates
them and keeps no state between calls. Date ranges are inclusive on both
ends. ``None`` or empty input yields the additive identity (0 or an empty
mapping), and degenerate ratios (zero income, zero-length ranges) are 0.
"""
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from models.budget import Budget
from models.report import (
    ZERO,
    BudgetStatus,
    CashFlowLedger,
    CategoryRef,
    CategoryTotal,
    LedgerRow,
    MonthTotals,
    PeriodSummary,
    SpendingInsights,
)
from models.transaction import Transaction, TransactionType
from utils.constants import UNKNOWN_CATEGORY_NAME
from utils.date_helpers import (
    add_months,
    days_inclusive,
    month_bounds,
    months_spanned,
    year_months,
)


def in_range(tx: Transaction, start: date, end: date) -> bool:
    return start <= tx.date <= end


def filter_transactions(
    transactions: Optional[Iterable[Transaction]],
    start: date,
    end: date,
    type_: Optional[TransactionType] = None,
) -> list[Transaction]:
    """Transactions dated within [start, end], optionally of one type, in input order."""
    return [
        t for t in (transactions or ())
        if in_range(t, start, end) and (type_ is None or t.type is type_)
    ]


def _sum(transactions: Iterable[Transaction]) -> Decimal:
    return sum((t.amount for t in transactions), ZERO)


def total_income(transactions, start: date, end: date) -> Decimal:
    return _sum(filter_transactions(transactions, start, end, TransactionType.INCOME))


def total_expenses(transactions, start: date, end: date) -> Decimal:
    return _sum(filter_transactions(transactions, start, end, TransactionType.EXPENSE))


def net_savings(transactions, start: date, end: date) -> Decimal:
    return total_income(transactions, start, end) - total_expenses(transactions, start, end)


def savings_rate(transactions, start: date, end: date) -> Decimal:
    """Net savings as a ratio of income; 0 when there is no income."""
    income = total_income(transactions, start, end)
    if income == 0:
        return ZERO
    return (income - total_expenses(transactions, start, end)) / income


def period_summary(transactions, start: date, end: date) -> PeriodSummary:
    income = total_income(transactions, start, end)
    expenses = total_expenses(transactions, start, end)
    rate = (income - expenses) / income if income != 0 else ZERO
    return PeriodSummary(start, end, income, expenses, income - expenses, rate)


def group_by_category(
    transactions, start: date, end: date, type_: TransactionType
) -> dict[CategoryRef, Decimal]:
    """Summed amount per category for one type; categories without matches are absent.

    Keys are in order of first occurrence.
    """
    totals: dict[CategoryRef, Decimal] = {}
    for t in filter_transactions(transactions, start, end, TransactionType(type_)):
        key = CategoryRef.of(t.category_id, t.category_name)
        totals[key] = totals.get(key, ZERO) + t.amount
    return totals


def income_by_category(transactions, start: date, end: date) -> dict[CategoryRef, Decimal]:
    return group_by_category(transactions, start, end, TransactionType.INCOME)


def expenses_by_category(transactions, start: date, end: date) -> dict[CategoryRef, Decimal]:
    return group_by_category(transactions, start, end, TransactionType.EXPENSE)


def rank_categories(
    totals: dict[CategoryRef, Decimal], limit: Optional[int] = None
) -> list[CategoryTotal]:
    """Descending by amount; equal amounts keep first-seen order."""
    ranked = sorted(totals.items(), key=lambda item: item[1], reverse=True)
    if limit is not None:
        ranked = ranked[:max(limit, 0)]
    return [CategoryTotal(ref, amount) for ref, amount in ranked]


def budget_status(
    transactions, budgets: Optional[Sequence[Budget]], period: str
) -> list[BudgetStatus]:
    """Recompute spending for every budget of ``period``.

    Budgets for other periods are left out. A budget whose category no longer
    exists is still evaluated and labelled as unknown.
    """
    start, end = month_bounds(period)
    spent = expenses_by_category(transactions, start, end)
    statuses = []
    for b in budgets or ():
        if b.month != period:
            continue
        actual = spent.get(CategoryRef(b.category_id), ZERO)
        statuses.append(BudgetStatus(
            budget=b,
            category_name=b.category_name or UNKNOWN_CATEGORY_NAME,
            planned=b.planned_amount,
            actual_spent=actual,
            remaining=b.planned_amount - actual,
        ))
    return statuses


def average_daily_expense(transactions, start: date, end: date) -> Decimal:
    days = days_inclusive(start, end)
    if days <= 0:
        return ZERO
    return total_expenses(transactions, start, end) / days


def average_monthly_expense(transactions, start: date, end: date) -> Decimal:
    """Expenses divided by the whole calendar months touched by the range.

    Partial first and last months count as full months.
    """
    total = total_expenses(transactions, start, end)
    if (start.year, start.month) == (end.year, end.month):
        return total
    months = months_spanned(start, end)
    if months <= 0:
        return ZERO
    return total / months


def essential_expense_ratio(transactions, start: date, end: date) -> Decimal:
    expenses = filter_transactions(transactions, start, end, TransactionType.EXPENSE)
    total = _sum(expenses)
    if total == 0:
        return ZERO
    return _sum(t for t in expenses if t.essential) / total


def running_balance(transactions, as_of: date) -> Decimal:
    """Signed sum of every transaction dated strictly before ``as_of``."""
    return sum((t.signed_amount for t in (transactions or ()) if t.date < as_of), ZERO)


def monthly_totals(transactions, year: int) -> list[MonthTotals]:
    """Twelve rows for the calendar year, whether or not a month has data."""
    rows = []
    for month in year_months(year):
        start, end = month_bounds(month)
        rows.append(MonthTotals(
            month=month,
            income=total_income(transactions, start, end),
            expenses=total_expenses(transactions, start, end),
        ))
    return rows


def cash_flow_ledger(transactions, start: date, end: date) -> CashFlowLedger:
    """Transactions in range, oldest first, each with the balance after it."""
    opening = running_balance(transactions, start)
    ordered = sorted(filter_transactions(transactions, start, end), key=lambda t: t.date)
    balance = opening
    rows = []
    for t in ordered:
        balance += t.signed_amount
        rows.append(LedgerRow(t, balance))
    return CashFlowLedger(start, end, opening, tuple(rows))


def projected_monthly_savings(transactions, months_back: int, today: date) -> Decimal:
    """Average monthly net savings over the last ``months_back`` months up to ``today``."""
    if months_back <= 0:
        return ZERO
    start = add_months(today, -months_back).replace(day=1)
    return net_savings(transactions, start, today) / months_back


def spending_insights(
    transactions, start: date, end: date, today: date, months_back: int = 3
) -> SpendingInsights:
    return SpendingInsights(
        average_daily_expense=average_daily_expense(transactions, start, end),
        average_monthly_expense=average_monthly_expense(transactions, start, end),
        essential_expense_ratio=essential_expense_ratio(transactions, start, end),
        projected_monthly_savings=projected_monthly_savings(transactions, months_back, today),
    )
