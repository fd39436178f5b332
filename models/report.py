"""Typed results produced by the aggregation engine."""
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Optional

from models.budget import Budget
from models.transaction import Transaction
from utils.constants import UNKNOWN_CATEGORY_NAME

ZERO = Decimal("0")


@dataclass(frozen=True)
class CategoryRef:
    """Grouping key for a category. Identity is the id; the name is only a label."""
    id: Optional[int]
    name: str = field(default=UNKNOWN_CATEGORY_NAME, compare=False)

    @classmethod
    def of(cls, category_id: Optional[int], name: str | None) -> "CategoryRef":
        return cls(category_id, name or UNKNOWN_CATEGORY_NAME)


@dataclass(frozen=True)
class CategoryTotal:
    category: CategoryRef
    total: Decimal

    @property
    def name(self) -> str:
        return self.category.name


@dataclass(frozen=True)
class PeriodSummary:
    start: date
    end: date
    income: Decimal
    expenses: Decimal
    net: Decimal
    savings_rate: Decimal


@dataclass(frozen=True)
class BudgetStatus:
    budget: Budget
    category_name: str
    planned: Decimal
    actual_spent: Decimal
    remaining: Decimal

    @property
    def is_over_budget(self) -> bool:
        return self.remaining < 0

    @property
    def percent_spent(self) -> Decimal:
        """Spent as a ratio of planned (1 = 100%); 0 when nothing is planned."""
        if self.planned <= 0:
            return ZERO
        return self.actual_spent / self.planned


@dataclass(frozen=True)
class MonthTotals:
    month: str          # 'YYYY-MM'
    income: Decimal
    expenses: Decimal

    @property
    def savings(self) -> Decimal:
        return self.income - self.expenses


@dataclass(frozen=True)
class LedgerRow:
    transaction: Transaction
    balance: Decimal


@dataclass(frozen=True)
class CashFlowLedger:
    start: date
    end: date
    opening_balance: Decimal
    rows: tuple[LedgerRow, ...]

    @property
    def closing_balance(self) -> Decimal:
        return self.rows[-1].balance if self.rows else self.opening_balance

    @property
    def net_change(self) -> Decimal:
        return self.closing_balance - self.opening_balance


@dataclass(frozen=True)
class SpendingInsights:
    average_daily_expense: Decimal
    average_monthly_expense: Decimal
    essential_expense_ratio: Decimal
    projected_monthly_savings: Decimal
