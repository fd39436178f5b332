import dataclasses
import logging

from models.budget import Budget
from models.category import Category
from models.report import BudgetStatus
from models.validation import DuplicateBudgetError, ValidationError, require_month, to_amount
from database.budget_dao import BudgetDAO
from database.transaction_dao import TransactionDAO
from database.category_dao import CategoryDAO
from services import financial_calculator as calc
from utils.date_helpers import current_month_str, prev_month

logger = logging.getLogger(__name__)


class BudgetService:
    def __init__(
        self,
        budget_dao: BudgetDAO,
        tx_dao: TransactionDAO,
        category_dao: CategoryDAO,
    ):
        self._budget_dao = budget_dao
        self._tx_dao = tx_dao
        self._category_dao = category_dao

    def get_all(self) -> list[Budget]:
        return self._budget_dao.get_all()

    def get_budgets(self, month: str | None = None) -> list[Budget]:
        """Budgets for the month with the spent hint filled in from transactions."""
        month = require_month(month or current_month_str())
        budgets = self._budget_dao.get_by_month(month)
        statuses = calc.budget_status(self._tx_dao.get_all(), budgets, month)
        return [dataclasses.replace(s.budget, spent_amount=s.actual_spent) for s in statuses]

    def get_budget_status(self, month: str | None = None) -> list[BudgetStatus]:
        month = require_month(month or current_month_str())
        return calc.budget_status(
            self._tx_dao.get_all(), self._budget_dao.get_by_month(month), month
        )

    def get_over_budget(self, month: str | None = None) -> list[BudgetStatus]:
        return [s for s in self.get_budget_status(month) if s.is_over_budget]

    def create(self, category_id: int, month: str, planned_amount, notes: str = "") -> Budget:
        month = require_month(month)
        amount = to_amount(planned_amount, field="planned_amount")
        category = self._require_budget_category(category_id)
        if self._budget_dao.get_by_category_month(category.id, month):
            logger.info("Rejected duplicate budget for %s in %s", category.name, month)
            raise DuplicateBudgetError(category.name, month)
        budget = self._budget_dao.create(
            category.id, month, amount, notes.strip(), category_name=category.name
        )
        logger.debug("Created budget %s for %s in %s", budget.id, category.name, month)
        return budget

    def update(self, budget_id: int, planned_amount, notes: str = "") -> Budget:
        if self._budget_dao.get_by_id(budget_id) is None:
            raise ValidationError("Budget not found.", field="budget")
        amount = to_amount(planned_amount, field="planned_amount")
        return self._budget_dao.update(budget_id, amount, notes.strip())

    def delete(self, budget_id: int):
        self._budget_dao.delete(budget_id)

    def copy_from_previous_month(self, to_month: str) -> int:
        to_month = require_month(to_month)
        from_month = prev_month(to_month)
        copied = self._budget_dao.copy_month(from_month, to_month)
        logger.info("Copied %d budgets from %s to %s", copied, from_month, to_month)
        return copied

    def get_expense_categories(self) -> list[Category]:
        """Return categories valid for budgeting (expense or both)."""
        return self._category_dao.get_for_transaction_type("expense")

    def _require_budget_category(self, category_id) -> Category:
        category = self._category_dao.get_by_id(category_id) if category_id is not None else None
        if category is None:
            raise ValidationError("Please select a category.", field="category")
        if not category.is_applicable_to("expense"):
            raise ValidationError(
                f"'{category.name}' is an income category and cannot be budgeted.",
                field="category",
            )
        return category
