import logging
from decimal import Decimal

from models.category import Category
from models.report import ZERO
from models.transaction import IncomeSource, PaymentMethod, Transaction, TransactionType
from models.validation import ValidationError, require_month, require_text, to_amount, to_date
from database.transaction_dao import TransactionDAO
from database.category_dao import CategoryDAO
from services import financial_calculator as calc
from utils.date_helpers import format_date, month_bounds

logger = logging.getLogger(__name__)


class TransactionService:
    def __init__(self, tx_dao: TransactionDAO, category_dao: CategoryDAO):
        self._dao = tx_dao
        self._category_dao = category_dao

    def get_all(self) -> list[Transaction]:
        return self._dao.get_all()

    def get_by_id(self, tx_id: int) -> Transaction | None:
        return self._dao.get_by_id(tx_id)

    def get_for_month(
        self,
        month: str | None = None,
        type_filter: str | None = None,
        search: str | None = None,
    ) -> list[Transaction]:
        return self._dao.get_filtered(month, type_filter, search)

    def get_with_running_balance(
        self,
        month: str,
        type_filter: str | None = None,
        search: str | None = None,
    ) -> list[tuple[Transaction, Decimal]]:
        """Returns the month's transactions paired with running balance for display.

        The balance carries everything dated before the month and every
        transaction of the month, so filtering never changes the figures shown.
        """
        month = require_month(month)
        start, end = month_bounds(month)
        all_tx = self._dao.get_all()
        ledger = calc.cash_flow_ledger(all_tx, start, end)
        balance_map = {row.transaction.id: row.balance for row in ledger.rows}
        filtered = self._dao.get_filtered(month, type_filter, search)
        return [(tx, balance_map.get(tx.id, ZERO)) for tx in filtered]

    def get_totals(self, month: str) -> dict:
        start, end = month_bounds(require_month(month))
        summary = calc.period_summary(self._dao.get_all(), start, end)
        return {"income": summary.income, "expense": summary.expenses, "net": summary.net}

    def create_income(
        self,
        amount,
        date,
        description: str,
        category_id: int | None,
        notes: str = "",
        income_source: str | None = None,
    ) -> Transaction:
        return self._create(
            TransactionType.INCOME, amount, date, description, category_id, notes,
            income_source=self._enum_or_none(IncomeSource, income_source, "income_source"),
        )

    def create_expense(
        self,
        amount,
        date,
        description: str,
        category_id: int | None,
        notes: str = "",
        essential: bool = False,
        payment_method: str | None = None,
    ) -> Transaction:
        return self._create(
            TransactionType.EXPENSE, amount, date, description, category_id, notes,
            essential=bool(essential),
            payment_method=self._enum_or_none(PaymentMethod, payment_method, "payment_method"),
        )

    def update(
        self,
        tx_id: int,
        amount,
        date,
        description: str,
        category_id: int | None,
        notes: str = "",
        essential: bool = False,
        payment_method: str | None = None,
        income_source: str | None = None,
    ) -> Transaction:
        """Edit a transaction. Its type is fixed; the variant fields of the
        other type are ignored."""
        current = self._dao.get_by_id(tx_id)
        if current is None:
            raise ValidationError("Transaction not found.", field="transaction")
        amount = to_amount(amount)
        d = to_date(date)
        description = require_text(description, "Description", "description")
        category = self._require_category(category_id, current.type)
        if current.is_income:
            essential, payment_method = False, None
            income_source = self._enum_or_none(IncomeSource, income_source, "income_source")
        else:
            income_source = None
            payment_method = self._enum_or_none(PaymentMethod, payment_method, "payment_method")
        return self._dao.update(
            tx_id, amount, format_date(d), description, category.id, notes.strip(),
            bool(essential),
            payment_method.value if payment_method else None,
            income_source.value if income_source else None,
        )

    def delete(self, tx_id: int):
        self._dao.delete(tx_id)

    def _create(
        self,
        type_: TransactionType,
        amount,
        date,
        description: str,
        category_id: int | None,
        notes: str,
        essential: bool = False,
        payment_method: PaymentMethod | None = None,
        income_source: IncomeSource | None = None,
    ) -> Transaction:
        try:
            amount = to_amount(amount)
            d = to_date(date)
            description = require_text(description, "Description", "description")
            category = self._require_category(category_id, type_)
        except ValidationError as e:
            logger.info("Rejected %s transaction: %s", type_.value, e.message)
            raise
        tx = self._dao.create(
            type_=type_.value,
            amount=amount,
            date=format_date(d),
            description=description,
            category_id=category.id,
            notes=notes.strip(),
            essential=essential,
            payment_method=payment_method.value if payment_method else None,
            income_source=income_source.value if income_source else None,
        )
        logger.debug("Created %s transaction %s", type_.value, tx.id)
        return tx

    def _require_category(self, category_id, type_: TransactionType) -> Category:
        category = self._category_dao.get_by_id(category_id) if category_id is not None else None
        if category is None:
            raise ValidationError("Please select a category.", field="category")
        if not category.is_applicable_to(type_):
            raise ValidationError(
                f"'{category.name}' cannot be used for {type_.value} transactions.",
                field="category",
            )
        return category

    @staticmethod
    def _enum_or_none(enum_cls, value, field: str):
        if value in (None, ""):
            return None
        try:
            return enum_cls(value)
        except ValueError:
            raise ValidationError(f"Invalid value: {value}", field=field)
