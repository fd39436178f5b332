from datetime import date
from decimal import Decimal

import pytest

from models.category import Category, CategoryType
from models.report import BudgetStatus, CategoryRef
from models.budget import Budget
from models.transaction import IncomeSource, Transaction, TransactionType
from models.validation import ValidationError, require_month, to_amount


def _tx(**overrides):
    fields = dict(
        id=1, type="expense", amount="9.99", description="Coffee",
        date="2024-03-05", category_id=2,
    )
    fields.update(overrides)
    return Transaction(**fields)


def test_transaction_coerces_fields():
    tx = _tx()
    assert tx.type is TransactionType.EXPENSE
    assert tx.amount == Decimal("9.99")
    assert tx.date == date(2024, 3, 5)
    assert tx.signed_amount == Decimal("-9.99")


def test_transaction_is_frozen():
    tx = _tx()
    with pytest.raises(AttributeError):
        tx.amount = Decimal("1")


@pytest.mark.parametrize("overrides", [
    {"amount": "0"},
    {"amount": "-3"},
    {"description": "  "},
    {"type": "transfer"},
    {"date": "yesterday"},
])
def test_transaction_rejects_invalid_input(overrides):
    with pytest.raises(ValidationError):
        _tx(**overrides)


def test_variant_fields_belong_to_their_type():
    with pytest.raises(ValidationError):
        _tx(type="income", essential=True)
    with pytest.raises(ValidationError):
        _tx(type="expense", income_source="salary")
    income = _tx(type="income", income_source="salary")
    assert income.income_source is IncomeSource.SALARY


@pytest.mark.parametrize("overrides, field", [
    ({"type": "income", "income_source": "lottery"}, "income_source"),
    ({"type": "expense", "payment_method": "barter"}, "payment_method"),
])
def test_unknown_enum_values_name_their_field(overrides, field):
    with pytest.raises(ValidationError) as exc:
        _tx(**overrides)
    assert exc.value.field == field


def test_validation_error_is_value_error():
    with pytest.raises(ValueError):
        to_amount("abc")
    with pytest.raises(ValidationError):
        require_month("2024/03")


def test_category_applicability():
    both = Category(id=1, name="Uncategorized", type="both", is_system=True)
    expense = Category(id=2, name="Food", type=CategoryType.EXPENSE)
    assert both.is_applicable_to("income") and both.is_applicable_to(TransactionType.EXPENSE)
    assert expense.is_applicable_to(TransactionType.EXPENSE)
    assert not expense.is_applicable_to("income")
    assert both.is_uncategorized and not expense.is_uncategorized


def test_category_ref_identity_is_the_id():
    assert CategoryRef(3, "Food") == CategoryRef(3, "Groceries")
    assert CategoryRef(3) != CategoryRef(4)
    assert CategoryRef.of(None, "").name == "Unknown"


def test_budget_status_percent_spent():
    budget = Budget(id=1, category_id=2, category_name="Food", month="2024-03",
                    planned_amount=Decimal("200"))
    status = BudgetStatus(budget, "Food", Decimal("200"), Decimal("50"), Decimal("150"))
    assert status.percent_spent == Decimal("0.25")
    assert not status.is_over_budget
    assert not hasattr(budget, "percentage")
