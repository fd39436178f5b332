from datetime import date
from decimal import Decimal

import pytest

from models.transaction import PaymentMethod, TransactionType
from models.validation import ValidationError


def test_create_expense(tx_service, food):
    tx = tx_service.create_expense(
        "12.50", "2024-03-05", " Lunch ", food.id,
        essential=True, payment_method="credit_card",
    )
    assert tx.type is TransactionType.EXPENSE
    assert tx.amount == Decimal("12.50")
    assert tx.date == date(2024, 3, 5)
    assert tx.description == "Lunch"
    assert tx.category_name == "Food"
    assert tx.essential
    assert tx.payment_method is PaymentMethod.CREDIT_CARD


def test_create_income(tx_service, salary):
    tx = tx_service.create_income("2500", date(2024, 3, 1), "Paycheck", salary.id, income_source="salary")
    assert tx.is_income
    assert tx.signed_amount == Decimal("2500")
    assert not tx.essential


@pytest.mark.parametrize("amount", ["0", "-1", "ten", "NaN"])
def test_non_positive_amount_rejected(tx_service, food, amount):
    with pytest.raises(ValidationError) as exc:
        tx_service.create_expense(amount, "2024-03-05", "Lunch", food.id)
    assert exc.value.field == "amount"


def test_empty_description_rejected(tx_service, food):
    with pytest.raises(ValidationError) as exc:
        tx_service.create_expense("5", "2024-03-05", "   ", food.id)
    assert exc.value.field == "description"


def test_missing_category_rejected(tx_service):
    with pytest.raises(ValidationError) as exc:
        tx_service.create_expense("5", "2024-03-05", "Lunch", None)
    assert exc.value.field == "category"


def test_category_must_apply_to_type(tx_service, salary):
    with pytest.raises(ValidationError):
        tx_service.create_expense("5", "2024-03-05", "Lunch", salary.id)


def test_invalid_date_rejected(tx_service, food):
    with pytest.raises(ValidationError):
        tx_service.create_expense("5", "03/05/2024", "Lunch", food.id)


def test_update_keeps_type_and_drops_other_variant_fields(tx_service, salary):
    tx = tx_service.create_income("100", "2024-03-01", "Pay", salary.id)
    updated = tx_service.update(
        tx.id, "120", "2024-03-02", "Pay (corrected)", salary.id,
        essential=True, payment_method="cash", income_source="other",
    )
    assert updated.is_income
    assert updated.amount == Decimal("120")
    assert not updated.essential
    assert updated.payment_method is None


def test_update_missing_transaction(tx_service, food):
    with pytest.raises(ValidationError):
        tx_service.update(999, "5", "2024-03-05", "Lunch", food.id)


def test_delete(tx_service, food):
    tx = tx_service.create_expense("5", "2024-03-05", "Lunch", food.id)
    tx_service.delete(tx.id)
    assert tx_service.get_by_id(tx.id) is None


def test_running_balance_ignores_filters(tx_service, food, salary):
    tx_service.create_income("1000", "2024-02-28", "Feb pay", salary.id)
    tx_service.create_income("500", "2024-03-01", "Pay", salary.id)
    tx_service.create_expense("100", "2024-03-05", "Groceries", food.id)
    tx_service.create_expense("50", "2024-03-10", "Takeout", food.id)

    rows = tx_service.get_with_running_balance("2024-03")
    assert [balance for _, balance in rows] == [Decimal("1500"), Decimal("1400"), Decimal("1350")]

    expenses = tx_service.get_with_running_balance("2024-03", type_filter="expense")
    assert [balance for _, balance in expenses] == [Decimal("1400"), Decimal("1350")]

    searched = tx_service.get_with_running_balance("2024-03", search="take")
    assert [(t.description, b) for t, b in searched] == [("Takeout", Decimal("1350"))]


def test_month_totals(tx_service, food, salary):
    tx_service.create_income("100", "2024-03-01", "Pay", salary.id)
    tx_service.create_expense("40", "2024-03-05", "Groceries", food.id)
    tx_service.create_expense("10", "2024-04-05", "Later", food.id)
    totals = tx_service.get_totals("2024-03")
    assert totals == {"income": Decimal("100"), "expense": Decimal("40"), "net": Decimal("60")}
