from decimal import Decimal

import pytest

from models.validation import DuplicateBudgetError, ValidationError


def test_create_budget(budget_service, food):
    budget = budget_service.create(food.id, "2024-03", "200")
    assert budget.category_name == "Food"
    assert budget.planned_amount == Decimal("200")
    assert budget_service.get_all() == [budget]


def test_duplicate_budget_rejected(budget_service, food):
    budget_service.create(food.id, "2024-03", "200")
    with pytest.raises(DuplicateBudgetError):
        budget_service.create(food.id, "2024-03", "300")
    assert len(budget_service.get_all()) == 1


def test_same_category_other_month_allowed(budget_service, food):
    budget_service.create(food.id, "2024-03", "200")
    budget_service.create(food.id, "2024-04", "200")
    assert len(budget_service.get_all()) == 2


@pytest.mark.parametrize("amount", ["0", "-5", "abc", ""])
def test_invalid_planned_amount(budget_service, food, amount):
    with pytest.raises(ValidationError) as exc:
        budget_service.create(food.id, "2024-03", amount)
    assert exc.value.field == "planned_amount"


def test_income_category_cannot_be_budgeted(budget_service, salary):
    with pytest.raises(ValidationError):
        budget_service.create(salary.id, "2024-03", "100")


def test_invalid_month(budget_service, food):
    with pytest.raises(ValidationError):
        budget_service.create(food.id, "2024-13", "100")


def test_status_recomputed_from_transactions(budget_service, tx_service, food):
    budget_service.create(food.id, "2024-03", "200")
    tx_service.create_expense("150", "2024-03-03", "Groceries", food.id)
    tx_service.create_expense("100", "2024-03-20", "Dinner", food.id)
    tx_service.create_expense("75", "2024-04-01", "Next month", food.id)

    (status,) = budget_service.get_budget_status("2024-03")
    assert status.remaining == Decimal("-50")
    assert status.is_over_budget
    assert budget_service.get_over_budget("2024-03") == [status]

    (budget,) = budget_service.get_budgets("2024-03")
    assert budget.spent_amount == Decimal("250")


def test_update_and_delete(budget_service, food):
    budget = budget_service.create(food.id, "2024-03", "200")
    updated = budget_service.update(budget.id, "250", "raised")
    assert updated.planned_amount == Decimal("250")
    assert updated.notes == "raised"

    budget_service.delete(budget.id)
    assert budget_service.get_all() == []


def test_update_missing_budget(budget_service):
    with pytest.raises(ValidationError):
        budget_service.update(999, "10")


def test_copy_from_previous_month_skips_existing(budget_service, category_dao, food):
    housing = category_dao.get_by_name("Housing")
    budget_service.create(food.id, "2024-02", "200")
    budget_service.create(housing.id, "2024-02", "1200")
    budget_service.create(food.id, "2024-03", "300")

    assert budget_service.copy_from_previous_month("2024-03") == 1
    march = {b.category_name: b.planned_amount for b in budget_service.get_budgets("2024-03")}
    assert march == {"Food": Decimal("300"), "Housing": Decimal("1200")}


def test_budget_of_deleted_category_shows_unknown(budget_service, category_service, food):
    budget_service.create(food.id, "2024-03", "200")
    category_service.delete(food.id)
    (status,) = budget_service.get_budget_status("2024-03")
    assert status.category_name == "Unknown"
