import pytest

from models.category import CategoryType
from models.validation import ValidationError


def test_seeded_categories(category_service):
    names = {c.name for c in category_service.get_all()}
    assert {"Uncategorized", "Salary", "Food", "Housing"} <= names


def test_categories_for_transaction_type(category_service):
    expense_names = {c.name for c in category_service.get_for_transaction_type("expense")}
    assert "Food" in expense_names
    assert "Uncategorized" in expense_names
    assert "Salary" not in expense_names


def test_create_category_normalizes_color(category_service):
    cat = category_service.create("  Pets ", "expense", "vet, food", "ff8800")
    assert cat.name == "Pets"
    assert cat.type is CategoryType.EXPENSE
    assert cat.color_hex == "#FF8800"


def test_category_names_unique_case_insensitive(category_service):
    with pytest.raises(ValidationError) as exc:
        category_service.create("food", "expense")
    assert exc.value.field == "name"


@pytest.mark.parametrize("name, type_, color", [
    ("", "expense", "#888888"),
    ("Pets", "transfer", "#888888"),
    ("Pets", "expense", "red"),
])
def test_invalid_category_rejected(category_service, name, type_, color):
    with pytest.raises(ValidationError):
        category_service.create(name, type_, "", color)


def test_update_category(category_service, food):
    updated = category_service.update(food.id, "Groceries", "expense", "weekly shop", "#123456")
    assert updated.name == "Groceries"
    assert category_service.find_by_name("groceries").id == food.id


def test_update_rejects_name_of_other_category(category_service, food):
    with pytest.raises(ValidationError):
        category_service.update(food.id, "Housing", "expense")


def test_reserved_category_cannot_be_renamed(category_service, category_dao):
    uncategorized = category_dao.get_uncategorized()
    with pytest.raises(ValidationError):
        category_service.update(uncategorized.id, "Misc", "both")
    # Color and description stay editable.
    updated = category_service.update(uncategorized.id, "Uncategorized", "both", "catch-all", "#000000")
    assert updated.color_hex == "#000000"


def test_delete_moves_transactions_to_uncategorized(category_service, tx_service, category_dao):
    pets = category_service.create("Pets", "expense")
    tx = tx_service.create_expense("30", "2024-03-03", "Vet", pets.id)

    assert category_service.delete(pets.id) == 1
    assert category_dao.get_by_id(pets.id) is None
    moved = tx_service.get_by_id(tx.id)
    assert moved.category_id == category_dao.get_uncategorized().id
    assert moved.category_name == "Uncategorized"


def test_uncategorized_cannot_be_deleted(category_service, category_dao):
    with pytest.raises(ValidationError):
        category_service.delete(category_dao.get_uncategorized().id)


def test_delete_missing_category_is_noop(category_service):
    assert category_service.delete(9999) == 0


def test_find_by_name_miss_returns_unknown(category_service):
    ref = category_service.find_by_name("Nope")
    assert ref.id is None
    assert ref.name == "Unknown"
    assert category_service.find_by_name(None).name == "Unknown"


def test_get_all_returns_a_copy(category_service):
    first = category_service.get_all()
    first.clear()
    assert category_service.get_all()
