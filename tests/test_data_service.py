import json
import sqlite3
from decimal import Decimal

import pytest

from models.validation import ValidationError


@pytest.fixture
def populated(tx_service, budget_service, category_service, food, salary):
    pets = category_service.create("Pets", "expense", "", "#AA5500")
    tx_service.create_income("2000", "2024-03-01", "Pay", salary.id, income_source="salary")
    tx_service.create_expense("120", "2024-03-04", "Groceries", food.id, essential=True)
    tx_service.create_expense("45", "2024-03-06", "Vet", pets.id, payment_method="cash")
    budget_service.create(food.id, "2024-03", "300", "weekly")
    return pets


def test_export_json(data_service, populated):
    data = data_service.export_json()
    assert data["export_version"] == 2
    assert len(data["transactions"]) == 3
    assert data["budgets"] == [
        {"category_name": "Food", "month": "2024-03", "planned_amount": "300", "notes": "weekly"},
    ]
    assert any(c["name"] == "Pets" for c in data["categories"])
    # The export is plain JSON.
    json.dumps(data)


def test_replace_import_restores_export(data_service, populated, tx_service, budget_service, category_service):
    data = json.loads(json.dumps(data_service.export_json()))
    category_service.create("Travel", "expense")
    tx_service.create_expense("999", "2024-03-09", "Flight", category_service.find_by_name("Travel").id)

    stats = data_service.import_json(data, "replace")

    assert stats["transactions"] == 3
    assert stats["budgets"] == 1
    assert stats["skipped"] == 0
    assert category_service.find_by_name("Travel").id is None
    assert [t.description for t in tx_service.get_all()] == ["Pay", "Groceries", "Vet"]
    assert tx_service.get_all()[1].essential
    assert budget_service.get_all()[0].planned_amount == Decimal("300")


def test_merge_import_skips_duplicates(data_service, populated, tx_service):
    data = data_service.export_json()
    stats = data_service.import_json(data, "merge")
    assert stats == {"categories": 0, "budgets": 0, "transactions": 0, "skipped": 0}
    assert len(tx_service.get_all()) == 3


def test_import_skips_invalid_rows(data_service, tx_service):
    data = {
        "transactions": [
            {"date": "2024-03-01", "type": "expense", "amount": "10", "description": "ok",
             "category_name": "Food"},
            {"date": "2024-03-01", "type": "expense", "amount": "-10", "description": "negative"},
            {"date": "not a date", "type": "income", "amount": "10", "description": "bad date"},
            {"date": "2024-03-01", "type": "income", "amount": "10", "description": ""},
        ],
        "budgets": [{"category_name": "Food", "month": "March", "planned_amount": "10"}],
    }
    stats = data_service.import_json(data, "merge")
    assert stats["transactions"] == 1
    assert stats["skipped"] == 4
    assert [t.description for t in tx_service.get_all()] == ["ok"]


def test_import_unknown_category_goes_to_uncategorized(data_service, tx_service):
    data = {"transactions": [
        {"date": "2024-03-01", "type": "income", "amount": "10", "description": "Gift",
         "category_name": "No such category"},
    ]}
    data_service.import_json(data, "merge")
    (tx,) = tx_service.get_all()
    assert tx.category_name == "Uncategorized"


def test_import_rejects_unknown_mode(data_service):
    with pytest.raises(ValueError):
        data_service.import_json({}, "append")


@pytest.mark.parametrize("payload", [
    {"transactions": ["oops"]},
    {"categories": [], "budgets": [], "transactions": None},
    {"budgets": {"month": "2024-03"}},
    ["not", "an", "object"],
])
def test_malformed_replace_import_keeps_existing_data(data_service, tx_service, food, payload):
    tx_service.create_expense("12", "2024-03-02", "Lunch", food.id)
    with pytest.raises(ValidationError):
        data_service.import_json(payload, "replace")
    assert len(tx_service.get_all()) == 1


def test_failed_replace_import_rolls_back(data_service, populated, tx_service, budget_service,
                                          category_service, tx_dao, monkeypatch):
    data = data_service.export_json()

    def broken_create(**kwargs):
        raise sqlite3.OperationalError("disk I/O error")

    monkeypatch.setattr(tx_dao, "create", broken_create)
    with pytest.raises(sqlite3.OperationalError):
        data_service.import_json(data, "replace")

    assert len(tx_service.get_all()) == 3
    assert category_service.find_by_name("Pets").id == populated.id
    assert len(budget_service.get_budgets("2024-03")) == 1


def test_csv_zip_round_trip(data_service, populated, tx_service, tmp_path):
    path = tmp_path / "export.zip"
    data_service.export_csv_zip(str(path))

    stats = data_service.import_csv_zip(str(path), "replace")
    assert stats["transactions"] == 3
    essentials = {t.description: t.essential for t in tx_service.get_all()}
    assert essentials == {"Pay": False, "Groceries": True, "Vet": False}


def test_replace_import_restores_preferences(data_service, prefs_service):
    data = {"preferences": {"currency_code": "EUR", "locale": "de_DE", "date_format": "DD.MM.YYYY"}}
    data_service.import_json(data, "replace")
    prefs = prefs_service.load()
    assert (prefs.currency_code, prefs.locale, prefs.date_format) == ("EUR", "de_DE", "DD.MM.YYYY")


def test_write_backup(data_service, populated, tmp_path):
    path = data_service.write_backup(str(tmp_path / "backups"))
    with open(path, encoding="utf-8") as f:
        assert len(json.load(f)["transactions"]) == 3
