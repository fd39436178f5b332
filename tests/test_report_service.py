from datetime import date
from decimal import Decimal

from models.preferences import UserPreferences


def _seed(tx_service, budget_service, food, salary, category_dao):
    housing = category_dao.get_by_name("Housing")
    tx_service.create_income("3000", "2024-03-01", "Pay", salary.id)
    tx_service.create_expense("1200", "2024-03-02", "Rent", housing.id, essential=True)
    tx_service.create_expense("300", "2024-03-10", "Groceries", food.id, essential=True)
    tx_service.create_expense("150", "2024-03-20", "Restaurants", food.id)
    budget_service.create(food.id, "2024-03", "400")


def test_summary_and_breakdown(report_service, tx_service, budget_service, food, salary, category_dao):
    _seed(tx_service, budget_service, food, salary, category_dao)

    summary = report_service.get_summary("2024-03")
    assert summary.income == Decimal("3000")
    assert summary.expenses == Decimal("1650")
    assert summary.net == Decimal("1350")
    assert summary.savings_rate == Decimal("0.45")

    breakdown = report_service.get_category_breakdown("2024-03")
    assert [(row["category"], row["total"]) for row in breakdown] == [
        ("Housing", Decimal("1200")), ("Food", Decimal("450")),
    ]
    assert breakdown[1]["color_hex"] == food.color_hex


def test_budget_status_over(report_service, tx_service, budget_service, food, salary, category_dao):
    _seed(tx_service, budget_service, food, salary, category_dao)
    (status,) = report_service.get_budget_status("2024-03")
    assert status.remaining == Decimal("-50")
    assert status.is_over_budget


def test_monthly_report_includes_budgets(report_service, tx_service, budget_service, food, salary, category_dao):
    _seed(tx_service, budget_service, food, salary, category_dao)
    text = report_service.get_report("monthly", period="2024-03")
    assert "Food - Planned: $400.00, Spent: $450.00 (112.5%)" in text
    assert "⚠ OVER BUDGET by $50.00" in text


def test_report_follows_saved_preferences(report_service, prefs_service, tx_service, budget_service,
                                          food, salary, category_dao):
    _seed(tx_service, budget_service, food, salary, category_dao)
    prefs_service.save(UserPreferences(currency_code="EUR", locale="de_DE"))
    text = report_service.get_report("yearly", year=2024)
    assert "Total Income: 3.000,00 €" in text


def test_insights_and_ledger(report_service, tx_service, budget_service, food, salary, category_dao):
    _seed(tx_service, budget_service, food, salary, category_dao)
    start, end = date(2024, 3, 1), date(2024, 3, 31)

    insights = report_service.get_insights(start, end)
    assert insights.essential_expense_ratio == Decimal("1500") / Decimal("1650")
    assert insights.average_monthly_expense == Decimal("1650")

    ledger = report_service.get_ledger(start, end)
    assert ledger.closing_balance == Decimal("1350")


def test_export_csv_rows(report_service, tx_service, budget_service, food, salary, category_dao):
    _seed(tx_service, budget_service, food, salary, category_dao)
    rows = report_service.export_csv(date(2024, 3, 1), date(2024, 3, 31))
    assert rows[0] == ["Date", "Type", "Category", "Description", "Amount", "Balance", "Notes"]
    assert rows[1][:6] == ["2024-03-01", "income", "Salary", "Pay", "3000", "3000"]
    assert rows[2][4:6] == ["-1200", "1800"]


def test_monthly_totals_default_year(report_service):
    assert len(report_service.get_monthly_totals(2024)) == 12
