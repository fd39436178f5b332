from datetime import date
from decimal import Decimal

import pytest

from conftest import make_tx
from models.budget import Budget
from models.preferences import UserPreferences
from services.report_generator import ReportGenerator


def _march():
    return [
        make_tx("income", "100.00", "2024-03-04", description="Paycheck"),
        make_tx("expense", "40.00", "2024-03-09", description="Lunch"),
    ]


def test_monthly_summary_totals():
    text = ReportGenerator().monthly_summary(_march(), [], "2024-03")
    lines = text.splitlines()
    assert lines[0] == "Monthly Financial Summary for March 2024"
    assert "Total Income: $100.00" in lines
    assert "Total Expenses: $40.00" in lines
    assert "Net Savings: $60.00" in lines
    assert "Savings Rate: 60.00%" in lines
    assert "No budgets set for this period." in lines


def test_monthly_summary_breakdowns_show_share():
    lines = ReportGenerator().monthly_summary(_march(), [], "2024-03").splitlines()
    income_at = lines.index("INCOME BREAKDOWN:")
    expense_at = lines.index("EXPENSE BREAKDOWN:")
    assert lines[income_at + 1] == "X: $100.00 (100.0%)"
    assert lines[expense_at + 1] == "X: $40.00 (100.0%)"


def test_monthly_summary_empty_period():
    lines = ReportGenerator().monthly_summary([], [], "2024-03").splitlines()
    assert "Savings Rate: 0.00%" in lines
    assert "No income recorded for this period." in lines
    assert "No expenses recorded for this period." in lines


def test_monthly_summary_budget_lines():
    budgets = [
        Budget(id=1, category_id=20, category_name="Food", month="2024-03",
               planned_amount=Decimal("200")),
        Budget(id=2, category_id=30, category_name="Fun", month="2024-03",
               planned_amount=Decimal("80")),
    ]
    txs = [make_tx("expense", "250", "2024-03-10", category_id=20, category_name="Food")]
    lines = ReportGenerator().monthly_summary(txs, budgets, "2024-03").splitlines()

    food_at = lines.index("Food - Planned: $200.00, Spent: $250.00 (125.0%)")
    assert lines[food_at + 1] == "  ⚠ OVER BUDGET by $50.00"
    fun_at = lines.index("Fun - Planned: $80.00, Spent: $0.00 (0.0%)")
    assert lines[fun_at + 1] == "  Remaining: $80.00"


def test_yearly_summary():
    lines = ReportGenerator().yearly_summary(_march(), 2024).splitlines()
    assert lines[0] == "Yearly Financial Summary for 2024"
    assert "March: Income = $100.00, Expenses = $40.00, Savings = $60.00" in lines
    assert "January: Income = $0.00, Expenses = $0.00, Savings = $0.00" in lines
    top_at = lines.index("TOP SPENDING CATEGORIES:")
    assert lines[top_at + 1] == "X: $40.00 (100.0%)"


def test_yearly_summary_lists_top_five_categories():
    spending = [
        ("Rent", "300"), ("Food", "200"), ("Travel", "200"),
        ("Gifts", "50"), ("Fuel", "150"), ("Books", "100"),
    ]
    txs = [
        make_tx("expense", amount, date(2024, 1 + i, 10), category_id=i + 1, category_name=name)
        for i, (name, amount) in enumerate(spending)
    ]
    lines = ReportGenerator().yearly_summary(txs, 2024).splitlines()
    top_at = lines.index("TOP SPENDING CATEGORIES:")
    assert lines[top_at + 1:] == [
        "Rent: $300.00 (30.0%)",
        "Food: $200.00 (20.0%)",
        "Travel: $200.00 (20.0%)",
        "Fuel: $150.00 (15.0%)",
        "Books: $100.00 (10.0%)",
    ]


def test_cash_flow_report():
    txs = [
        make_tx("income", "500", "2024-05-01", description="Pay"),
        make_tx("expense", "100", "2024-05-05", description="Rent"),
        make_tx("expense", "50", "2024-05-10", description="Food"),
    ]
    text = ReportGenerator().cash_flow(txs, date(2024, 5, 1), date(2024, 5, 31))
    lines = text.splitlines()

    assert lines[0] == "Cash Flow Report: May 1, 2024 to May 31, 2024"
    assert "Opening Balance: $0.00" in lines
    rows = [line for line in lines if line.startswith("05/")]
    assert len(rows) == 3
    assert rows[0].startswith("05/01/2024") and rows[0].endswith("$500.00")
    assert "+$500.00" in rows[0]
    assert rows[1].endswith("$400.00") and "-$100.00" in rows[1]
    assert rows[2].endswith("$350.00")
    assert "Closing Balance: $350.00" in lines
    assert "Net Change: $350.00" in lines


def test_cash_flow_uses_preferred_date_format():
    prefs = UserPreferences(date_format="YYYY-MM-DD")
    txs = [make_tx("income", "10", "2024-05-01")]
    text = ReportGenerator(prefs).cash_flow(txs, date(2024, 5, 1), date(2024, 5, 31))
    assert "2024-05-01" in text


def test_unsupported_currency_falls_back_to_usd():
    prefs = UserPreferences(currency_code="XYZ")
    text = ReportGenerator(prefs).monthly_summary(_march(), [], "2024-03")
    assert "Total Income: $100.00" in text


def test_currency_and_locale_applied():
    prefs = UserPreferences(currency_code="EUR", locale="de_DE")
    txs = [make_tx("income", "1234.5", "2024-03-01")]
    text = ReportGenerator(prefs).monthly_summary(txs, [], "2024-03")
    assert "Total Income: 1.234,50 €" in text


def test_generate_dispatch():
    gen = ReportGenerator()
    assert gen.generate("monthly", _march(), period="2024-03").startswith("Monthly")
    assert gen.generate("yearly", _march(), year=2024).startswith("Yearly")
    assert gen.generate(
        "cashflow", _march(), start=date(2024, 3, 1), end=date(2024, 3, 31)
    ).startswith("Cash Flow")


def test_generate_rejects_bad_requests():
    gen = ReportGenerator()
    with pytest.raises(ValueError):
        gen.generate("weekly", _march())
    with pytest.raises(ValueError):
        gen.generate("monthly", _march())
    with pytest.raises(ValueError):
        gen.generate("cashflow", _march(), start=date(2024, 3, 1))
