from datetime import date
from decimal import Decimal

from conftest import make_tx
from models.budget import Budget
from models.report import CategoryRef
from services import financial_calculator as calc

JAN_1, JAN_31 = date(2024, 1, 1), date(2024, 1, 31)


def _sample():
    return [
        make_tx("income", "1000", "2024-01-05", category_id=10, category_name="Salary"),
        make_tx("expense", "200", "2024-01-10", category_id=20, category_name="Food", essential=True),
        make_tx("expense", "50", "2024-01-20", category_id=30, category_name="Fun"),
        make_tx("income", "300", "2024-02-03", category_id=10, category_name="Salary"),
        make_tx("expense", "100", "2024-02-15", category_id=20, category_name="Food"),
    ]


def test_totals_use_inclusive_bounds():
    txs = [
        make_tx("income", "10", "2024-01-01"),
        make_tx("income", "20", "2024-01-31"),
        make_tx("income", "40", "2024-02-01"),
    ]
    assert calc.total_income(txs, JAN_1, JAN_31) == Decimal("30")


def test_total_income_is_additive_over_adjacent_ranges():
    txs = _sample()
    a = calc.total_income(txs, date(2024, 1, 1), date(2024, 1, 20))
    b = calc.total_income(txs, date(2024, 1, 21), date(2024, 2, 29))
    assert a + b == calc.total_income(txs, date(2024, 1, 1), date(2024, 2, 29))


def test_net_savings_is_income_minus_expenses():
    txs = _sample()
    start, end = date(2024, 1, 1), date(2024, 2, 29)
    assert calc.net_savings(txs, start, end) == (
        calc.total_income(txs, start, end) - calc.total_expenses(txs, start, end)
    )
    assert calc.net_savings(txs, JAN_1, JAN_31) == Decimal("750")


def test_empty_and_none_inputs_yield_zero():
    assert calc.total_income(None, JAN_1, JAN_31) == 0
    assert calc.total_expenses([], JAN_1, JAN_31) == 0
    assert calc.expenses_by_category(None, JAN_1, JAN_31) == {}
    assert calc.running_balance(None, JAN_31) == 0


def test_savings_rate_zero_without_income():
    txs = [make_tx("expense", "80", "2024-01-10")]
    assert calc.savings_rate(txs, JAN_1, JAN_31) == 0


def test_savings_rate():
    assert calc.savings_rate(_sample(), JAN_1, JAN_31) == Decimal("0.75")


def test_group_by_category_only_contains_matching_categories():
    totals = calc.expenses_by_category(_sample(), JAN_1, JAN_31)
    assert totals == {CategoryRef(20): Decimal("200"), CategoryRef(30): Decimal("50")}
    assert CategoryRef(10) not in totals


def test_group_by_category_keys_on_id_not_name():
    txs = [
        make_tx("expense", "5", "2024-01-02", category_id=20, category_name="Food"),
        make_tx("expense", "7", "2024-01-03", category_id=20, category_name="Groceries"),
    ]
    totals = calc.expenses_by_category(txs, JAN_1, JAN_31)
    assert list(totals.values()) == [Decimal("12")]
    assert next(iter(totals)).name == "Food"


def test_missing_category_is_labelled_unknown():
    txs = [make_tx("expense", "5", "2024-01-02", category_id=None, category_name="")]
    (ref,) = calc.expenses_by_category(txs, JAN_1, JAN_31)
    assert ref.id is None
    assert ref.name == "Unknown"


def test_rank_categories_descending_and_stable():
    totals = {
        CategoryRef(1, "A"): Decimal("10"),
        CategoryRef(2, "B"): Decimal("30"),
        CategoryRef(3, "C"): Decimal("10"),
    }
    ranked = calc.rank_categories(totals)
    assert [ct.name for ct in ranked] == ["B", "A", "C"]
    assert [ct.name for ct in calc.rank_categories(totals, limit=2)] == ["B", "A"]


def test_budget_status_over_budget():
    budget = Budget(
        id=1, category_id=20, category_name="Food", month="2024-03",
        planned_amount=Decimal("200"),
    )
    txs = [
        make_tx("expense", "150", "2024-03-02", category_id=20, category_name="Food"),
        make_tx("expense", "100", "2024-03-28", category_id=20, category_name="Food"),
        make_tx("expense", "999", "2024-04-01", category_id=20, category_name="Food"),
    ]
    (status,) = calc.budget_status(txs, [budget], "2024-03")
    assert status.actual_spent == Decimal("250")
    assert status.remaining == Decimal("-50")
    assert status.is_over_budget


def test_budget_status_ignores_stored_spent_and_other_periods():
    march = Budget(
        id=1, category_id=20, category_name="Food", month="2024-03",
        planned_amount=Decimal("100"), spent_amount=Decimal("90"),
    )
    april = Budget(
        id=2, category_id=20, category_name="Food", month="2024-04",
        planned_amount=Decimal("100"),
    )
    (status,) = calc.budget_status([], [march, april], "2024-03")
    assert status.budget is march
    assert status.actual_spent == 0
    assert status.remaining == Decimal("100")
    assert not status.is_over_budget


def test_budget_status_for_deleted_category():
    budget = Budget(
        id=1, category_id=None, category_name="", month="2024-03",
        planned_amount=Decimal("100"),
    )
    (status,) = calc.budget_status([], [budget], "2024-03")
    assert status.category_name == "Unknown"


def test_average_daily_expense():
    assert calc.average_daily_expense(_sample(), JAN_1, JAN_31) == Decimal("250") / 31
    assert calc.average_daily_expense(_sample(), JAN_31, JAN_1) == 0


def test_average_monthly_expense_counts_partial_months_as_whole():
    txs = _sample()
    # Jan 15 to Feb 15 touches two months.
    assert calc.average_monthly_expense(txs, date(2024, 1, 15), date(2024, 2, 15)) == (
        Decimal("150") / 2
    )
    assert calc.average_monthly_expense(txs, JAN_1, JAN_31) == Decimal("250")


def test_essential_expense_ratio():
    assert calc.essential_expense_ratio(_sample(), JAN_1, JAN_31) == Decimal("0.8")
    assert calc.essential_expense_ratio([], JAN_1, JAN_31) == 0


def test_running_balance_excludes_as_of_day():
    txs = _sample()
    assert calc.running_balance(txs, date(2024, 1, 10)) == Decimal("1000")
    assert calc.running_balance(txs, date(2024, 1, 11)) == Decimal("800")


def test_monthly_totals_has_twelve_rows():
    rows = calc.monthly_totals(_sample(), 2024)
    assert [r.month for r in rows][:3] == ["2024-01", "2024-02", "2024-03"]
    assert len(rows) == 12
    assert rows[1].income == Decimal("300")
    assert rows[1].savings == Decimal("200")
    assert rows[11].income == 0 and rows[11].expenses == 0


def test_cash_flow_ledger_running_balances():
    txs = [
        make_tx("expense", "50", "2024-05-10"),
        make_tx("income", "500", "2024-05-01"),
        make_tx("expense", "100", "2024-05-05"),
    ]
    ledger = calc.cash_flow_ledger(txs, date(2024, 5, 1), date(2024, 5, 31))
    assert ledger.opening_balance == 0
    assert [row.balance for row in ledger.rows] == [Decimal("500"), Decimal("400"), Decimal("350")]
    assert ledger.closing_balance == Decimal("350")
    assert ledger.net_change == Decimal("350")


def test_cash_flow_ledger_carries_opening_balance():
    txs = [
        make_tx("income", "100", "2024-04-30"),
        make_tx("expense", "30", "2024-05-02"),
    ]
    ledger = calc.cash_flow_ledger(txs, date(2024, 5, 1), date(2024, 5, 31))
    assert ledger.opening_balance == Decimal("100")
    assert ledger.closing_balance == Decimal("70")
    assert ledger.net_change == Decimal("-30")


def test_empty_ledger_closes_at_opening_balance():
    ledger = calc.cash_flow_ledger([], JAN_1, JAN_31)
    assert ledger.rows == ()
    assert ledger.closing_balance == ledger.opening_balance == 0


def test_projected_monthly_savings():
    txs = _sample()
    # Nov 1 2023 through Feb 29 2024: income 1300, expenses 350.
    assert calc.projected_monthly_savings(txs, 3, date(2024, 2, 29)) == Decimal("950") / 3
    assert calc.projected_monthly_savings(txs, 0, date(2024, 2, 29)) == 0


def test_inputs_are_not_mutated():
    txs = _sample()
    before = list(txs)
    calc.cash_flow_ledger(txs, JAN_1, date(2024, 2, 29))
    calc.rank_categories(calc.expenses_by_category(txs, JAN_1, JAN_31))
    assert txs == before
