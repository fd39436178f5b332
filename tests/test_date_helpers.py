from datetime import date

import pytest

from utils.date_helpers import (
    add_months,
    format_display_date,
    friendly_month,
    month_bounds,
    months_spanned,
    next_month,
    parse_display_date,
    parse_month,
    prev_month,
    year_months,
)


def test_month_bounds_leap_year():
    assert month_bounds("2024-02") == (date(2024, 2, 1), date(2024, 2, 29))
    with pytest.raises(ValueError):
        month_bounds("2024-2x")


def test_parse_month_rejects_garbage():
    assert parse_month("2024-13") is None
    assert parse_month("") is None


def test_month_navigation_wraps_years():
    assert prev_month("2024-01") == "2023-12"
    assert next_month("2024-12") == "2025-01"


def test_add_months_clamps_day():
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2024, 3, 15), -3) == date(2023, 12, 15)


def test_months_spanned():
    assert months_spanned(date(2024, 1, 31), date(2024, 2, 1)) == 2
    assert months_spanned(date(2023, 12, 1), date(2024, 1, 31)) == 2
    assert months_spanned(date(2024, 5, 1), date(2024, 5, 31)) == 1


def test_year_months():
    months = year_months(2024)
    assert months[0] == "2024-01" and months[-1] == "2024-12"


def test_friendly_month():
    assert friendly_month("2024-03") == "March 2024"


@pytest.mark.parametrize("fmt, expected", [
    ("MM/DD/YYYY", "03/05/2024"),
    ("DD/MM/YYYY", "05/03/2024"),
    ("YYYY-MM-DD", "2024-03-05"),
    ("DD.MM.YYYY", "05.03.2024"),
    ("MMM D, YYYY", "Mar 5, 2024"),
])
def test_display_date_formats(fmt, expected):
    assert format_display_date(date(2024, 3, 5), fmt) == expected
    assert format_display_date("2024-03-05", fmt) == expected


def test_parse_display_date_falls_back_to_iso():
    assert parse_display_date("05/03/2024", "DD/MM/YYYY") == date(2024, 3, 5)
    assert parse_display_date("2024-03-05", "DD/MM/YYYY") == date(2024, 3, 5)
    assert parse_display_date("nonsense", "MM/DD/YYYY") is None
