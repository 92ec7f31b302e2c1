"""Unit tests for date helpers"""

import pytest
from datetime import date, datetime
from woyu_finance.utils.date_utils import add_months, month_bounds, months_between, parse_flexible_date


def test_month_bounds():
    assert month_bounds(2024, 2) == (date(2024, 2, 1), date(2024, 3, 1))
    assert month_bounds(2024, 12) == (date(2024, 12, 1), date(2025, 1, 1))
    with pytest.raises(ValueError):
        month_bounds(2024, 13)


def test_add_months_clamps_day():
    assert add_months(date(2024, 1, 31), 1) == date(2024, 2, 29)
    assert add_months(date(2024, 11, 15), 3) == date(2025, 2, 15)
    assert add_months(date(2024, 3, 15), -3) == date(2023, 12, 15)


def test_months_between_is_inclusive():
    assert months_between(date(2024, 1, 5), date(2024, 3, 1)) == 3
    assert months_between(date(2024, 3, 1), date(2024, 1, 1)) == 1


def test_parse_flexible_date_formats():
    assert parse_flexible_date("2024-03-05") == date(2024, 3, 5)
    assert parse_flexible_date("2024/03/05") == date(2024, 3, 5)
    assert parse_flexible_date("03/05/2024") == date(2024, 3, 5)
    assert parse_flexible_date("2024-03-05 00:00:00") == date(2024, 3, 5)
    assert parse_flexible_date(datetime(2024, 3, 5, 12, 0)) == date(2024, 3, 5)


def test_parse_excel_serial_date():
    assert parse_flexible_date(45356) == date(2024, 3, 5)


def test_parse_flexible_date_rejects_garbage():
    assert parse_flexible_date("not a date") is None
    assert parse_flexible_date("") is None
    assert parse_flexible_date(None) is None
    assert parse_flexible_date(float("nan")) is None
