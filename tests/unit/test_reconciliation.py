"""Unit tests for paid-amount aggregation and status derivation"""

from datetime import date
from decimal import Decimal
from woyu_finance.domain.reconciliation import (
    can_accept_payment,
    classify_status,
    item_due_date,
    remaining_balance,
    sum_payments,
)

TODAY = date(2024, 6, 15)


def test_sum_payments():
    assert sum_payments([Decimal("400.00"), "600", 0]) == Decimal("1000.00")
    assert sum_payments([]) == Decimal("0")


def test_status_paid_when_total_covered():
    assert classify_status(Decimal("1000"), Decimal("1000"), date(2024, 1, 1), TODAY) == "paid"


def test_status_partial_ignores_due_date():
    """Partially paid items stay partial even when past due"""
    assert classify_status(Decimal("1"), Decimal("1000"), date(2024, 1, 1), TODAY) == "partial"


def test_status_overdue_only_when_nothing_paid():
    assert classify_status(Decimal("0"), Decimal("1000"), date(2024, 6, 14), TODAY) == "overdue"
    assert classify_status(Decimal("0"), Decimal("1000"), date(2024, 6, 15), TODAY) == "pending"
    assert classify_status(Decimal("0"), Decimal("1000"), None, TODAY) == "pending"


def test_remaining_balance_never_negative():
    assert remaining_balance(Decimal("400"), Decimal("1000")) == Decimal("600")
    assert remaining_balance(Decimal("1000"), Decimal("1000")) == Decimal("0")


def test_can_accept_payment_boundaries():
    assert can_accept_payment(Decimal("400"), Decimal("1000"), Decimal("600"))
    assert not can_accept_payment(Decimal("1000"), Decimal("1000"), Decimal("50"))
    assert not can_accept_payment(Decimal("0"), Decimal("1000"), Decimal("0"))
    assert not can_accept_payment(Decimal("0"), Decimal("1000"), Decimal("-5"))


def test_item_due_date_prefers_end_date():
    assert item_due_date(date(2024, 1, 1), date(2024, 3, 1)) == date(2024, 3, 1)
    assert item_due_date(date(2024, 1, 1), None) == date(2024, 1, 1)
