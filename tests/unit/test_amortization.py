"""Unit tests for loan amortization"""

import pytest
from decimal import Decimal
from woyu_finance.domain.amortization import (
    equal_installment_payment,
    generate_amortization_schedule,
    implied_annual_rate,
    monthly_interest,
)
from woyu_finance.domain.exceptions import InvalidInputError


def test_schedule_pays_off():
    schedule = generate_amortization_schedule(100000, 3000, 6)

    assert schedule.outcome == "paid_off"
    assert len(schedule.entries) == 37
    assert schedule.entries[0].interest_portion == Decimal("500.00")
    assert schedule.entries[0].principal_portion == Decimal("2500.00")
    assert schedule.entries[0].remaining_balance == Decimal("97500.00")
    assert schedule.entries[-1].remaining_balance == Decimal("0.00")


def test_schedule_principal_sums_to_principal():
    schedule = generate_amortization_schedule(50000, 2000, 12)
    total_principal = sum(e.principal_portion for e in schedule.entries)

    assert schedule.outcome == "paid_off"
    assert abs(total_principal - Decimal("50000")) <= Decimal("0.01") * len(schedule.entries)


def test_schedule_zero_rate():
    schedule = generate_amortization_schedule(1200, 100, 0)

    assert schedule.outcome == "paid_off"
    assert len(schedule.entries) == 12
    assert schedule.total_interest == Decimal("0")


def test_schedule_payment_too_low():
    """2000/month does not cover 24% interest on 100000"""
    schedule = generate_amortization_schedule(100000, 2000, 24)

    assert schedule.outcome == "payment_too_low"
    assert schedule.entries == []


def test_schedule_at_twelve_percent_pays_off():
    """1000 interest in the first month leaves 1000 of principal per payment, so 2000/month settles"""
    schedule = generate_amortization_schedule(100000, 2000, 12)

    assert schedule.outcome == "paid_off"
    assert len(schedule.entries) == 70
    assert schedule.entries[0].interest_portion == Decimal("1000.00")
    assert schedule.entries[0].principal_portion == Decimal("1000.00")
    assert schedule.entries[-1].payment < Decimal("2000")
    assert schedule.entries[-1].remaining_balance == Decimal("0.00")


def test_schedule_max_periods():
    schedule = generate_amortization_schedule(100000, 600, 6, max_periods=12)

    assert schedule.outcome == "max_periods_reached"
    assert len(schedule.entries) == 12


def test_schedule_head_keeps_outcome():
    schedule = generate_amortization_schedule(100000, 3000, 6)
    head = schedule.head(5)

    assert [e.period for e in head.entries] == [1, 2, 3, 4, 5]
    assert head.outcome == "paid_off"


def test_schedule_rejects_bad_input():
    with pytest.raises(InvalidInputError):
        generate_amortization_schedule(0, 100, 5)
    with pytest.raises(InvalidInputError):
        generate_amortization_schedule(1000, 0, 5)
    with pytest.raises(InvalidInputError):
        generate_amortization_schedule(1000, 100, -1)


def test_monthly_interest():
    assert monthly_interest(100000, 12) == Decimal("1000.00")
    assert monthly_interest(100000, 0) == Decimal("0.00")


def test_equal_installment_payment():
    assert equal_installment_payment(1200, 0, 12) == Decimal("100.00")
    # 100000 over 12 months at 12%/year
    assert equal_installment_payment(100000, 12, 12) == Decimal("8884.88")


def test_implied_annual_rate():
    assert implied_annual_rate(100000, 1000) == Decimal("12.00")
