"""Loan amortization and interest arithmetic"""

from decimal import Decimal

from woyu_finance.domain.exceptions import InvalidInputError
from woyu_finance.domain.models import (
    AmortizationEntry,
    AmortizationOutcome,
    AmortizationSchedule,
    to_money,
)

MAX_PERIODS = 360  # 30 years of monthly payments
SETTLED_THRESHOLD = Decimal("0.01")
ZERO = Decimal("0")


def _monthly_rate(annual_rate_percent) -> Decimal:
    return Decimal(annual_rate_percent) / Decimal(100) / Decimal(12)


def generate_amortization_schedule(
    principal,
    monthly_payment,
    annual_rate_percent,
    max_periods: int = MAX_PERIODS,
) -> AmortizationSchedule:
    """
    Split fixed monthly payments into principal and interest portions.

    Each period:
    - interest = balance * (annual_rate / 100 / 12)
    - principal portion = min(payment - interest, balance)

    Generation stops when the balance drops below 0.01 (paid_off), when the
    payment no longer covers the interest (payment_too_low; the uncovered
    period is not emitted), or after max_periods (max_periods_reached).

    Example:
        principal=100000, payment=3000, rate=6% -> 37 periods, paid_off
        principal=100000, payment=2000, rate=24% -> no periods, payment_too_low
    """
    principal = Decimal(principal)
    monthly_payment = Decimal(monthly_payment)
    annual_rate = Decimal(annual_rate_percent)

    if principal <= ZERO:
        raise InvalidInputError("Principal must be greater than 0")
    if monthly_payment <= ZERO:
        raise InvalidInputError("Monthly payment must be greater than 0")
    if annual_rate < ZERO:
        raise InvalidInputError("Annual interest rate cannot be negative")

    monthly_rate = _monthly_rate(annual_rate)
    balance = principal
    entries = []

    for period in range(1, max_periods + 1):
        interest = balance * monthly_rate
        principal_portion = min(monthly_payment - interest, balance)

        if principal_portion <= ZERO:
            return AmortizationSchedule(entries=entries, outcome=AmortizationOutcome.PAYMENT_TOO_LOW)

        balance -= principal_portion
        entries.append(
            AmortizationEntry(
                period=period,
                principal_portion=to_money(principal_portion),
                interest_portion=to_money(interest),
                payment=to_money(principal_portion + interest),
                remaining_balance=to_money(max(balance, ZERO)),
            )
        )

        if balance < SETTLED_THRESHOLD:
            return AmortizationSchedule(entries=entries, outcome=AmortizationOutcome.PAID_OFF)

    return AmortizationSchedule(entries=entries, outcome=AmortizationOutcome.MAX_PERIODS_REACHED)


def monthly_interest(principal, annual_rate_percent) -> Decimal:
    """Interest accrued in one month on the full principal"""
    if Decimal(principal) <= ZERO or Decimal(annual_rate_percent) <= ZERO:
        return to_money(0)
    return to_money(Decimal(principal) * _monthly_rate(annual_rate_percent))


def equal_installment_payment(principal, annual_rate_percent, term_months: int) -> Decimal:
    """Level monthly payment that retires the principal in term_months (annuity formula)"""
    principal = Decimal(principal)
    if principal <= ZERO or term_months <= 0:
        raise InvalidInputError("Principal and term must be greater than 0")

    rate = _monthly_rate(annual_rate_percent)
    if rate == ZERO:
        return to_money(principal / term_months)

    growth = (1 + rate) ** term_months
    return to_money(principal * rate * growth / (growth - 1))


def implied_annual_rate(principal, monthly_payment) -> Decimal:
    """Annual rate (%) if the monthly payment were pure interest"""
    principal = Decimal(principal)
    monthly_payment = Decimal(monthly_payment)
    if principal <= ZERO or monthly_payment <= ZERO:
        return to_money(0)
    return to_money(monthly_payment * 12 / principal * 100)
