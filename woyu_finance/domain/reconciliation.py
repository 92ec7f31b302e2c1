"""Paid-amount aggregation and status derivation for payment items"""

from datetime import date
from decimal import Decimal
from typing import Iterable, Optional

from woyu_finance.domain.models import PaymentStatus

ZERO = Decimal("0")


def sum_payments(amounts: Iterable) -> Decimal:
    """Total of payment record amounts (caller passes only non-deleted records)"""
    return sum((Decimal(a) for a in amounts), ZERO)


def classify_status(
    paid: Decimal,
    total: Decimal,
    due_date: Optional[date] = None,
    today: Optional[date] = None,
) -> str:
    """
    Map paid vs. total to a payment status.

    - paid >= total      -> paid
    - 0 < paid < total   -> partial
    - paid == 0          -> overdue if the due date has passed, else pending

    The database-side CASE in services.payments.reconcile_item mirrors this.
    """
    paid = Decimal(paid)
    total = Decimal(total)

    if paid >= total:
        return PaymentStatus.PAID
    if paid > ZERO:
        return PaymentStatus.PARTIAL
    if due_date is not None and due_date < (today or date.today()):
        return PaymentStatus.OVERDUE
    return PaymentStatus.PENDING


def remaining_balance(paid: Decimal, total: Decimal) -> Decimal:
    return max(Decimal(total) - Decimal(paid), ZERO)


def can_accept_payment(paid: Decimal, total: Decimal, amount: Decimal) -> bool:
    """A payment is accepted only if it keeps paid <= total"""
    return Decimal(amount) > ZERO and Decimal(paid) + Decimal(amount) <= Decimal(total)


def item_due_date(start_date: Optional[date], end_date: Optional[date]) -> Optional[date]:
    """Items fall due on their end date; single payments on their start date"""
    return end_date or start_date
