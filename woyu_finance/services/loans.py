"""Loan / investment bookkeeping: repayments, risk enrichment, and portfolio stats"""

import logging
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.orm import Session

from woyu_finance.config import settings
from woyu_finance.domain.amortization import (
    equal_installment_payment,
    generate_amortization_schedule,
    implied_annual_rate,
    monthly_interest,
)
from woyu_finance.domain.exceptions import InvalidInputError, NotFoundError
from woyu_finance.domain.models import AmortizationSchedule, to_money
from woyu_finance.domain.risk import is_high_risk, risk_level
from woyu_finance.infrastructure.database.models import LoanInvestmentRecord, LoanPayment
from woyu_finance.infrastructure.database.repositories import LoanRepository

logger = logging.getLogger(__name__)

MONEY_FIELDS = ("principal_amount", "monthly_payment_amount")


def get_record(db: Session, record_id: int) -> LoanInvestmentRecord:
    record = LoanRepository(db).get(record_id)
    if record is None:
        raise NotFoundError("Loan investment record", record_id)
    return record


def describe(record: LoanInvestmentRecord) -> Dict[str, Any]:
    """Derived figures shown next to a record"""
    level = risk_level(record.annual_interest_rate)
    remaining = max(Decimal(record.principal_amount) - Decimal(record.total_paid_amount or 0), Decimal("0"))
    return {
        "risk_level": level.code,
        "risk_label": level.label,
        "is_high_risk": is_high_risk(record.annual_interest_rate),
        "monthly_interest": monthly_interest(record.principal_amount, record.annual_interest_rate),
        "remaining_principal": to_money(remaining),
    }


def _validate(fields: Dict[str, Any]) -> None:
    if Decimal(fields.get("principal_amount") or 0) <= 0:
        raise InvalidInputError("Principal amount must be greater than 0")
    if Decimal(fields.get("annual_interest_rate") or 0) < 0:
        raise InvalidInputError("Annual interest rate cannot be negative")
    start, end = fields.get("start_date"), fields.get("end_date")
    if start is not None and end is not None and end < start:
        raise InvalidInputError("End date cannot be before start date")


def create_record(db: Session, fields: Dict[str, Any]) -> LoanInvestmentRecord:
    _validate(fields)
    values = {k: to_money(v) if k in MONEY_FIELDS and v is not None else v for k, v in fields.items()}
    return LoanRepository(db).create(**values)


def update_record(db: Session, record_id: int, fields: Dict[str, Any]) -> LoanInvestmentRecord:
    record = get_record(db, record_id)
    current = {
        "principal_amount": record.principal_amount,
        "annual_interest_rate": record.annual_interest_rate,
        "start_date": record.start_date,
        "end_date": record.end_date,
    }
    _validate({**current, **fields})
    for name, value in fields.items():
        setattr(record, name, to_money(value) if name in MONEY_FIELDS and value is not None else value)
    db.flush()
    return record


def delete_record(db: Session, record_id: int) -> None:
    get_record(db, record_id).soft_delete()
    db.flush()


def add_payment(db: Session, record_id: int, fields: Dict[str, Any]) -> Tuple[LoanPayment, LoanInvestmentRecord]:
    """
    Record a repayment and recompute total_paid_amount from all repayments.

    A loan is completed once repayments cover its principal.
    """
    repo = LoanRepository(db)
    record = repo.get(record_id, for_update=True)
    if record is None:
        raise NotFoundError("Loan investment record", record_id)

    amount = Decimal(fields["amount"])
    if amount <= 0:
        raise InvalidInputError("Payment amount must be greater than 0")

    payment = repo.add_payment(record_id, **{**fields, "amount": to_money(amount)})

    record.total_paid_amount = to_money(repo.total_paid(record_id))
    if record.record_type == "loan" and record.total_paid_amount >= record.principal_amount:
        record.status = "completed"
    db.flush()

    logger.info(
        "Loan payment recorded",
        extra={"record_id": record_id, "amount": str(amount), "total_paid": str(record.total_paid_amount)},
    )
    return payment, record


def record_schedule(record: LoanInvestmentRecord) -> AmortizationSchedule:
    """Full amortization of the record's principal at its monthly payment"""
    if not record.monthly_payment_amount:
        raise InvalidInputError("Monthly payment amount is required to build a schedule")

    return generate_amortization_schedule(
        record.principal_amount,
        record.monthly_payment_amount,
        record.annual_interest_rate or 0,
    )


def calculate(
    principal,
    annual_rate_percent,
    monthly_payment=None,
    term_months: Optional[int] = None,
    periods: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Loan calculator.

    Either a monthly payment or a term must be given; with only a term the
    level (annuity) payment is derived first.
    """
    if monthly_payment is None:
        if not term_months:
            raise InvalidInputError("Either monthlyPayment or termMonths is required")
        monthly_payment = equal_installment_payment(principal, annual_rate_percent, term_months)

    schedule = generate_amortization_schedule(principal, monthly_payment, annual_rate_percent)
    level = risk_level(annual_rate_percent)
    return {
        "monthly_payment": to_money(monthly_payment),
        "monthly_interest": monthly_interest(principal, annual_rate_percent),
        "implied_annual_rate": implied_annual_rate(principal, monthly_payment),
        "total_periods": len(schedule.entries),
        "total_interest": to_money(schedule.total_interest),
        "risk_level": level.code,
        "risk_label": level.label,
        "schedule": schedule.head(periods or settings.amortization_display_periods),
    }


def stats(db: Session) -> Dict[str, Any]:
    """Portfolio totals plus interest and risk figures over active records"""
    repo = LoanRepository(db)
    totals = repo.totals_by_type()

    active = repo.list_active()
    monthly = sum(
        (monthly_interest(r.principal_amount, r.annual_interest_rate) for r in active),
        Decimal("0"),
    )

    return {
        **{key: to_money(value) for key, value in totals.items()},
        "monthly_interest": to_money(monthly),
        "yearly_interest": to_money(monthly * 12),
        "high_risk_count": sum(1 for r in active if is_high_risk(r.annual_interest_rate)),
        "active_count": len(active),
    }
