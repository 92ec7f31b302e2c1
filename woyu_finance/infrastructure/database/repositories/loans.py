"""Data access layer for loan and investment records"""

from decimal import Decimal
from typing import Any, Dict, List, Optional
from sqlalchemy import case, func
from sqlalchemy.orm import Session

from woyu_finance.infrastructure.database.models import LoanInvestmentRecord, LoanPayment
from woyu_finance.infrastructure.database.repositories.base import exclude_deleted


class LoanRepository:
    """Repository for loans, investments, and their repayments"""

    def __init__(self, db: Session):
        self.db = db

    def list_records(self, record_type: Optional[str] = None, status: Optional[str] = None) -> List[LoanInvestmentRecord]:
        query = exclude_deleted(self.db.query(LoanInvestmentRecord), LoanInvestmentRecord)
        if record_type:
            query = query.filter(LoanInvestmentRecord.record_type == record_type)
        if status:
            query = query.filter(LoanInvestmentRecord.status == status)
        return query.order_by(LoanInvestmentRecord.start_date.desc(), LoanInvestmentRecord.id.desc()).all()

    def get(self, record_id: int, for_update: bool = False) -> Optional[LoanInvestmentRecord]:
        query = exclude_deleted(self.db.query(LoanInvestmentRecord), LoanInvestmentRecord).filter(
            LoanInvestmentRecord.id == record_id
        )
        if for_update:
            query = query.with_for_update()
        return query.first()

    def create(self, **fields: Any) -> LoanInvestmentRecord:
        record = LoanInvestmentRecord(**fields)
        self.db.add(record)
        self.db.flush()
        return record

    def list_payments(self, record_id: int) -> List[LoanPayment]:
        return (
            self.db.query(LoanPayment)
            .filter(LoanPayment.record_id == record_id)
            .order_by(LoanPayment.payment_date.desc(), LoanPayment.id.desc())
            .all()
        )

    def add_payment(self, record_id: int, **fields: Any) -> LoanPayment:
        payment = LoanPayment(record_id=record_id, **fields)
        self.db.add(payment)
        self.db.flush()
        return payment

    def total_paid(self, record_id: int) -> Decimal:
        total = (
            self.db.query(func.coalesce(func.sum(LoanPayment.amount), 0))
            .filter(LoanPayment.record_id == record_id)
            .scalar()
        )
        return Decimal(str(total))

    def totals_by_type(self) -> Dict[str, Decimal]:
        """Principal sums per record type, overall and for active records"""
        record = LoanInvestmentRecord
        is_loan = record.record_type == "loan"
        is_investment = record.record_type == "investment"
        active = record.status == "active"

        query = self.db.query(
            _principal_sum(is_loan),
            _principal_sum(is_loan & active),
            _principal_sum(is_investment),
            _principal_sum(is_investment & active),
        )
        row = exclude_deleted(query, record).filter(record.status != "cancelled").one()

        keys = ("total_loan_amount", "active_loan_amount", "total_investment_amount", "active_investment_amount")
        return {key: Decimal(str(value)) for key, value in zip(keys, row)}

    def list_active(self) -> List[LoanInvestmentRecord]:
        return self.list_records(status="active")


def _principal_sum(condition):
    return func.coalesce(func.sum(case((condition, LoanInvestmentRecord.principal_amount), else_=0)), 0)
