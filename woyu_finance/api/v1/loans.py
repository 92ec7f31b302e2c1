"""Loan and investment endpoints"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.orm import Session

from woyu_finance.api.dependencies import get_request_id
from woyu_finance.api.errors import transaction
from woyu_finance.api.v1.schemas import (
    AmortizationEntrySchema,
    LoanCalculateRequest,
    LoanCalculateResponse,
    LoanPaymentCreate,
    LoanPaymentResponse,
    LoanRecordCreate,
    LoanRecordResponse,
    LoanRecordUpdate,
    LoanStatsResponse,
    ScheduleResponse,
)
from woyu_finance.config import settings
from woyu_finance.domain.models import AmortizationSchedule
from woyu_finance.infrastructure.database.models import LoanInvestmentRecord
from woyu_finance.infrastructure.database.repositories import LoanRepository
from woyu_finance.infrastructure.database.session import get_db
from woyu_finance.services import loans as loan_service
from woyu_finance.utils import date_utils

router = APIRouter()


def to_response(record: LoanInvestmentRecord) -> LoanRecordResponse:
    """Stored columns plus risk grading and derived amounts"""
    columns = {column.name: getattr(record, column.name) for column in record.__table__.columns}
    return LoanRecordResponse.model_validate({**columns, **loan_service.describe(record)})


def _entries(schedule: AmortizationSchedule) -> List[AmortizationEntrySchema]:
    return [AmortizationEntrySchema.model_validate(entry) for entry in schedule.entries]


@router.get("/records", response_model=List[LoanRecordResponse])
def list_records(
    record_type: Optional[str] = Query(None, alias="recordType"),
    status: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    return [to_response(r) for r in LoanRepository(db).list_records(record_type=record_type, status=status)]


@router.post("/records", response_model=LoanRecordResponse, status_code=201)
def create_record(body: LoanRecordCreate, request: Request, db: Session = Depends(get_db)):
    with transaction(db, get_request_id(request)):
        record = loan_service.create_record(db, body.model_dump())
    return to_response(record)


@router.get("/records/{record_id}", response_model=LoanRecordResponse)
def get_record(record_id: int, db: Session = Depends(get_db)):
    return to_response(loan_service.get_record(db, record_id))


@router.put("/records/{record_id}", response_model=LoanRecordResponse)
def update_record(record_id: int, body: LoanRecordUpdate, request: Request, db: Session = Depends(get_db)):
    with transaction(db, get_request_id(request)):
        record = loan_service.update_record(db, record_id, body.model_dump(exclude_unset=True))
    return to_response(record)


@router.delete("/records/{record_id}", status_code=204)
def delete_record(record_id: int, request: Request, db: Session = Depends(get_db)):
    with transaction(db, get_request_id(request)):
        loan_service.delete_record(db, record_id)
    return Response(status_code=204)


@router.get("/records/{record_id}/payments", response_model=List[LoanPaymentResponse])
def list_payments(record_id: int, db: Session = Depends(get_db)):
    loan_service.get_record(db, record_id)
    return LoanRepository(db).list_payments(record_id)


@router.post("/records/{record_id}/payments", response_model=LoanPaymentResponse, status_code=201)
def add_payment(record_id: int, body: LoanPaymentCreate, request: Request, db: Session = Depends(get_db)):
    fields = body.model_dump()
    fields["payment_date"] = fields["payment_date"] or date_utils.today()
    with transaction(db, get_request_id(request)):
        payment, _ = loan_service.add_payment(db, record_id, fields)
    return payment


@router.get("/records/{record_id}/schedule", response_model=ScheduleResponse)
def get_schedule(
    record_id: int,
    periods: Optional[int] = Query(None, ge=1, le=360),
    db: Session = Depends(get_db),
):
    """First periods of the record's amortization and how the full schedule ends"""
    schedule = loan_service.record_schedule(loan_service.get_record(db, record_id))
    return ScheduleResponse(
        outcome=schedule.outcome,
        total_periods=len(schedule.entries),
        total_interest=schedule.total_interest,
        entries=_entries(schedule.head(periods or settings.amortization_display_periods)),
    )


@router.get("/stats", response_model=LoanStatsResponse)
def get_stats(db: Session = Depends(get_db)):
    return LoanStatsResponse(**loan_service.stats(db))


@router.post("/calculate", response_model=LoanCalculateResponse)
def calculate(body: LoanCalculateRequest):
    result = loan_service.calculate(
        body.principal,
        body.annual_interest_rate,
        monthly_payment=body.monthly_payment,
        term_months=body.term_months,
        periods=body.periods,
    )
    schedule = result.pop("schedule")
    return LoanCalculateResponse(**result, outcome=schedule.outcome, schedule=_entries(schedule))
