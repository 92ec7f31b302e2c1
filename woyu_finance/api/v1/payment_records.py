"""Payment record endpoints"""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.orm import Session

from woyu_finance.api.dependencies import get_request_id
from woyu_finance.api.errors import transaction
from woyu_finance.api.v1.payment_items import pagination_of
from woyu_finance.api.v1.schemas import PaymentRecordPage, PaymentRecordResponse, PaymentRecordUpdate
from woyu_finance.config import settings
from woyu_finance.infrastructure.database.repositories import PaymentRecordRepository, paginate_query
from woyu_finance.infrastructure.database.session import get_db
from woyu_finance.services import payments as payment_service

router = APIRouter()


@router.get("/records", response_model=PaymentRecordPage)
def list_records(
    item_id: Optional[int] = Query(None, alias="itemId"),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1),
    db: Session = Depends(get_db),
):
    """Live payment records, newest payment date first"""
    query = PaymentRecordRepository(db).query_records(item_id=item_id, start_date=start_date, end_date=end_date)
    result = paginate_query(query, page=page, page_size=min(limit, settings.max_page_size))
    return PaymentRecordPage(
        items=[PaymentRecordResponse.model_validate(record) for record in result.items],
        pagination=pagination_of(result),
    )


@router.put("/records/{record_id}", response_model=PaymentRecordResponse)
def update_record(record_id: int, body: PaymentRecordUpdate, request: Request, db: Session = Depends(get_db)):
    """Edit a record; the owning item is reconciled in the same transaction"""
    with transaction(db, get_request_id(request)):
        _, record = payment_service.update_record(db, record_id, body.model_dump(exclude_unset=True))
    return record


@router.delete("/records/{record_id}", status_code=204)
def delete_record(record_id: int, request: Request, db: Session = Depends(get_db)):
    with transaction(db, get_request_id(request)):
        payment_service.delete_record(db, record_id)
    return Response(status_code=204)
