"""Payment item endpoints: CRUD, soft delete / restore, payments, history"""

import time
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import List, Optional, Union

from fastapi import APIRouter, Depends, File, Form, Query, Request, Response, UploadFile
from pydantic import ValidationError
from sqlalchemy.orm import Session

from woyu_finance.api.dependencies import get_receipt_store, get_request_id
from woyu_finance.api.errors import transaction
from woyu_finance.api.v1.schemas import (
    AuditLogResponse,
    Pagination,
    PaymentItemCreate,
    PaymentItemPage,
    PaymentItemPatch,
    PaymentItemResponse,
    PaymentItemUpdate,
    PaymentRecordResponse,
)
from woyu_finance.config import settings
from woyu_finance.domain.exceptions import InvalidInputError, NotFoundError
from woyu_finance.domain.listing import filter_items, paginate_items, sort_items
from woyu_finance.domain.models import FilterCriteria, Page, PaymentInput
from woyu_finance.infrastructure.database.repositories import (
    AuditLogRepository,
    PaymentItemRepository,
    PaymentRecordRepository,
)
from woyu_finance.infrastructure.database.session import get_db
from woyu_finance.infrastructure.observability.logging import log_payment_applied
from woyu_finance.infrastructure.uploads import ReceiptStore
from woyu_finance.services import items as item_service
from woyu_finance.services.payments import apply_payment
from woyu_finance.utils.date_utils import parse_flexible_date

router = APIRouter()


def pagination_of(page: Page) -> Pagination:
    return Pagination(
        current_page=page.page,
        total_pages=page.total_pages,
        total_items=page.total_items,
        page_size=page.page_size,
        has_next_page=page.has_next,
        has_previous_page=page.has_previous,
    )


def _get_item(db: Session, item_id: int):
    item = PaymentItemRepository(db).get(item_id)
    if item is None:
        raise NotFoundError("Payment item", item_id)
    return item


@router.get("/items", response_model=Union[PaymentItemPage, List[PaymentItemResponse]])
def list_items(
    project_id: Optional[int] = Query(None, alias="projectId"),
    category_id: Optional[int] = Query(None, alias="categoryId"),
    status: Optional[str] = Query(None),
    item_type: Optional[str] = Query(None, alias="itemType"),
    search: Optional[str] = Query(None),
    start_date: Optional[date] = Query(None, alias="startDate"),
    end_date: Optional[date] = Query(None, alias="endDate"),
    sort_by: str = Query("due_date", alias="sortBy"),
    sort_order: str = Query("asc", alias="sortOrder"),
    include_all: bool = Query(False, alias="includeAll"),
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1),
    db: Session = Depends(get_db),
):
    """
    List live payment items.

    Column filters run in SQL; search, due-date range and sorting run over the
    result in memory. includeAll=true returns every match as a plain list.
    """
    rows = PaymentItemRepository(db).query_items(
        project_id=project_id,
        category_id=category_id,
        status=status,
        item_type=item_type,
    ).all()

    criteria = FilterCriteria(search=search, start_date=start_date, end_date=end_date)
    rows = sort_items(filter_items(rows, criteria), key=sort_by, direction=sort_order)

    if include_all:
        return [PaymentItemResponse.model_validate(row) for row in rows]

    result = paginate_items(rows, page=page, page_size=min(limit, settings.max_page_size))
    return PaymentItemPage(
        items=[PaymentItemResponse.model_validate(row) for row in result.items],
        pagination=pagination_of(result),
    )


@router.get("/items/deleted", response_model=List[PaymentItemResponse])
def list_deleted_items(db: Session = Depends(get_db)):
    return PaymentItemRepository(db).list_deleted()


@router.get("/items/{item_id}", response_model=PaymentItemResponse)
def get_item(item_id: int, db: Session = Depends(get_db)):
    return _get_item(db, item_id)


@router.post("/items", response_model=PaymentItemResponse, status_code=201)
def create_item(body: PaymentItemCreate, request: Request, db: Session = Depends(get_db)):
    with transaction(db, get_request_id(request)):
        item = item_service.create_item(db, body.model_dump())
    return item


@router.put("/items/{item_id}", response_model=PaymentItemResponse)
def update_item(item_id: int, body: PaymentItemUpdate, request: Request, db: Session = Depends(get_db)):
    fields = body.model_dump(exclude={"change_reason"})
    with transaction(db, get_request_id(request)):
        item = item_service.update_item(db, item_id, fields, change_reason=body.change_reason)
    return item


@router.patch("/items/{item_id}", response_model=PaymentItemResponse)
def patch_item(item_id: int, body: PaymentItemPatch, request: Request, db: Session = Depends(get_db)):
    """Merge the patch over the stored item, then validate the result as a full update"""
    current = PaymentItemResponse.model_validate(_get_item(db, item_id))
    merged = {
        **current.model_dump(include=set(PaymentItemUpdate.model_fields)),
        **body.model_dump(exclude_unset=True),
    }
    try:
        full = PaymentItemUpdate.model_validate(merged)
    except ValidationError as e:
        errors = [{"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]} for err in e.errors()]
        raise InvalidInputError("Invalid request data", errors=errors)

    fields = full.model_dump(exclude={"change_reason"})
    with transaction(db, get_request_id(request)):
        item = item_service.update_item(db, item_id, fields, change_reason=full.change_reason)
    return item


@router.delete("/items/{item_id}", status_code=204)
def delete_item(item_id: int, request: Request, db: Session = Depends(get_db)):
    with transaction(db, get_request_id(request)):
        item_service.soft_delete_item(db, item_id)
    return Response(status_code=204)


@router.post("/items/{item_id}/restore", response_model=PaymentItemResponse)
def restore_item(item_id: int, request: Request, db: Session = Depends(get_db)):
    with transaction(db, get_request_id(request)):
        item = item_service.restore_item(db, item_id)
    return item


@router.delete("/items/{item_id}/permanent", status_code=204)
def delete_item_permanently(item_id: int, request: Request, db: Session = Depends(get_db)):
    with transaction(db, get_request_id(request)):
        item_service.delete_item_permanently(db, item_id)
    return Response(status_code=204)


@router.get("/items/{item_id}/records", response_model=List[PaymentRecordResponse])
def list_item_records(item_id: int, db: Session = Depends(get_db)):
    _get_item(db, item_id)
    return PaymentRecordRepository(db).list_for_item(item_id)


@router.get("/items/{item_id}/audit-logs", response_model=List[AuditLogResponse])
def list_item_audit_logs(item_id: int, db: Session = Depends(get_db)):
    return AuditLogRepository(db).list_for_record(item_service.TABLE_NAME, item_id)


def _parse_amount(value: Optional[str]) -> Decimal:
    if value is None or not value.strip():
        raise InvalidInputError("Payment amount is required")
    try:
        return Decimal(value.strip())
    except InvalidOperation:
        raise InvalidInputError(f"Invalid payment amount: {value}")


@router.post("/items/{item_id}/payments", response_model=PaymentItemResponse)
def create_payment(
    item_id: int,
    request: Request,
    amount: Optional[str] = Form(None),
    amount_paid: Optional[str] = Form(None, alias="amountPaid"),
    payment_date: Optional[str] = Form(None, alias="paymentDate"),
    payment_method: Optional[str] = Form(None, alias="paymentMethod"),
    notes: Optional[str] = Form(None),
    receipt_image_url: Optional[str] = Form(None, alias="receiptImageUrl"),
    receipt_file: Optional[UploadFile] = File(None, alias="receiptFile"),
    db: Session = Depends(get_db),
    receipt_store: ReceiptStore = Depends(get_receipt_store),
):
    """
    Record a payment (multipart form, optional receipt upload).

    Responds with the reconciled item. A payment larger than the remaining
    balance is rejected with 400 and leaves the item untouched; a receipt
    uploaded with a rejected payment is removed again.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    payment = PaymentInput(
        amount=_parse_amount(amount if amount is not None else amount_paid),
        payment_date=parse_flexible_date(payment_date),
        payment_method=payment_method,
        notes=notes,
        receipt_image_url=receipt_image_url,
    )
    if payment_date and payment.payment_date is None:
        raise InvalidInputError(f"Invalid payment date: {payment_date}")

    receipt_url = None
    if receipt_file is not None and receipt_file.filename:
        receipt_url = receipt_store.save(receipt_file.filename, receipt_file.file.read())

    try:
        with transaction(db, request_id):
            item, _ = apply_payment(db, item_id, payment, receipt_url=receipt_url)
    except Exception:
        if receipt_url:
            receipt_store.discard(receipt_url)
        raise

    duration_ms = (time.time() - start_time) * 1000
    log_payment_applied(request_id, item.id, payment.amount, item.paid_amount, item.status, duration_ms)
    return item
