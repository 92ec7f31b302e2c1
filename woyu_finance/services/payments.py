"""Payment application and paid-amount reconciliation"""

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional, Tuple

from sqlalchemy import case, func, select, update
from sqlalchemy.orm import Session

from woyu_finance.domain.exceptions import InvalidInputError, NotFoundError, PaymentExceedsBalanceError
from woyu_finance.domain.models import PaymentInput, PaymentStatus, to_money
from woyu_finance.domain.reconciliation import can_accept_payment, remaining_balance
from woyu_finance.infrastructure.database.models import PaymentItem, PaymentRecord
from woyu_finance.infrastructure.database.repositories import PaymentItemRepository, PaymentRecordRepository
from woyu_finance.infrastructure.observability.metrics import reconciliation_counter, record_payment
from woyu_finance.utils import date_utils

logger = logging.getLogger(__name__)

DEFAULT_PAYMENT_METHOD = "bank_transfer"


def reconcile_item(db: Session, item_id: int, today: Optional[date] = None) -> PaymentItem:
    """
    Recompute paid_amount and status of one item from its payment records.

    Runs as a single UPDATE so the sum and the status derived from it are
    written atomically:

        UPDATE payment_items
        SET paid_amount = (SELECT COALESCE(SUM(amount_paid), 0) FROM payment_records
                           WHERE item_id = :id AND NOT is_deleted),
            status = CASE ... END
        WHERE id = :id

    The CASE mirrors domain.reconciliation.classify_status.
    """
    today = today or date_utils.today()

    paid = (
        select(func.coalesce(func.sum(PaymentRecord.amount_paid), 0))
        .where(PaymentRecord.item_id == item_id, PaymentRecord.is_deleted.is_(False))
        .scalar_subquery()
    )
    due = func.coalesce(PaymentItem.end_date, PaymentItem.start_date)
    status = case(
        (paid >= PaymentItem.total_amount, PaymentStatus.PAID),
        (paid > 0, PaymentStatus.PARTIAL),
        (due < today, PaymentStatus.OVERDUE),
        else_=PaymentStatus.PENDING,
    )

    result = db.execute(
        update(PaymentItem)
        .where(PaymentItem.id == item_id)
        .values(paid_amount=paid, status=status)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount == 0:
        raise NotFoundError("Payment item", item_id)

    reconciliation_counter.inc()

    item = db.get(PaymentItem, item_id)
    db.refresh(item)
    return item


def apply_payment(
    db: Session,
    item_id: int,
    payment: PaymentInput,
    receipt_url: Optional[str] = None,
    today: Optional[date] = None,
) -> Tuple[PaymentItem, PaymentRecord]:
    """
    Record a payment against an item and reconcile it.

    The item row stays locked from the balance check until the caller commits,
    so two concurrent payments cannot both pass the check. A payment that
    would push the paid amount above the total is rejected and nothing is
    written.
    """
    today = today or date_utils.today()
    items = PaymentItemRepository(db)
    records = PaymentRecordRepository(db)

    item = items.get_for_update(item_id)
    if item is None:
        raise NotFoundError("Payment item", item_id)

    amount = Decimal(payment.amount)
    if amount <= 0:
        record_payment(applied=False)
        raise InvalidInputError("Payment amount must be greater than 0")

    paid = records.sum_for_item(item_id)
    if not can_accept_payment(paid, item.total_amount, amount):
        record_payment(applied=False)
        raise PaymentExceedsBalanceError(remaining_balance(paid, item.total_amount))

    record = records.create(
        item_id=item_id,
        amount_paid=to_money(amount),
        payment_date=payment.payment_date or today,
        payment_method=payment.payment_method or DEFAULT_PAYMENT_METHOD,
        receipt_image_url=receipt_url or payment.receipt_image_url,
        notes=payment.notes,
    )

    item = reconcile_item(db, item_id, today=today)
    record_payment(applied=True, amount=amount)
    return item, record


def update_record(
    db: Session,
    record_id: int,
    changes: Dict[str, Any],
    today: Optional[date] = None,
) -> Tuple[PaymentItem, PaymentRecord]:
    """Edit a payment record; the new amount is checked against the balance without the old one"""
    records = PaymentRecordRepository(db)
    record = records.get(record_id)
    if record is None:
        raise NotFoundError("Payment record", record_id)

    item = PaymentItemRepository(db).get_for_update(record.item_id)
    if item is None:
        raise NotFoundError("Payment item", record.item_id)

    if "amount_paid" in changes:
        amount = Decimal(changes["amount_paid"])
        if amount <= 0:
            raise InvalidInputError("Payment amount must be greater than 0")
        others = records.sum_for_item(item.id, exclude_record_id=record.id)
        if not can_accept_payment(others, item.total_amount, amount):
            raise PaymentExceedsBalanceError(remaining_balance(others, item.total_amount))
        changes = {**changes, "amount_paid": to_money(amount)}

    for name, value in changes.items():
        setattr(record, name, value)
    db.flush()

    item = reconcile_item(db, item.id, today=today)
    db.refresh(record)
    return item, record


def delete_record(db: Session, record_id: int, today: Optional[date] = None) -> PaymentItem:
    """Soft-delete a payment record and reconcile its item"""
    record = PaymentRecordRepository(db).get(record_id)
    if record is None:
        raise NotFoundError("Payment record", record_id)

    record.soft_delete()
    db.flush()
    return reconcile_item(db, record.item_id, today=today)


def mark_overdue_items(db: Session, today: Optional[date] = None) -> int:
    """Flip unpaid pending items past their due date to overdue; returns the count"""
    today = today or date_utils.today()
    due = func.coalesce(PaymentItem.end_date, PaymentItem.start_date)

    count = (
        db.query(PaymentItem)
        .filter(
            PaymentItem.is_deleted.is_(False),
            PaymentItem.status == PaymentStatus.PENDING,
            PaymentItem.paid_amount == 0,
            due < today,
        )
        .update({PaymentItem.status: PaymentStatus.OVERDUE}, synchronize_session=False)
    )
    if count:
        logger.info("Marked items overdue", extra={"count": count, "as_of": today.isoformat()})
    return count
