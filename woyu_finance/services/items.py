"""Payment item lifecycle with audit trail"""

from datetime import date
from decimal import Decimal
from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from woyu_finance.domain.exceptions import ConflictError, InvalidInputError, NotFoundError
from woyu_finance.domain.models import ItemSource, format_money, to_money
from woyu_finance.domain.reconciliation import classify_status, item_due_date
from woyu_finance.infrastructure.database.models import PaymentItem
from woyu_finance.infrastructure.database.repositories import (
    AuditLogRepository,
    CategoryRepository,
    PaymentItemRepository,
    PaymentRecordRepository,
    ProjectRepository,
)
from woyu_finance.infrastructure.database.repositories.audit import snapshot
from woyu_finance.services.payments import reconcile_item

TABLE_NAME = "payment_items"


def _validate(db: Session, fields: Dict[str, Any]) -> None:
    errors = []

    total = fields.get("total_amount")
    if total is None or Decimal(total) <= 0:
        errors.append({"field": "totalAmount", "message": "Total amount must be greater than 0"})

    start, end = fields.get("start_date"), fields.get("end_date")
    if start is not None and end is not None and end < start:
        errors.append({"field": "endDate", "message": "End date cannot be before start date"})

    project_id = fields.get("project_id")
    if project_id is not None and ProjectRepository(db).get(project_id) is None:
        errors.append({"field": "projectId", "message": "Project not found"})

    category_id = fields.get("category_id")
    if category_id is not None and CategoryRepository(db).get(category_id) is None:
        errors.append({"field": "categoryId", "message": "Category not found"})

    if errors:
        raise InvalidInputError("Invalid request data", errors=errors)


def create_item(
    db: Session,
    fields: Dict[str, Any],
    user_info: Optional[str] = None,
    today: Optional[date] = None,
) -> PaymentItem:
    _validate(db, fields)

    total = to_money(fields["total_amount"])
    due = item_due_date(fields.get("start_date"), fields.get("end_date"))
    values = {
        **fields,
        "total_amount": total,
        "paid_amount": Decimal("0"),
        "status": classify_status(Decimal("0"), total, due, today),
        "source": fields.get("source") or ItemSource.MANUAL,
    }
    item = PaymentItemRepository(db).create(**values)

    AuditLogRepository(db).record(
        TABLE_NAME,
        item.id,
        "INSERT",
        new_values=snapshot(item),
        change_reason="新增付款項目",
        user_info=user_info,
    )
    return item


def update_item(
    db: Session,
    item_id: int,
    fields: Dict[str, Any],
    change_reason: Optional[str] = None,
    user_info: Optional[str] = None,
    today: Optional[date] = None,
) -> PaymentItem:
    """Replace editable fields, then reconcile so status follows the new total / dates"""
    items = PaymentItemRepository(db)
    item = items.get_for_update(item_id)
    if item is None:
        raise NotFoundError("Payment item", item_id)

    _validate(db, fields)
    paid = PaymentRecordRepository(db).sum_for_item(item_id)
    if Decimal(fields.get("total_amount", item.total_amount)) < paid:
        raise InvalidInputError(
            "Invalid request data",
            errors=[{
                "field": "totalAmount",
                "message": f"Total amount cannot be less than the paid amount {format_money(paid)}",
            }],
        )

    old_values = snapshot(item)

    for name, value in fields.items():
        setattr(item, name, to_money(value) if name == "total_amount" else value)
    db.flush()

    item = reconcile_item(db, item_id, today=today)
    AuditLogRepository(db).record(
        TABLE_NAME,
        item.id,
        "UPDATE",
        old_values=old_values,
        new_values=snapshot(item),
        change_reason=change_reason or "更新付款項目",
        user_info=user_info,
    )
    return item


def soft_delete_item(db: Session, item_id: int, user_info: Optional[str] = None) -> None:
    item = PaymentItemRepository(db).get(item_id)
    if item is None:
        raise NotFoundError("Payment item", item_id)

    old_values = snapshot(item)
    item.soft_delete()
    db.flush()

    AuditLogRepository(db).record(
        TABLE_NAME,
        item.id,
        "DELETE",
        old_values=old_values,
        new_values=snapshot(item),
        change_reason="刪除付款項目",
        user_info=user_info,
    )


def restore_item(db: Session, item_id: int, user_info: Optional[str] = None, today: Optional[date] = None) -> PaymentItem:
    item = PaymentItemRepository(db).get(item_id, include_deleted=True)
    if item is None:
        raise NotFoundError("Payment item", item_id)
    if not item.is_deleted:
        raise ConflictError("Payment item is not deleted")

    old_values = snapshot(item)
    item.restore()
    db.flush()

    item = reconcile_item(db, item_id, today=today)
    AuditLogRepository(db).record(
        TABLE_NAME,
        item.id,
        "RESTORE",
        old_values=old_values,
        new_values=snapshot(item),
        change_reason="復原付款項目",
        user_info=user_info,
    )
    return item


def delete_item_permanently(db: Session, item_id: int, user_info: Optional[str] = None) -> None:
    """Hard delete of an item and all of its payment records"""
    items = PaymentItemRepository(db)
    item = items.get(item_id, include_deleted=True)
    if item is None:
        raise NotFoundError("Payment item", item_id)

    AuditLogRepository(db).record(
        TABLE_NAME,
        item.id,
        "PERMANENT_DELETE",
        old_values=snapshot(item),
        change_reason="永久刪除付款項目",
        user_info=user_info,
    )
    items.delete_permanently(item)
