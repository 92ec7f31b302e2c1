"""Batch creation of payment items from parsed spreadsheet rows"""

import logging
from typing import Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from woyu_finance.domain.exceptions import DomainException
from woyu_finance.domain.importing import is_paid_status, validate_record
from woyu_finance.domain.models import ImportRecord, ImportResult, ImportRowResult, ItemSource, PaymentInput
from woyu_finance.infrastructure.database.repositories import CategoryRepository, ProjectRepository
from woyu_finance.infrastructure.observability.metrics import record_import_row
from woyu_finance.services.items import create_item
from woyu_finance.services.payments import apply_payment

logger = logging.getLogger(__name__)

AUTO_PROJECT_DESCRIPTION = "批次匯入自動建立"


def _notes(record: ImportRecord) -> Optional[str]:
    parts = []
    if record.vendor:
        parts.append(f"廠商: {record.vendor}")
    if record.notes:
        parts.append(record.notes)
    return " | ".join(parts) or None


def _import_row(db: Session, record: ImportRecord, user_info: Optional[str]) -> ImportRowResult:
    project = ProjectRepository(db).get_or_create(record.project_name, description=AUTO_PROJECT_DESCRIPTION)
    category = CategoryRepository(db).get_or_create(record.category_name) if record.category_name else None

    item = create_item(
        db,
        {
            "item_name": record.item_name,
            "total_amount": record.amount,
            "start_date": record.date,
            "project_id": project.id,
            "category_id": category.id if category else None,
            "priority": record.priority,
            "notes": _notes(record),
            "source": ItemSource.BATCH_IMPORT,
        },
        user_info=user_info,
    )

    payment_id = None
    if is_paid_status(record.payment_status):
        _, payment = apply_payment(
            db,
            item.id,
            PaymentInput(
                amount=record.amount,
                payment_date=record.payment_date or record.date,
                payment_method=record.payment_method,
                notes=record.payment_notes or "批次匯入",
            ),
        )
        payment_id = payment.id

    return ImportRowResult(record=record, success=True, item_id=item.id, payment_id=payment_id)


def execute_import(db: Session, records: Iterable[ImportRecord], user_info: Optional[str] = None) -> ImportResult:
    """
    Create one payment item per valid record.

    Every row runs in its own savepoint: a failing row is rolled back and
    reported, rows before and after it are kept. The caller commits.
    """
    result = ImportResult()

    for record in records:
        validate_record(record)
        if not record.is_valid:
            result.add(ImportRowResult(record=record, success=False, error="; ".join(record.errors)))
            record_import_row(False)
            continue

        try:
            with db.begin_nested():
                row = _import_row(db, record, user_info)
        except (DomainException, SQLAlchemyError) as e:
            logger.warning(f"Import row failed: {e}", extra={"item_name": record.item_name})
            result.add(ImportRowResult(record=record, success=False, error=str(e)))
            record_import_row(False)
            continue

        result.add(row)
        record_import_row(True)

    logger.info(
        "Batch import finished",
        extra={"step": "batch_import", "success": result.success, "failed": result.failed},
    )
    return result
