"""Data access layer for payment items and payment records"""

from datetime import date
from decimal import Decimal
from typing import Any, List, Optional
from sqlalchemy import func, or_
from sqlalchemy.orm import Query, Session, joinedload

from woyu_finance.infrastructure.database.models import PaymentItem, PaymentProject, PaymentRecord
from woyu_finance.infrastructure.database.repositories.base import exclude_deleted


class PaymentItemRepository:
    """Repository for payment items"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, item_id: int, include_deleted: bool = False) -> Optional[PaymentItem]:
        query = exclude_deleted(self.db.query(PaymentItem), PaymentItem, include_deleted)
        return query.filter(PaymentItem.id == item_id).first()

    def get_for_update(self, item_id: int) -> Optional[PaymentItem]:
        """Fetch and row-lock the item for the rest of the transaction"""
        return (
            exclude_deleted(self.db.query(PaymentItem), PaymentItem)
            .filter(PaymentItem.id == item_id)
            .with_for_update()
            .first()
        )

    def query_items(
        self,
        project_id: Optional[int] = None,
        category_id: Optional[int] = None,
        status: Optional[str] = None,
        item_type: Optional[str] = None,
    ) -> Query:
        """Build the filtered listing query, earliest due first"""
        query = (
            exclude_deleted(self.db.query(PaymentItem), PaymentItem)
            .options(joinedload(PaymentItem.project), joinedload(PaymentItem.category))
        )
        if project_id is not None:
            query = query.filter(PaymentItem.project_id == project_id)
        if category_id is not None:
            query = query.filter(PaymentItem.category_id == category_id)
        if status:
            query = query.filter(PaymentItem.status == status)
        if item_type == "general":
            # Rental items are managed elsewhere
            query = query.outerjoin(PaymentProject, PaymentItem.project_id == PaymentProject.id).filter(
                or_(PaymentProject.id.is_(None), PaymentProject.project_type != "rental")
            )
        elif item_type:
            query = query.filter(PaymentItem.item_type == item_type)

        due = func.coalesce(PaymentItem.end_date, PaymentItem.start_date)
        return query.order_by(due.asc(), PaymentItem.id.asc())

    def list_deleted(self) -> List[PaymentItem]:
        return (
            self.db.query(PaymentItem)
            .filter(PaymentItem.is_deleted.is_(True))
            .order_by(PaymentItem.deleted_at.desc())
            .all()
        )

    def list_unpaid_due_by(self, cutoff: date) -> List[PaymentItem]:
        """Non-deleted items not yet fully paid whose due date is on or before cutoff"""
        due = func.coalesce(PaymentItem.end_date, PaymentItem.start_date)
        return (
            exclude_deleted(self.db.query(PaymentItem), PaymentItem)
            .filter(PaymentItem.status != "paid", due <= cutoff)
            .order_by(due.asc())
            .all()
        )

    def create(self, **fields: Any) -> PaymentItem:
        item = PaymentItem(**fields)
        self.db.add(item)
        self.db.flush()
        return item

    def delete_permanently(self, item: PaymentItem) -> None:
        """Hard delete; records go with it through the relationship cascade"""
        self.db.delete(item)
        self.db.flush()


class PaymentRecordRepository:
    """Repository for payment records"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, record_id: int) -> Optional[PaymentRecord]:
        return (
            exclude_deleted(self.db.query(PaymentRecord), PaymentRecord)
            .filter(PaymentRecord.id == record_id)
            .first()
        )

    def list_for_item(self, item_id: int) -> List[PaymentRecord]:
        return (
            exclude_deleted(self.db.query(PaymentRecord), PaymentRecord)
            .filter(PaymentRecord.item_id == item_id)
            .order_by(PaymentRecord.payment_date.desc(), PaymentRecord.id.desc())
            .all()
        )

    def query_records(
        self,
        item_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> Query:
        query = exclude_deleted(self.db.query(PaymentRecord), PaymentRecord)
        if item_id is not None:
            query = query.filter(PaymentRecord.item_id == item_id)
        if start_date is not None:
            query = query.filter(PaymentRecord.payment_date >= start_date)
        if end_date is not None:
            query = query.filter(PaymentRecord.payment_date <= end_date)
        return query.order_by(PaymentRecord.payment_date.desc(), PaymentRecord.id.desc())

    def sum_for_item(self, item_id: int, exclude_record_id: Optional[int] = None) -> Decimal:
        """Paid total from non-deleted records, optionally leaving one record out"""
        query = exclude_deleted(
            self.db.query(func.coalesce(func.sum(PaymentRecord.amount_paid), 0)),
            PaymentRecord,
        ).filter(PaymentRecord.item_id == item_id)
        if exclude_record_id is not None:
            query = query.filter(PaymentRecord.id != exclude_record_id)
        return Decimal(str(query.scalar()))

    def create(self, **fields: Any) -> PaymentRecord:
        record = PaymentRecord(**fields)
        self.db.add(record)
        self.db.flush()
        return record
