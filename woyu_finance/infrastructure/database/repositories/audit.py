"""Data access layer for the audit trail"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session

from woyu_finance.config import settings
from woyu_finance.infrastructure.database.models import AuditLog

AUDITED_ITEM_FIELDS = (
    "item_name",
    "total_amount",
    "paid_amount",
    "status",
    "item_type",
    "payment_type",
    "installment_count",
    "installment_amount",
    "start_date",
    "end_date",
    "priority",
    "notes",
    "project_id",
    "category_id",
    "source",
    "is_deleted",
)


def _json_value(value: Any) -> Any:
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


def snapshot(entity, fields=AUDITED_ITEM_FIELDS) -> Dict[str, Any]:
    """JSON-safe copy of the audited columns of an entity"""
    return {name: _json_value(getattr(entity, name)) for name in fields}


class AuditLogRepository:
    """Repository for audit log entries"""

    def __init__(self, db: Session):
        self.db = db

    def record(
        self,
        table_name: str,
        record_id: int,
        action: str,
        old_values: Optional[Dict[str, Any]] = None,
        new_values: Optional[Dict[str, Any]] = None,
        change_reason: Optional[str] = None,
        user_info: Optional[str] = None,
    ) -> AuditLog:
        """Add an audit row in the caller's transaction"""
        changed_fields = None
        if old_values is not None and new_values is not None:
            changed_fields = [k for k in new_values if old_values.get(k) != new_values[k]]

        entry = AuditLog(
            table_name=table_name,
            record_id=record_id,
            action=action,
            old_values=old_values,
            new_values=new_values,
            changed_fields=changed_fields,
            user_info=user_info or settings.default_user_info,
            change_reason=change_reason,
        )
        self.db.add(entry)
        return entry

    def list_for_record(self, table_name: str, record_id: int) -> List[AuditLog]:
        """Newest first"""
        return (
            self.db.query(AuditLog)
            .filter(AuditLog.table_name == table_name, AuditLog.record_id == record_id)
            .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
            .all()
        )
