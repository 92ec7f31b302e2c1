"""Data access layer for notifications and per-user notification settings"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session

from woyu_finance.config import settings
from woyu_finance.infrastructure.database.models import Notification, NotificationSettings


class NotificationRepository:
    """Repository for in-app notifications"""

    def __init__(self, db: Session):
        self.db = db

    def list_for_user(self, user_id: int, limit: int = 50, unread_only: bool = False) -> List[Notification]:
        query = self.db.query(Notification).filter(Notification.user_id == user_id)
        if unread_only:
            query = query.filter(Notification.is_read.is_(False))
        return query.order_by(Notification.created_at.desc(), Notification.id.desc()).limit(limit).all()

    def get(self, notification_id: int, user_id: int) -> Optional[Notification]:
        return (
            self.db.query(Notification)
            .filter(Notification.id == notification_id, Notification.user_id == user_id)
            .first()
        )

    def create(
        self,
        user_id: int,
        type: str,
        title: str,
        message: str,
        priority: str = "medium",
        action_url: Optional[str] = None,
        payment_item_id: Optional[int] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> Notification:
        notification = Notification(
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            priority=priority,
            action_url=action_url,
            payment_item_id=payment_item_id,
            extra=extra or {},
        )
        self.db.add(notification)
        self.db.flush()
        return notification

    def mark_read(self, notification: Notification) -> Notification:
        notification.is_read = True
        notification.read_at = datetime.now(timezone.utc)
        self.db.flush()
        return notification

    def mark_all_read(self, user_id: int) -> int:
        """Returns the number of notifications flipped to read"""
        return (
            self.db.query(Notification)
            .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
            .update(
                {Notification.is_read: True, Notification.read_at: datetime.now(timezone.utc)},
                synchronize_session=False,
            )
        )

    def unread_count(self, user_id: int) -> int:
        return (
            self.db.query(func.count(Notification.id))
            .filter(Notification.user_id == user_id, Notification.is_read.is_(False))
            .scalar()
        )

    def has_unread_for_item(self, user_id: int, payment_item_id: int, type: str) -> bool:
        return (
            self.db.query(Notification.id)
            .filter(
                Notification.user_id == user_id,
                Notification.payment_item_id == payment_item_id,
                Notification.type == type,
                Notification.is_read.is_(False),
            )
            .first()
            is not None
        )

    def delete(self, notification: Notification) -> None:
        self.db.delete(notification)
        self.db.flush()


class NotificationSettingsRepository:
    """Repository for notification preferences"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: int) -> Optional[NotificationSettings]:
        return self.db.query(NotificationSettings).filter(NotificationSettings.user_id == user_id).first()

    def get_or_create(self, user_id: int) -> NotificationSettings:
        """Users without a row get the defaults persisted on first read"""
        existing = self.get(user_id)
        if existing is not None:
            return existing
        row = NotificationSettings(user_id=user_id, advance_warning_days=settings.default_advance_warning_days)
        self.db.add(row)
        self.db.flush()
        return row

    def update(self, user_id: int, fields: Dict[str, Any]) -> NotificationSettings:
        row = self.get_or_create(user_id)
        for name, value in fields.items():
            setattr(row, name, value)
        self.db.flush()
        return row

    def list_all(self) -> List[NotificationSettings]:
        return self.db.query(NotificationSettings).order_by(NotificationSettings.user_id).all()
