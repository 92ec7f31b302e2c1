"""Notification center and notification settings endpoints"""

from typing import List

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.orm import Session

from woyu_finance.api.dependencies import get_current_user_id, get_request_id
from woyu_finance.api.errors import transaction
from woyu_finance.api.v1.schemas import (
    MarkAllReadResponse,
    NotificationCreate,
    NotificationResponse,
    NotificationSettingsResponse,
    NotificationSettingsUpdate,
    ReminderRunResponse,
    UnreadCountResponse,
)
from woyu_finance.domain.exceptions import NotFoundError
from woyu_finance.infrastructure.database.repositories import NotificationRepository, NotificationSettingsRepository
from woyu_finance.infrastructure.database.session import get_db
from woyu_finance.services.payments import mark_overdue_items
from woyu_finance.services.reminders import generate_payment_reminders

router = APIRouter()


def _get_notification(db: Session, notification_id: int, user_id: int):
    notification = NotificationRepository(db).get(notification_id, user_id)
    if notification is None:
        raise NotFoundError("Notification", notification_id)
    return notification


@router.get("/notifications", response_model=List[NotificationResponse])
def list_notifications(
    limit: int = Query(50, ge=1, le=200),
    unread_only: bool = Query(False, alias="unreadOnly"),
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    return NotificationRepository(db).list_for_user(user_id, limit=limit, unread_only=unread_only)


@router.post("/notifications", response_model=NotificationResponse, status_code=201)
def create_notification(
    body: NotificationCreate,
    request: Request,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    fields = body.model_dump(exclude={"metadata"})
    with transaction(db, get_request_id(request)):
        notification = NotificationRepository(db).create(user_id=user_id, extra=body.metadata, **fields)
    return notification


@router.get("/notifications/unread-count", response_model=UnreadCountResponse)
def unread_count(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    return UnreadCountResponse(count=NotificationRepository(db).unread_count(user_id))


@router.post("/notifications/read-all", response_model=MarkAllReadResponse)
def mark_all_read(request: Request, user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    with transaction(db, get_request_id(request)):
        updated = NotificationRepository(db).mark_all_read(user_id)
    return MarkAllReadResponse(updated=updated)


@router.post("/notifications/generate-reminders", response_model=ReminderRunResponse)
def generate_reminders(request: Request, db: Session = Depends(get_db)):
    """Run one reminder cycle now instead of waiting for the scheduler"""
    with transaction(db, get_request_id(request)):
        overdue_marked = mark_overdue_items(db)
        created = generate_payment_reminders(db)
    return ReminderRunResponse(overdue_marked=overdue_marked, created=created)


@router.post("/notifications/{notification_id}/read", response_model=NotificationResponse)
def mark_read(
    notification_id: int,
    request: Request,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    with transaction(db, get_request_id(request)):
        notification = NotificationRepository(db).mark_read(_get_notification(db, notification_id, user_id))
    return notification


@router.delete("/notifications/{notification_id}", status_code=204)
def delete_notification(
    notification_id: int,
    request: Request,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    with transaction(db, get_request_id(request)):
        NotificationRepository(db).delete(_get_notification(db, notification_id, user_id))
    return Response(status_code=204)


@router.get("/notification-settings", response_model=NotificationSettingsResponse)
def get_settings(request: Request, user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)):
    """Settings for the acting user; defaults are persisted on first read"""
    with transaction(db, get_request_id(request)):
        row = NotificationSettingsRepository(db).get_or_create(user_id)
    return row


@router.put("/notification-settings", response_model=NotificationSettingsResponse)
def update_settings(
    body: NotificationSettingsUpdate,
    request: Request,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    with transaction(db, get_request_id(request)):
        row = NotificationSettingsRepository(db).update(user_id, body.model_dump(exclude_none=True))
    return row
