"""Due / overdue payment reminder generation"""

import logging
import time
from datetime import date, timedelta
from typing import Callable, List, Optional

from sqlalchemy.orm import Session

from woyu_finance.config import settings
from woyu_finance.domain.models import ReminderCandidate, format_money
from woyu_finance.domain.reconciliation import remaining_balance
from woyu_finance.infrastructure.database.models import NotificationSettings, PaymentItem
from woyu_finance.infrastructure.database.repositories import (
    NotificationRepository,
    NotificationSettingsRepository,
    PaymentItemRepository,
)
from woyu_finance.infrastructure.observability.logging import log_reminder_cycle
from woyu_finance.infrastructure.observability.metrics import reminder_counter, reminder_failures_counter
from woyu_finance.services.payments import mark_overdue_items
from woyu_finance.utils import date_utils

logger = logging.getLogger(__name__)

PAYMENT_DUE = "payment_due"
PAYMENT_OVERDUE = "payment_overdue"


def _candidate(item: PaymentItem, today: date) -> ReminderCandidate:
    due = item.due_date
    return ReminderCandidate(
        item_id=item.id,
        item_name=item.item_name,
        due_date=due,
        outstanding=remaining_balance(item.paid_amount, item.total_amount),
        overdue=due < today,
        extra={"autoGenerated": True},
    )


def _wants(user_settings: NotificationSettings, candidate: ReminderCandidate) -> bool:
    if candidate.overdue:
        return user_settings.payment_overdue_alert
    return user_settings.payment_due_reminder


def _reminder_fields(candidate: ReminderCandidate) -> dict:
    amount = format_money(candidate.outstanding)
    if candidate.overdue:
        return {
            "type": PAYMENT_OVERDUE,
            "title": "付款逾期警示",
            "message": f'項目 "{candidate.item_name}" 已於 {candidate.due_date.isoformat()} 逾期，未付金額 NT$ {amount}',
            "priority": "high",
        }
    return {
        "type": PAYMENT_DUE,
        "title": "付款到期提醒",
        "message": f'項目 "{candidate.item_name}" 將於 {candidate.due_date.isoformat()} 到期，未付金額 NT$ {amount}',
        "priority": "medium",
    }


def generate_payment_reminders(db: Session, today: Optional[date] = None) -> int:
    """
    Create due / overdue notifications for every user with notification settings.

    Users without a settings row are not scanned, except the default user, who
    gets default settings on first run. An item is skipped for a user while an
    unread notification of the same type already points at it.

    Returns the number of notifications created.
    """
    today = today or date_utils.today()
    settings_repo = NotificationSettingsRepository(db)
    notifications = NotificationRepository(db)
    items = PaymentItemRepository(db)

    users: List[NotificationSettings] = settings_repo.list_all()
    if not users:
        users = [settings_repo.get_or_create(settings.default_user_id)]

    created = 0
    for user_settings in users:
        cutoff = today + timedelta(days=user_settings.advance_warning_days)
        for item in items.list_unpaid_due_by(cutoff):
            candidate = _candidate(item, today)
            if candidate.outstanding <= 0 or not _wants(user_settings, candidate):
                continue

            fields = _reminder_fields(candidate)
            if notifications.has_unread_for_item(user_settings.user_id, item.id, fields["type"]):
                continue

            notifications.create(
                user_id=user_settings.user_id,
                action_url=f"/payment/items/{item.id}",
                payment_item_id=item.id,
                extra=candidate.metadata(),
                **fields,
            )
            reminder_counter.labels(type=fields["type"]).inc()
            created += 1

    return created


def run_reminder_cycle(session_factory: Callable[[], Session], today: Optional[date] = None) -> int:
    """
    One scheduled pass: mark overdue items, then generate reminders.

    Owns its session. Failures are logged and counted, never raised, so a bad
    cycle does not take the scheduler down with it.
    """
    start_time = time.time()
    db = session_factory()
    try:
        overdue_marked = mark_overdue_items(db, today=today)
        created = generate_payment_reminders(db, today=today)
        db.commit()

        duration_ms = (time.time() - start_time) * 1000
        log_reminder_cycle(overdue_marked, created, duration_ms)
        return created

    except Exception as e:
        db.rollback()
        reminder_failures_counter.inc()
        logger.error(f"Reminder cycle failed: {e}", exc_info=True)
        return 0

    finally:
        db.close()
