"""Structured JSON logging for production observability"""

import logging
import sys
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict
from pythonjsonlogger import jsonlogger

from woyu_finance.config import settings


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter with timestamp and service metadata"""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
        log_record["level"] = record.levelname
        log_record["service"] = settings.service_name


def setup_logging(level: str = "INFO") -> None:
    """Configure structured JSON logging"""
    logger = logging.getLogger()
    logger.setLevel(level)

    # Remove existing handlers
    logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    formatter = CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s"
    )
    handler.setFormatter(formatter)
    logger.addHandler(handler)


def log_payment_applied(
    request_id: str,
    item_id: int,
    amount: Decimal,
    paid_amount: Decimal,
    status: str,
    duration_ms: float,
) -> None:
    """Log structured payment outcome for reconciliation audits"""
    logging.info(
        "Payment applied",
        extra={
            "request_id": request_id,
            "item_id": item_id,
            "step": "payment_applied",
            "amount": str(amount),
            "paid_amount": str(paid_amount),
            "item_status": status,
            "duration_ms": duration_ms,
        },
    )


def log_reminder_cycle(overdue_marked: int, reminders_created: int, duration_ms: float) -> None:
    """Log the outcome of one reminder scan"""
    logging.info(
        "Reminder cycle completed",
        extra={
            "step": "reminder_cycle",
            "overdue_marked": overdue_marked,
            "reminders_created": reminders_created,
            "duration_ms": duration_ms,
        },
    )
