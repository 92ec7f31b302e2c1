"""Background scheduling of the hourly reminder cycle"""

import logging
from typing import Callable, Optional

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from sqlalchemy.orm import Session

from woyu_finance.services.reminders import run_reminder_cycle

logger = logging.getLogger(__name__)

JOB_ID = "payment_reminders"


class ReminderScheduler:
    """Runs run_reminder_cycle on a fixed interval in a background thread"""

    def __init__(self, session_factory: Callable[[], Session], interval_minutes: int = 60):
        self.session_factory = session_factory
        self.interval_minutes = interval_minutes
        self.scheduler: Optional[BackgroundScheduler] = None

    @property
    def running(self) -> bool:
        return self.scheduler is not None and self.scheduler.running

    def start(self) -> None:
        if self.scheduler is not None:
            logger.warning("Reminder scheduler already running")
            return

        self.scheduler = BackgroundScheduler()
        # One cycle at a time; missed runs collapse into a single catch-up run
        self.scheduler.add_job(
            func=self.run_once,
            trigger=IntervalTrigger(minutes=self.interval_minutes),
            id=JOB_ID,
            name="Payment due / overdue reminders",
            max_instances=1,
            coalesce=True,
            replace_existing=True,
        )
        self.scheduler.start()
        logger.info(f"Reminder scheduler started, every {self.interval_minutes} minutes")

    def stop(self) -> None:
        if self.scheduler is not None:
            self.scheduler.shutdown(wait=True)
            self.scheduler = None
            logger.info("Reminder scheduler stopped")

    def run_once(self) -> int:
        return run_reminder_cycle(self.session_factory)
