# tractorhire/services/reminder_service.py
"""
Retrieval reminder sweep.

Run periodically by an external scheduler. Each approved, paid or delivered
booking whose rental ends within the lookahead window gets one reminder; the
``reminder_sent`` flag only ever moves from False to True, so re-running the
sweep is safe.
"""

from datetime import datetime, timedelta
import logging
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.enums import NotificationEvent
from ..repositories import RepositoryFactory
from ..repositories.booking_repository import BookingRepository
from ..schemas.booking import ReminderSweepResult
from ..utils.time_helpers import ensure_utc, utc_now
from .base import BaseService
from .notification_service import NotificationService

logger = logging.getLogger(__name__)


class ReminderService(BaseService):
    def __init__(
        self,
        db: Session,
        notification_service: Optional[NotificationService] = None,
        booking_repository: Optional[BookingRepository] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        super().__init__(db)
        self.notification_service = notification_service or NotificationService()
        self.booking_repository = (
            booking_repository or RepositoryFactory.create_booking_repository(db)
        )
        self.clock = clock or utc_now

    @BaseService.measure_operation("send_due_reminders")
    def send_due_reminders(self, now: Optional[datetime] = None) -> ReminderSweepResult:
        """
        Remind customers whose rental ends within the lookahead window.

        A failed notification leaves the flag unset so the next sweep retries
        that booking; the remaining bookings are still processed.
        """
        current = ensure_utc(now or self.clock())
        window_end = current + timedelta(minutes=settings.reminder_lookahead_minutes)
        due = self.booking_repository.get_bookings_due_for_reminder(current, window_end)

        sent = 0
        failed = 0
        for booking in due:
            delivered = self.notification_service.notify(
                NotificationEvent.RETRIEVAL_REMINDER,
                booking,
                extra={"end_at": ensure_utc(booking.end_at).isoformat()},
            )
            if not delivered:
                failed += 1
                continue
            with self.transaction():
                booking.reminder_sent = True
            sent += 1

        if due:
            self.logger.info(
                f"Reminder sweep: {sent} sent, {failed} failed of {len(due)} due",
                extra={"sent": sent, "failed": failed, "due": len(due)},
            )
        return ReminderSweepResult(candidates=len(due), reminders_sent=sent, failed_reminders=failed)
