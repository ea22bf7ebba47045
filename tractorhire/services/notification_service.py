# tractorhire/services/notification_service.py
"""
Notification dispatch for booking events.

Delivery (email, SMS, push) lives outside the engine behind a
``NotificationSender``. Dispatch is fire-and-forget: a sender failure is
logged and counted, and never propagates into the booking transition that
triggered it.
"""

import logging
from typing import Any, Dict, Iterable, Optional, Protocol

from ..core.enums import NotificationEvent
from ..models.booking import Booking
from ..monitoring.prometheus_metrics import prometheus_metrics

logger = logging.getLogger(__name__)


class NotificationSender(Protocol):
    def send(self, event: NotificationEvent, recipient_id: str, payload: Dict[str, Any]) -> None:
        ...


class LoggingNotificationSender:
    """Default sender that only records the intent in the log."""

    def send(self, event: NotificationEvent, recipient_id: str, payload: Dict[str, Any]) -> None:
        logger.info(
            f"Notification {event.value} for {recipient_id}",
            extra={"event": event.value, "recipient_id": recipient_id, **payload},
        )


class NotificationService:
    def __init__(self, sender: Optional[NotificationSender] = None):
        self.sender = sender or LoggingNotificationSender()
        self.logger = logging.getLogger(__name__)

    @staticmethod
    def _payload(booking: Booking, extra: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "booking_id": booking.id,
            "tractor_id": booking.tractor_id,
            "status": booking.status,
            "admin_status": booking.admin_status,
        }
        if extra:
            payload.update(extra)
        return payload

    def notify(
        self,
        event: NotificationEvent,
        booking: Booking,
        recipients: Optional[Iterable[Optional[str]]] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Send ``event`` about ``booking`` to each recipient (the customer by default).

        Returns:
            True if every recipient was notified, False if any send failed
        """
        targets = [r for r in (recipients or [booking.customer_id]) if r]
        payload = self._payload(booking, extra)
        all_sent = True
        for recipient_id in dict.fromkeys(targets):
            try:
                self.sender.send(event, recipient_id, payload)
                prometheus_metrics.record_notification(event.value, "sent")
            except Exception as e:
                all_sent = False
                prometheus_metrics.record_notification(event.value, "failed")
                self.logger.error(
                    f"Failed to send {event.value} notification for booking {booking.id}: {str(e)}",
                    extra={"booking_id": booking.id, "recipient_id": recipient_id},
                )
        return all_sent
