"""
Retrieval reminder sweep.
"""

from unittest.mock import MagicMock

import pytest

from tractorhire.core.enums import AdminStatus, BookingStatus, NotificationEvent
from tractorhire.services.notification_service import NotificationService
from tractorhire.services.reminder_service import ReminderService


@pytest.fixture
def sender():
    return MagicMock()


@pytest.fixture
def service(unit_db, sender, clock):
    return ReminderService(unit_db, notification_service=NotificationService(sender), clock=clock)


@pytest.fixture
def make_active(make_booking, tractor):
    def _make(start, end, **overrides):
        data = {"admin_status": AdminStatus.APPROVED.value, "status": BookingStatus.PAID.value}
        data.update(overrides)
        return make_booking(tractor, start, end, **data)

    return _make


class TestSendDueReminders:
    def test_reminds_bookings_ending_within_lookahead(self, service, unit_db, sender, make_active, at):
        # Clock is 10:00; the lookahead is 30 minutes.
        due = make_active(at(8), at(10, 20))
        make_active(at(8), at(11))
        make_active(at(7), at(9, 50))

        result = service.send_due_reminders()

        assert result.candidates == 1
        assert result.reminders_sent == 1
        assert result.failed_reminders == 0
        unit_db.refresh(due)
        assert due.reminder_sent is True
        event, recipient, payload = sender.send.call_args.args
        assert event == NotificationEvent.RETRIEVAL_REMINDER
        assert recipient == "customer-1"
        assert payload["booking_id"] == due.id

    def test_sweep_is_idempotent(self, service, sender, make_active, at):
        make_active(at(8), at(10, 20))
        service.send_due_reminders()
        sender.reset_mock()

        result = service.send_due_reminders()
        assert result.candidates == 0
        sender.send.assert_not_called()

    @pytest.mark.parametrize(
        "overrides",
        [
            {"admin_status": AdminStatus.PENDING_APPROVAL.value},
            {"status": BookingStatus.PENDING.value},
            {"status": BookingStatus.COMPLETED.value},
            {"status": BookingStatus.CANCELLED.value},
            {"reminder_sent": True},
        ],
    )
    def test_ineligible_bookings_are_skipped(self, service, make_active, at, overrides):
        make_active(at(8), at(10, 20), **overrides)
        assert service.send_due_reminders().candidates == 0

    def test_delivered_bookings_are_reminded(self, service, make_active, at):
        make_active(at(8), at(10, 20), status=BookingStatus.DELIVERED.value)
        assert service.send_due_reminders().reminders_sent == 1

    def test_failure_leaves_flag_unset_and_continues(self, service, unit_db, sender, make_active, at):
        first = make_active(at(8), at(10, 5))
        second = make_active(at(8), at(10, 15), customer_id="customer-2")

        def flaky_send(event, recipient, payload):
            if recipient == "customer-1":
                raise RuntimeError("sms gateway down")

        sender.send.side_effect = flaky_send

        result = service.send_due_reminders()

        assert result.candidates == 2
        assert result.reminders_sent == 1
        assert result.failed_reminders == 1
        unit_db.refresh(first)
        unit_db.refresh(second)
        assert first.reminder_sent is False
        assert second.reminder_sent is True

    def test_explicit_now(self, service, make_active, at):
        make_active(at(8), at(15, 10))
        assert service.send_due_reminders(now=at(15)).reminders_sent == 1
