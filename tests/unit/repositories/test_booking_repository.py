"""
Booking repository queries: approved overlap, reminder selection, tracking
selection and latest dispatch.
"""

from datetime import timedelta, timezone

import pytest

from tractorhire.core.enums import AdminStatus, BookingStatus, PaymentStatus
from tractorhire.repositories import RepositoryFactory


@pytest.fixture
def repo(unit_db):
    return RepositoryFactory.create_booking_repository(unit_db)


@pytest.fixture
def approved(make_booking, tractor):
    def _make(start, end, **overrides):
        return make_booking(
            tractor, start, end, admin_status=AdminStatus.APPROVED.value, **overrides
        )

    return _make


class TestOverlapQuery:
    def test_counts_only_overlapping_approved(self, repo, tractor, approved, make_booking, at):
        hit = approved(at(9), at(12))
        approved(at(12), at(13))  # touches the end
        approved(at(7), at(9))  # touches the start
        make_booking(tractor, at(10), at(11))  # pending approval

        assert repo.count_overlapping_approved(tractor.id, at(9), at(12)) == 1
        assert [b.id for b in repo.get_overlapping_approved(tractor.id, at(9), at(12))] == [
            hit.id
        ]

    def test_excludes_candidate(self, repo, tractor, approved, at):
        booking = approved(at(9), at(12))
        assert repo.count_overlapping_approved(tractor.id, at(9), at(12), booking.id) == 0

    def test_released_statuses_are_ignored(self, repo, tractor, approved, at):
        approved(at(9), at(12), status=BookingStatus.COMPLETED.value)
        approved(at(9), at(12), status=BookingStatus.CANCELLED.value)
        approved(at(9), at(12), status=BookingStatus.DELIVERED.value)
        assert repo.count_overlapping_approved(tractor.id, at(10), at(11)) == 1

    def test_offset_inputs_are_normalised(self, repo, tractor, approved, at):
        approved(at(9), at(12))
        kathmandu = timezone(timedelta(hours=5, minutes=45))
        start = at(11).astimezone(kathmandu)
        end = at(13).astimezone(kathmandu)
        assert repo.count_overlapping_approved(tractor.id, start, end) == 1
        assert repo.count_overlapping_approved(
            tractor.id, at(12).astimezone(kathmandu), end
        ) == 0


class TestSelections:
    def test_customer_and_tractor_listings(self, repo, tractor, make_booking, at):
        early = make_booking(tractor, at(8), at(9))
        late = make_booking(tractor, at(15), at(16))
        make_booking(tractor, at(11), at(12), customer_id="customer-2")

        assert [b.id for b in repo.get_customer_bookings("customer-1")] == [late.id, early.id]
        assert len(repo.get_tractor_bookings(tractor.id)) == 3

    def test_reminder_window_is_inclusive(self, repo, approved, at):
        edge = approved(at(8), at(10, 30), status=BookingStatus.PAID.value)
        found = repo.get_bookings_due_for_reminder(at(10), at(10, 30))
        assert [b.id for b in found] == [edge.id]

    def test_active_tracking_excludes_finished(self, repo, tractor, approved, at):
        live = approved(at(9), at(12), status=BookingStatus.DELIVERED.value)
        approved(at(13), at(14), status=BookingStatus.COMPLETED.value)
        approved(at(15), at(16), status=BookingStatus.REFUND_REQUESTED.value)
        assert [b.id for b in repo.get_active_tracking_bookings(tractor.id)] == [live.id]

    def test_latest_with_delivery_target(self, repo, tractor, make_booking, at):
        assert repo.get_latest_with_delivery_target() is None
        make_booking(tractor, at(16), at(18))  # no target
        target = make_booking(
            tractor, at(12), at(14), delivery_latitude=27.7, delivery_longitude=85.3
        )
        assert repo.get_latest_with_delivery_target().id == target.id

    def test_count_by_status(self, repo, tractor, make_booking, at):
        make_booking(tractor, at(8), at(9))
        make_booking(tractor, at(9), at(10))
        make_booking(tractor, at(10), at(11), status=BookingStatus.PAID.value)
        assert repo.count_by_status(tractor.id) == {"PENDING": 2, "PAID": 1}


class TestPaymentRepository:
    def test_pending_payment_detection(self, unit_db, tractor, make_booking, at):
        payments = RepositoryFactory.create_payment_repository(unit_db)
        pending = make_booking(tractor, at(8), at(9))
        settled = make_booking(tractor, at(9), at(10), payment_status=PaymentStatus.SUCCESS.value)

        assert payments.has_pending_payment(pending.id)
        assert not payments.has_pending_payment(settled.id)
        assert [p.status for p in payments.get_for_booking(settled.id)] == [
            PaymentStatus.SUCCESS.value
        ]
        assert payments.get_for_booking("missing") == []


class TestTractorRepository:
    def test_owned_and_listed(self, unit_db, make_tractor):
        tractors = RepositoryFactory.create_tractor_repository(unit_db)
        mine = make_tractor()
        make_tractor(owner_id="owner-2")
        hidden = make_tractor(available=False)

        assert {t.id for t in tractors.get_owned_by("owner-1")} == {mine.id, hidden.id}
        assert hidden.id not in {t.id for t in tractors.get_listed()}
