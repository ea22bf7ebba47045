# tractorhire/services/booking_service.py
"""
Booking lifecycle service.

Drives a booking through request, approval, payment, delivery, usage and
completion. Each operation validates the actor and the current state, applies
its changes in one transaction, and only then dispatches notifications.

Approval (including the auto-approval performed when a payment is recorded)
re-checks capacity while holding the per-tractor lock, so two approvals racing
for the last unit cannot both succeed.
"""

from contextlib import nullcontext
from datetime import datetime
import logging
from typing import Callable, Collection, Dict, Iterable, List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.enums import (
    AdminStatus,
    BookingStatus,
    NotificationEvent,
    PaymentMethod,
    PaymentStatus,
    UnitState,
)
from ..core.exceptions import (
    AlreadyFinalizedException,
    BusinessRuleException,
    CapacityExceededException,
    InvalidTransitionException,
    NotFoundException,
)
from ..core.state_machine import ensure_approval_transition, ensure_transition, is_terminal
from ..core.unit_lock import unit_lock
from ..models.booking import Booking
from ..models.tractor import Tractor
from ..principal import Actor
from ..repositories import RepositoryFactory
from ..repositories.booking_repository import BookingRepository
from ..repositories.payment_repository import PaymentRepository
from ..repositories.tractor_repository import TractorRepository
from ..schemas.booking import BookingSnapshot, DeliveryTarget, TransitionResult, UsageDetails
from ..schemas.tracking import DispatchSummary, TrackingPayload
from ..utils.money import format_money, quantize_money
from ..utils.time_helpers import ensure_utc, utc_now
from .access import (
    require_admin,
    require_admin_or_booking_owner,
    require_admin_or_tractor_owner,
    require_booking_owner,
    require_participant,
)
from .availability_service import AvailabilityService, validate_window
from .base import BaseService
from .notification_service import NotificationService
from .pricing_service import PricingService, planned_price
from .refund_policy_engine import cancellation_refund
from .tracking_service import TrackingService

logger = logging.getLogger(__name__)


class BookingService(BaseService):
    def __init__(
        self,
        db: Session,
        notification_service: Optional[NotificationService] = None,
        availability_service: Optional[AvailabilityService] = None,
        pricing_service: Optional[PricingService] = None,
        tracking_service: Optional[TrackingService] = None,
        booking_repository: Optional[BookingRepository] = None,
        tractor_repository: Optional[TractorRepository] = None,
        payment_repository: Optional[PaymentRepository] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize booking service.

        Args:
            db: Database session
            notification_service: Sender of booking notifications (logging only by default)
            availability_service: Capacity resolver for the tractor pools
            pricing_service: Billing rules applied to bookings
            tracking_service: Builder of tracking and dispatch payloads
            clock: Callable returning the current time, UTC
        """
        super().__init__(db)
        self.booking_repository = (
            booking_repository or RepositoryFactory.create_booking_repository(db)
        )
        self.tractor_repository = (
            tractor_repository or RepositoryFactory.create_tractor_repository(db)
        )
        self.payment_repository = (
            payment_repository or RepositoryFactory.create_payment_repository(db)
        )
        self.clock = clock or utc_now
        self.notification_service = notification_service or NotificationService()
        self.availability_service = availability_service or AvailabilityService(
            db,
            booking_repository=self.booking_repository,
            tractor_repository=self.tractor_repository,
        )
        self.pricing_service = pricing_service or PricingService(db)
        self.tracking_service = tracking_service or TrackingService(
            db,
            booking_repository=self.booking_repository,
            tractor_repository=self.tractor_repository,
            clock=self.clock,
        )

    # ------------------------------------------------------------------
    # Lookups and guards
    # ------------------------------------------------------------------

    def _now(self) -> datetime:
        return ensure_utc(self.clock())

    def _get_booking(self, booking_id: str) -> Booking:
        booking = self.booking_repository.get_by_id(booking_id)
        if not booking:
            raise NotFoundException(
                "Booking not found",
                code="BOOKING_NOT_FOUND",
                details={"booking_id": booking_id},
            )
        return booking

    def _get_tractor(self, tractor_id: str) -> Tractor:
        tractor = self.tractor_repository.get_by_id(tractor_id)
        if not tractor:
            raise NotFoundException(
                "Tractor not found",
                code="TRACTOR_NOT_FOUND",
                details={"tractor_id": tractor_id},
            )
        return tractor

    @staticmethod
    def _require_status(booking: Booking, allowed: Collection[BookingStatus], action: str) -> None:
        current = BookingStatus(booking.status)
        if current in allowed:
            return
        if is_terminal(current):
            raise AlreadyFinalizedException(booking.id, current.value)
        raise InvalidTransitionException(
            current.value,
            [s.value for s in allowed],
            message=f"Cannot {action} while booking is {current.value}",
        )

    @staticmethod
    def _require_approved(booking: Booking, action: str) -> None:
        if booking.admin_status != AdminStatus.APPROVED:
            raise InvalidTransitionException(
                booking.admin_status,
                [AdminStatus.APPROVED.value],
                message=f"Cannot {action} before the booking is approved",
                axis="admin_status",
            )

    def _set_status(self, booking: Booking, target: BookingStatus) -> None:
        ensure_transition(booking.id, BookingStatus(booking.status), target)
        booking.status = target.value

    # ------------------------------------------------------------------
    # Side effects
    # ------------------------------------------------------------------

    def _approve_locked(self, booking: Booking) -> None:
        """Capacity re-check plus the APPROVED write. Caller holds the tractor lock."""
        ensure_approval_transition(
            booking.id, AdminStatus(booking.admin_status), AdminStatus.APPROVED
        )
        self.availability_service.ensure_capacity(
            booking.tractor_id,
            booking.start_at,
            booking.end_at,
            exclude_booking_id=booking.id,
        )
        booking.admin_status = AdminStatus.APPROVED.value
        self._apply_destination(booking)

    @staticmethod
    def _apply_destination(booking: Booking) -> None:
        tractor = booking.tractor
        if tractor is not None and booking.has_delivery_target:
            tractor.set_destination(
                booking.delivery_latitude, booking.delivery_longitude, booking.delivery_address
            )

    def _move_to_destination(self, booking: Booking, tractor: Tractor, now: datetime) -> None:
        if tractor.has_position and booking.original_latitude is None:
            booking.original_latitude = tractor.latitude
            booking.original_longitude = tractor.longitude
            booking.original_location = tractor.location

        # The booking's own target wins; the shared destination may belong to a
        # later approval on the same pool.
        if booking.has_delivery_target:
            target = (
                booking.delivery_latitude,
                booking.delivery_longitude,
                booking.delivery_address,
            )
        elif tractor.has_destination:
            target = (
                tractor.destination_latitude,
                tractor.destination_longitude,
                tractor.destination_address,
            )
        else:
            target = None

        if target is not None:
            tractor.latitude, tractor.longitude = target[0], target[1]
            if target[2]:
                tractor.location = target[2]
            tractor.location_updated_at = now
        tractor.clear_destination()

    def _restore_tractor(self, booking: Booking, tractor: Tractor, now: datetime) -> None:
        if booking.original_latitude is not None and booking.original_longitude is not None:
            tractor.latitude = booking.original_latitude
            tractor.longitude = booking.original_longitude
            tractor.location = booking.original_location or settings.default_location
        else:
            tractor.latitude = settings.default_latitude
            tractor.longitude = settings.default_longitude
            tractor.location = settings.default_location
        tractor.location_updated_at = now
        tractor.clear_destination()
        tractor.status = UnitState.AVAILABLE.value
        tractor.available = True

    def _settle_payments(
        self, booking_id: str, from_statuses: Iterable[PaymentStatus], to_status: PaymentStatus
    ) -> None:
        sources = {s.value for s in from_statuses}
        for payment in self.payment_repository.get_for_booking(booking_id):
            if payment.status in sources:
                payment.status = to_status.value

    def _recipients(self, booking: Booking) -> list:
        tractor = booking.tractor
        return [booking.customer_id, tractor.owner_id if tractor is not None else None]

    def _notify(
        self,
        event: NotificationEvent,
        booking: Booking,
        recipients: Optional[Iterable[Optional[str]]] = None,
        extra: Optional[Dict] = None,
    ) -> None:
        self.notification_service.notify(
            event,
            booking,
            recipients=recipients if recipients is not None else self._recipients(booking),
            extra=extra,
        )

    @staticmethod
    def _result(booking: Booking, changed: bool = True, **extra) -> TransitionResult:
        return TransitionResult(
            booking_id=booking.id,
            status=booking.status,
            admin_status=booking.admin_status,
            changed=changed,
            planned_price=booking.planned_price,
            final_price=booking.final_price,
            refund_due=booking.refund_due,
            cancellation_refund=booking.cancellation_refund,
            cancellation_fee=booking.cancellation_fee,
            commission_amount=booking.commission_amount,
            actual_usage_minutes=booking.actual_usage_minutes,
            usage_started_at=(
                ensure_utc(booking.usage_started_at) if booking.usage_started_at else None
            ),
            usage_stopped_at=(
                ensure_utc(booking.usage_stopped_at) if booking.usage_stopped_at else None
            ),
            **extra,
        )

    # ------------------------------------------------------------------
    # Request and approval
    # ------------------------------------------------------------------

    @BaseService.measure_operation("request_booking")
    def request_booking(
        self,
        actor: Actor,
        tractor_id: str,
        start_at: datetime,
        end_at: datetime,
        delivery: Optional[DeliveryTarget] = None,
    ) -> BookingSnapshot:
        """
        Create a booking request in PENDING / PENDING_APPROVAL.

        Raises:
            InvalidWindowException: window reversed or shorter than the minimum
            NotFoundException: tractor does not exist
            CapacityExceededException: request gating is on and no unit is free
        """
        self.log_operation(
            "request_booking",
            customer_id=actor.user_id,
            tractor_id=tractor_id,
            start_at=str(start_at),
            end_at=str(end_at),
        )
        start_at = ensure_utc(start_at)
        end_at = ensure_utc(end_at)
        booked_minutes = validate_window(start_at, end_at, settings.minimum_booking_minutes)
        tractor = self._get_tractor(tractor_id)

        if not self.availability_service.admits_request(tractor_id, start_at, end_at):
            overlapping = self.availability_service.overlapping_approved_count(
                tractor_id, start_at, end_at
            )
            raise CapacityExceededException(tractor_id, tractor.quantity, overlapping)

        price = planned_price(tractor.hourly_rate, start_at, end_at)

        with self.transaction():
            booking = self.booking_repository.create(
                customer_id=actor.user_id,
                tractor_id=tractor.id,
                start_at=start_at,
                end_at=end_at,
                status=BookingStatus.PENDING.value,
                admin_status=AdminStatus.PENDING_APPROVAL.value,
                hourly_rate=quantize_money(tractor.hourly_rate),
                planned_price=price,
                booked_minutes=booked_minutes,
                delivery_latitude=delivery.latitude if delivery else None,
                delivery_longitude=delivery.longitude if delivery else None,
                delivery_address=delivery.address if delivery else None,
                payment_released=False,
                reminder_sent=False,
            )
            self.payment_repository.create(
                booking_id=booking.id,
                amount=price,
                method=PaymentMethod.CASH_ON_DELIVERY.value,
                status=PaymentStatus.PENDING.value,
            )

        self.logger.info(f"Booking {booking.id} requested for tractor {tractor.id}")
        self._notify(NotificationEvent.BOOKING_REQUESTED, booking)
        return BookingSnapshot.model_validate(booking)

    @BaseService.measure_operation("approve_booking")
    def approve_booking(self, actor: Actor, booking_id: str) -> TransitionResult:
        """
        Approve a booking against the tractor's inventory.

        Raises:
            UnauthorizedException: actor is not an administrator
            InvalidTransitionException: booking was already approved or denied
            CapacityExceededException: every unit is taken for the window
            ConflictException: the tractor lock could not be obtained in time
        """
        require_admin(actor, "approve bookings")
        booking = self._get_booking(booking_id)
        self.log_operation("approve_booking", booking_id=booking_id, admin_id=actor.user_id)

        with unit_lock(booking.tractor_id):
            with self.transaction():
                self.db.refresh(booking)
                if is_terminal(BookingStatus(booking.status)):
                    raise AlreadyFinalizedException(booking.id, booking.status)
                self._approve_locked(booking)

        self._notify(NotificationEvent.BOOKING_APPROVED, booking)
        return self._result(booking)

    @BaseService.measure_operation("deny_booking")
    def deny_booking(self, actor: Actor, booking_id: str) -> TransitionResult:
        require_admin(actor, "deny bookings")
        booking = self._get_booking(booking_id)

        with self.transaction():
            ensure_approval_transition(
                booking.id, AdminStatus(booking.admin_status), AdminStatus.DENIED
            )
            booking.admin_status = AdminStatus.DENIED.value

        self.log_operation("deny_booking", booking_id=booking_id, admin_id=actor.user_id)
        self._notify(NotificationEvent.BOOKING_DENIED, booking)
        return self._result(booking)

    # ------------------------------------------------------------------
    # Payment, cancellation and refunds
    # ------------------------------------------------------------------

    @BaseService.measure_operation("mark_paid")
    def mark_paid(self, actor: Actor, booking_id: str) -> TransitionResult:
        """
        Record payment for a booking and approve it if still pending approval.

        The auto-approval runs the same capacity check as ``approve_booking``.
        If it fails nothing is written and the booking stays PENDING.
        Re-marking an already paid, delivered or completed booking is a no-op.
        """
        require_admin(actor, "record payments")
        booking = self._get_booking(booking_id)

        def _pending_work() -> tuple:
            status = BookingStatus(booking.status)
            if status == BookingStatus.CANCELLED:
                raise InvalidTransitionException(
                    status.value,
                    [BookingStatus.PENDING.value],
                    message="Cannot mark a cancelled booking as paid",
                )
            if status == BookingStatus.REFUND_REQUESTED:
                raise InvalidTransitionException(
                    status.value,
                    [BookingStatus.PENDING.value],
                    message="A refund request is open; approve or reject it instead",
                )
            if booking.admin_status == AdminStatus.DENIED:
                raise InvalidTransitionException(
                    booking.admin_status,
                    [AdminStatus.PENDING_APPROVAL.value, AdminStatus.APPROVED.value],
                    message="Cannot take payment for a denied booking",
                    axis="admin_status",
                )
            return (
                status == BookingStatus.PENDING,
                booking.admin_status == AdminStatus.PENDING_APPROVAL,
            )

        needs_payment, needs_approval = _pending_work()
        if not needs_payment and not needs_approval:
            return self._result(booking, changed=False)

        lock = unit_lock(booking.tractor_id) if needs_approval else nullcontext()
        with lock:
            with self.transaction():
                self.db.refresh(booking)
                needs_payment, needs_approval = _pending_work()
                if needs_approval:
                    self._approve_locked(booking)
                if needs_payment:
                    self._set_status(booking, BookingStatus.PAID)
                    self._settle_payments(
                        booking.id, [PaymentStatus.PENDING], PaymentStatus.SUCCESS
                    )

        self.log_operation(
            "mark_paid",
            booking_id=booking_id,
            admin_id=actor.user_id,
            auto_approved=needs_approval,
        )
        if needs_payment:
            self._notify(NotificationEvent.BOOKING_PAID, booking)
        if needs_approval:
            self._notify(NotificationEvent.BOOKING_APPROVED, booking)
        return self._result(booking, changed=needs_payment or needs_approval)

    @BaseService.measure_operation("request_cancellation")
    def request_cancellation(self, actor: Actor, booking_id: str) -> TransitionResult:
        """
        Cancel a pending booking, or open a refund request for a paid one.

        Raises:
            UnauthorizedException: actor is neither the customer nor an administrator
            InvalidTransitionException: booking is delivered or already awaiting a refund
            AlreadyFinalizedException: booking is cancelled or completed
        """
        booking = self._get_booking(booking_id)
        require_admin_or_booking_owner(actor, booking, "cancel")
        self._require_status(
            booking, (BookingStatus.PENDING, BookingStatus.PAID), "request cancellation"
        )

        with self.transaction():
            if booking.status == BookingStatus.PENDING:
                self._set_status(booking, BookingStatus.CANCELLED)
                booking.cancelled_at = self._now()
                self._settle_payments(
                    booking.id, [PaymentStatus.PENDING], PaymentStatus.CANCELLED
                )
                event = NotificationEvent.BOOKING_CANCELLED
            else:
                self._set_status(booking, BookingStatus.REFUND_REQUESTED)
                event = NotificationEvent.REFUND_REQUESTED

        self.log_operation(
            "request_cancellation", booking_id=booking_id, user_id=actor.user_id, result=booking.status
        )
        self._notify(event, booking)
        return self._result(booking)

    @BaseService.measure_operation("approve_refund")
    def approve_refund(self, actor: Actor, booking_id: str) -> TransitionResult:
        require_admin(actor, "approve refunds")
        booking = self._get_booking(booking_id)
        self._require_status(booking, (BookingStatus.REFUND_REQUESTED,), "approve a refund")

        split = cancellation_refund(booking.planned_price)
        with self.transaction():
            self._set_status(booking, BookingStatus.CANCELLED)
            booking.cancellation_refund = split.refund
            booking.cancellation_fee = split.fee
            booking.cancelled_at = self._now()
            self._settle_payments(booking.id, [PaymentStatus.SUCCESS], PaymentStatus.REFUNDED)

        self.log_operation(
            "approve_refund",
            booking_id=booking_id,
            refund=format_money(split.refund),
            fee=str(split.fee),
        )
        self._notify(NotificationEvent.REFUND_APPROVED, booking, extra=split.to_payload())
        return self._result(booking)

    @BaseService.measure_operation("reject_refund")
    def reject_refund(self, actor: Actor, booking_id: str) -> TransitionResult:
        require_admin(actor, "reject refunds")
        booking = self._get_booking(booking_id)
        self._require_status(booking, (BookingStatus.REFUND_REQUESTED,), "reject a refund")

        with self.transaction():
            self._set_status(booking, BookingStatus.PAID)

        self.log_operation("reject_refund", booking_id=booking_id)
        self._notify(NotificationEvent.REFUND_REJECTED, booking)
        return self._result(booking)

    # ------------------------------------------------------------------
    # Delivery and usage
    # ------------------------------------------------------------------

    @BaseService.measure_operation("mark_delivered")
    def mark_delivered(self, actor: Actor, booking_id: str) -> TransitionResult:
        """
        Hand the tractor over to the customer.

        Moves the tractor's recorded position to the delivery destination,
        remembering where it came from, and takes it out of the listing.
        Re-marking a delivered booking is a no-op.
        """
        booking = self._get_booking(booking_id)
        tractor = booking.tractor
        require_admin_or_tractor_owner(actor, tractor, "mark bookings delivered")
        self._require_status(
            booking, (BookingStatus.PAID, BookingStatus.DELIVERED), "mark delivered"
        )
        self._require_approved(booking, "mark delivered")

        if booking.status == BookingStatus.DELIVERED:
            return self._result(booking, changed=False)

        now = self._now()
        with self.transaction():
            self._set_status(booking, BookingStatus.DELIVERED)
            self._move_to_destination(booking, tractor, now)
            tractor.status = UnitState.IN_USE.value
            tractor.available = False

        self.log_operation("mark_delivered", booking_id=booking_id, tractor_id=tractor.id)
        self._notify(NotificationEvent.BOOKING_DELIVERED, booking)
        return self._result(booking)

    @BaseService.measure_operation("start_usage")
    def start_usage(self, actor: Actor, booking_id: str) -> TransitionResult:
        booking = self._get_booking(booking_id)
        require_booking_owner(actor, booking, "start the usage timer")
        self._require_status(booking, (BookingStatus.DELIVERED,), "start usage")
        if booking.usage_started_at is not None:
            raise AlreadyFinalizedException(booking.id, booking.status, field="usage_started_at")

        with self.transaction():
            booking.usage_started_at = self._now()

        self.log_operation("start_usage", booking_id=booking_id)
        return self._result(booking)

    @BaseService.measure_operation("stop_usage")
    def stop_usage(self, actor: Actor, booking_id: str) -> TransitionResult:
        """Stop the usage timer and fix the final price and any refund due."""
        booking = self._get_booking(booking_id)
        require_booking_owner(actor, booking, "stop the usage timer")
        self._require_status(booking, (BookingStatus.DELIVERED,), "stop usage")
        if booking.usage_started_at is None:
            raise BusinessRuleException(
                "Usage has not been started",
                code="USAGE_NOT_STARTED",
                details={"booking_id": booking.id},
            )
        if booking.usage_stopped_at is not None:
            raise AlreadyFinalizedException(booking.id, booking.status, field="usage_stopped_at")

        with self.transaction():
            settlement = self.pricing_service.settle_usage(booking, self._now())

        self.log_operation(
            "stop_usage",
            booking_id=booking_id,
            usage_minutes=settlement.usage_minutes,
            billable_minutes=settlement.billable_minutes,
        )
        return self._result(booking)

    @BaseService.measure_operation("mark_completed")
    def mark_completed(self, actor: Actor, booking_id: str) -> TransitionResult:
        """
        Close a delivered booking.

        A running usage timer must be stopped first. When usage was never
        started the planned price becomes the final price. The commission is
        computed here, once, and the tractor returns to where it started.
        """
        booking = self._get_booking(booking_id)
        tractor = booking.tractor
        require_admin_or_tractor_owner(actor, tractor, "complete bookings")
        self._require_status(booking, (BookingStatus.DELIVERED,), "complete")
        if booking.usage_running:
            raise BusinessRuleException(
                "Stop the usage timer before completing the booking",
                code="USAGE_RUNNING",
                details={"booking_id": booking.id},
            )

        now = self._now()
        with self.transaction():
            self.pricing_service.settle_completion(booking)
            self._set_status(booking, BookingStatus.COMPLETED)
            booking.completed_at = now
            if tractor is not None:
                self._restore_tractor(booking, tractor, now)

        self.log_operation(
            "mark_completed",
            booking_id=booking_id,
            final_price=format_money(booking.final_price),
            commission=format_money(booking.commission_amount),
        )
        self._notify(NotificationEvent.BOOKING_COMPLETED, booking)
        return self._result(booking)

    @BaseService.measure_operation("release_payment")
    def release_payment(self, actor: Actor, booking_id: str) -> TransitionResult:
        """Mark the owner's share of a completed booking as paid out."""
        require_admin(actor, "release payments")
        booking = self._get_booking(booking_id)
        self._require_status(booking, (BookingStatus.COMPLETED,), "release payment")
        if booking.payment_released:
            raise AlreadyFinalizedException(booking.id, booking.status, field="payment_released")

        payout = self.pricing_service.owner_payout(booking)
        with self.transaction():
            booking.payment_released = True

        self.log_operation(
            "release_payment", booking_id=booking_id, owner_payout=format_money(payout)
        )
        tractor = booking.tractor
        self._notify(
            NotificationEvent.PAYMENT_RELEASED,
            booking,
            recipients=[tractor.owner_id if tractor is not None else None],
            extra={"owner_payout": format_money(payout)},
        )
        return self._result(booking, owner_payout=payout)

    # ------------------------------------------------------------------
    # Queries and housekeeping
    # ------------------------------------------------------------------

    @BaseService.measure_operation("get_usage_details")
    def get_usage_details(self, actor: Actor, booking_id: str) -> UsageDetails:
        booking = self._get_booking(booking_id)
        require_participant(actor, booking, booking.tractor, "view usage")
        return UsageDetails(**self.pricing_service.usage_breakdown(booking, self._now()))

    @BaseService.measure_operation("list_customer_bookings")
    def list_customer_bookings(self, actor: Actor) -> List[BookingSnapshot]:
        """The actor's own bookings, latest window first."""
        bookings = self.booking_repository.get_customer_bookings(actor.user_id)
        return [BookingSnapshot.model_validate(b) for b in bookings]

    @BaseService.measure_operation("list_tractor_bookings")
    def list_tractor_bookings(self, actor: Actor, tractor_id: str) -> List[BookingSnapshot]:
        tractor = self._get_tractor(tractor_id)
        require_admin_or_tractor_owner(actor, tractor, "view tractor bookings")
        bookings = self.booking_repository.get_tractor_bookings(tractor.id)
        return [BookingSnapshot.model_validate(b) for b in bookings]

    @BaseService.measure_operation("list_owner_bookings")
    def list_owner_bookings(self, actor: Actor) -> List[BookingSnapshot]:
        """Bookings across every tractor the actor owns, grouped by tractor name."""
        snapshots: List[BookingSnapshot] = []
        for tractor in self.tractor_repository.get_owned_by(actor.user_id):
            snapshots.extend(
                BookingSnapshot.model_validate(b)
                for b in self.booking_repository.get_tractor_bookings(tractor.id)
            )
        return snapshots

    @BaseService.measure_operation("get_tractor_booking_summary")
    def get_tractor_booking_summary(self, actor: Actor, tractor_id: str) -> Dict[str, int]:
        """Booking counts per status for one tractor, zero-filled."""
        tractor = self._get_tractor(tractor_id)
        require_admin_or_tractor_owner(actor, tractor, "view tractor booking summary")
        counts = self.booking_repository.count_by_status(tractor.id)
        return {status.value: counts.get(status.value, 0) for status in BookingStatus}

    @BaseService.measure_operation("delete_booking")
    def delete_booking(self, actor: Actor, booking_id: str) -> bool:
        """
        Remove a booking and its payment records.

        Raises:
            BusinessRuleException: a payment for the booking is still pending
        """
        require_admin(actor, "delete bookings")
        booking = self._get_booking(booking_id)
        if self.payment_repository.has_pending_payment(booking.id):
            raise BusinessRuleException(
                "Booking has an outstanding payment and cannot be deleted",
                code="PAYMENT_OUTSTANDING",
                details={"booking_id": booking.id},
            )

        with self.transaction():
            deleted = self.booking_repository.delete(booking.id)

        self.log_operation("delete_booking", booking_id=booking_id, admin_id=actor.user_id)
        return deleted

    def get_tracking_payload(self, actor: Actor, booking_id: str) -> TrackingPayload:
        return self.tracking_service.get_booking_tracking(actor, booking_id)

    def get_latest_dispatch(self) -> DispatchSummary:
        return self.tracking_service.get_latest_dispatch()
