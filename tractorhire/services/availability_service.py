# tractorhire/services/availability_service.py
"""
Availability resolver for pooled tractor inventory.

A tractor listing holds ``quantity`` identical units. A window can be granted
while the number of approved, still-active bookings overlapping it stays below
that quantity. Pending requests never consume a unit; only approval does.
"""

from datetime import datetime
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import (
    CapacityExceededException,
    InvalidWindowException,
    NotFoundException,
)
from ..models.tractor import Tractor
from ..repositories import RepositoryFactory
from ..repositories.booking_repository import BookingRepository
from ..repositories.tractor_repository import TractorRepository
from ..utils.time_helpers import ensure_utc, isoformat_or_none, minutes_between
from .base import BaseService

logger = logging.getLogger(__name__)


def windows_overlap(
    a_start: datetime, a_end: datetime, b_start: datetime, b_end: datetime
) -> bool:
    """Half-open overlap: windows that only touch at an endpoint do not collide."""
    return ensure_utc(a_start) < ensure_utc(b_end) and ensure_utc(b_start) < ensure_utc(a_end)


def validate_window(
    start_at: datetime, end_at: datetime, minimum_minutes: Optional[int] = None
) -> int:
    """
    Check that ``start_at < end_at`` and, when given, that the window is at
    least ``minimum_minutes`` long. Returns the window length in minutes.
    """
    details = {"start_at": isoformat_or_none(start_at), "end_at": isoformat_or_none(end_at)}
    if ensure_utc(start_at) >= ensure_utc(end_at):
        raise InvalidWindowException("Booking end must be after its start", details=details)
    minutes = minutes_between(start_at, end_at)
    if minimum_minutes is not None and minutes < minimum_minutes:
        raise InvalidWindowException(
            f"Minimum booking time is {minimum_minutes} minutes",
            details={**details, "minutes": minutes, "minimum_minutes": minimum_minutes},
        )
    return minutes


class AvailabilityService(BaseService):
    def __init__(
        self,
        db: Session,
        booking_repository: Optional[BookingRepository] = None,
        tractor_repository: Optional[TractorRepository] = None,
    ):
        super().__init__(db)
        self.booking_repository = (
            booking_repository or RepositoryFactory.create_booking_repository(db)
        )
        self.tractor_repository = (
            tractor_repository or RepositoryFactory.create_tractor_repository(db)
        )

    def _get_tractor(self, tractor_id: str) -> Tractor:
        tractor = self.tractor_repository.get_by_id(tractor_id)
        if not tractor:
            raise NotFoundException(
                "Tractor not found",
                code="TRACTOR_NOT_FOUND",
                details={"tractor_id": tractor_id},
            )
        return tractor

    def overlapping_approved_count(
        self,
        tractor_id: str,
        start_at: datetime,
        end_at: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> int:
        return self.booking_repository.count_overlapping_approved(
            tractor_id, start_at, end_at, exclude_booking_id
        )

    @BaseService.measure_operation("can_accept")
    def can_accept(
        self,
        tractor_id: str,
        start_at: datetime,
        end_at: datetime,
        quantity: Optional[int] = None,
        exclude_booking_id: Optional[str] = None,
    ) -> bool:
        """
        Whether one more booking for the window fits the tractor's inventory.

        Raises:
            NotFoundException: tractor does not exist
            InvalidWindowException: window is empty or reversed
        """
        tractor = self._get_tractor(tractor_id)
        validate_window(start_at, end_at)
        capacity = tractor.quantity if quantity is None else quantity
        overlapping = self.overlapping_approved_count(
            tractor_id, start_at, end_at, exclude_booking_id
        )
        return overlapping < capacity

    def ensure_capacity(
        self,
        tractor_id: str,
        start_at: datetime,
        end_at: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> int:
        """
        Raise ``CapacityExceededException`` if the window is fully booked.

        Returns the number of overlapping approved bookings found.
        """
        tractor = self._get_tractor(tractor_id)
        validate_window(start_at, end_at)
        overlapping = self.overlapping_approved_count(
            tractor_id, start_at, end_at, exclude_booking_id
        )
        if overlapping >= tractor.quantity:
            conflicts = self.booking_repository.get_overlapping_approved(
                tractor_id, start_at, end_at, exclude_booking_id
            )
            self.logger.info(
                "Capacity exhausted",
                extra={
                    "tractor_id": tractor_id,
                    "quantity": tractor.quantity,
                    "overlapping": overlapping,
                },
            )
            raise CapacityExceededException(
                tractor_id, tractor.quantity, overlapping, [b.id for b in conflicts]
            )
        return overlapping

    def free_units(self, tractor_id: str, start_at: datetime, end_at: datetime) -> int:
        tractor = self._get_tractor(tractor_id)
        validate_window(start_at, end_at)
        overlapping = self.overlapping_approved_count(tractor_id, start_at, end_at)
        return max(0, tractor.quantity - overlapping)

    def admits_request(self, tractor_id: str, start_at: datetime, end_at: datetime) -> bool:
        """Creation-time admission; always true unless request gating is enabled."""
        if not settings.gate_capacity_at_request:
            return True
        return self.free_units(tractor_id, start_at, end_at) > 0

    @BaseService.measure_operation("available_tractors")
    def available_tractors(self, start_at: datetime, end_at: datetime) -> List[Tractor]:
        """Listed tractors with at least one unit free for the whole window."""
        validate_window(start_at, end_at)
        return [
            tractor
            for tractor in self.tractor_repository.get_listed()
            if self.overlapping_approved_count(tractor.id, start_at, end_at) < tractor.quantity
        ]
