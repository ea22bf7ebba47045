# tractorhire/repositories/booking_repository.py
"""
Booking repository.

Holds the overlap query behind the availability resolver and the selection
queries used by the reminder sweep and the tracking payloads. All window
parameters are normalised to UTC before they reach the database.
"""

from datetime import datetime
import logging
from typing import List, Optional

from sqlalchemy import and_, func
from sqlalchemy.orm import Session

from ..core.enums import AdminStatus, BookingStatus
from ..core.exceptions import RepositoryException
from ..models.booking import Booking
from ..utils.time_helpers import ensure_utc
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

# Approved bookings in these statuses no longer hold inventory.
RELEASED_STATUSES = (BookingStatus.CANCELLED.value, BookingStatus.COMPLETED.value)

TRACKABLE_STATUSES = (
    BookingStatus.PENDING.value,
    BookingStatus.PAID.value,
    BookingStatus.DELIVERED.value,
)

REMINDER_STATUSES = (BookingStatus.PAID.value, BookingStatus.DELIVERED.value)


class BookingRepository(BaseRepository[Booking]):
    def __init__(self, db: Session):
        super().__init__(db, Booking)
        self.logger = logging.getLogger(__name__)

    def _approved_overlap_query(
        self,
        tractor_id: str,
        start_at: datetime,
        end_at: datetime,
        exclude_booking_id: Optional[str] = None,
    ):
        query = self.db.query(Booking).filter(
            Booking.tractor_id == tractor_id,
            Booking.admin_status == AdminStatus.APPROVED.value,
            Booking.status.notin_(RELEASED_STATUSES),
            # Half-open overlap; touching windows do not collide
            Booking.start_at < ensure_utc(end_at),
            Booking.end_at > ensure_utc(start_at),
        )
        if exclude_booking_id:
            query = query.filter(Booking.id != exclude_booking_id)
        return query

    def count_overlapping_approved(
        self,
        tractor_id: str,
        start_at: datetime,
        end_at: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> int:
        """
        Count approved bookings on the tractor whose window overlaps ``[start_at, end_at)``.

        Args:
            tractor_id: The tractor pool to check
            start_at: Window start
            end_at: Window end
            exclude_booking_id: The candidate booking, never counted against itself

        Returns:
            Number of overlapping approved bookings still holding a unit
        """
        try:
            return self._approved_overlap_query(
                tractor_id, start_at, end_at, exclude_booking_id
            ).count()
        except Exception as e:
            self.logger.error(f"Error counting overlapping bookings: {str(e)}")
            raise RepositoryException(f"Failed to count overlapping bookings: {str(e)}")

    def get_overlapping_approved(
        self,
        tractor_id: str,
        start_at: datetime,
        end_at: datetime,
        exclude_booking_id: Optional[str] = None,
    ) -> List[Booking]:
        try:
            return (
                self._approved_overlap_query(tractor_id, start_at, end_at, exclude_booking_id)
                .order_by(Booking.start_at)
                .all()
            )
        except Exception as e:
            self.logger.error(f"Error listing overlapping bookings: {str(e)}")
            raise RepositoryException(f"Failed to list overlapping bookings: {str(e)}")

    def get_customer_bookings(self, customer_id: str) -> List[Booking]:
        try:
            return (
                self.db.query(Booking)
                .filter(Booking.customer_id == customer_id)
                .order_by(Booking.start_at.desc())
                .all()
            )
        except Exception as e:
            self.logger.error(f"Error getting customer bookings: {str(e)}")
            raise RepositoryException(f"Failed to get customer bookings: {str(e)}")

    def get_tractor_bookings(self, tractor_id: str) -> List[Booking]:
        try:
            return (
                self.db.query(Booking)
                .filter(Booking.tractor_id == tractor_id)
                .order_by(Booking.start_at)
                .all()
            )
        except Exception as e:
            self.logger.error(f"Error getting tractor bookings: {str(e)}")
            raise RepositoryException(f"Failed to get tractor bookings: {str(e)}")

    def get_bookings_due_for_reminder(
        self, window_start: datetime, window_end: datetime
    ) -> List[Booking]:
        """
        Approved, paid or delivered bookings ending within ``[window_start, window_end]``
        that have not been reminded yet.
        """
        try:
            return (
                self.db.query(Booking)
                .filter(
                    and_(
                        Booking.admin_status == AdminStatus.APPROVED.value,
                        Booking.status.in_(REMINDER_STATUSES),
                        Booking.reminder_sent.is_(False),
                        Booking.end_at >= ensure_utc(window_start),
                        Booking.end_at <= ensure_utc(window_end),
                    )
                )
                .order_by(Booking.end_at)
                .all()
            )
        except Exception as e:
            self.logger.error(f"Error getting bookings due for reminder: {str(e)}")
            raise RepositoryException(f"Failed to get bookings due for reminder: {str(e)}")

    def get_active_tracking_bookings(self, tractor_id: Optional[str] = None) -> List[Booking]:
        """Approved bookings that still have a delivery or usage ahead, soonest end first."""
        try:
            query = self.db.query(Booking).filter(
                Booking.admin_status == AdminStatus.APPROVED.value,
                Booking.status.in_(TRACKABLE_STATUSES),
            )
            if tractor_id:
                query = query.filter(Booking.tractor_id == tractor_id)
            return query.order_by(Booking.end_at).all()
        except Exception as e:
            self.logger.error(f"Error getting tracking bookings: {str(e)}")
            raise RepositoryException(f"Failed to get tracking bookings: {str(e)}")

    def get_latest_with_delivery_target(self) -> Optional[Booking]:
        try:
            return (
                self.db.query(Booking)
                .filter(
                    Booking.delivery_latitude.isnot(None),
                    Booking.delivery_longitude.isnot(None),
                )
                .order_by(Booking.start_at.desc(), Booking.id.desc())
                .first()
            )
        except Exception as e:
            self.logger.error(f"Error getting latest dispatch booking: {str(e)}")
            raise RepositoryException(f"Failed to get latest dispatch booking: {str(e)}")

    def count_by_status(self, tractor_id: str) -> dict[str, int]:
        try:
            rows = (
                self.db.query(Booking.status, func.count(Booking.id))
                .filter(Booking.tractor_id == tractor_id)
                .group_by(Booking.status)
                .all()
            )
            return {status: count for status, count in rows}
        except Exception as e:
            self.logger.error(f"Error counting bookings by status: {str(e)}")
            raise RepositoryException(f"Failed to count bookings: {str(e)}")
