import logging
from typing import List

from sqlalchemy.orm import Session

from ..core.enums import PaymentStatus
from ..core.exceptions import RepositoryException
from ..models.payment import BookingPayment
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class PaymentRepository(BaseRepository[BookingPayment]):
    def __init__(self, db: Session):
        super().__init__(db, BookingPayment)

    def get_for_booking(self, booking_id: str) -> List[BookingPayment]:
        try:
            return (
                self.db.query(BookingPayment)
                .filter(BookingPayment.booking_id == booking_id)
                .order_by(BookingPayment.created_at, BookingPayment.id)
                .all()
            )
        except Exception as e:
            self.logger.error(f"Error getting payments for booking {booking_id}: {str(e)}")
            raise RepositoryException(f"Failed to get booking payments: {str(e)}")

    def has_pending_payment(self, booking_id: str) -> bool:
        return self.exists(booking_id=booking_id, status=PaymentStatus.PENDING.value)
