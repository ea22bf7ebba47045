# tractorhire/repositories/factory.py
"""
Repository factory.

Services obtain their repositories here so that tests can patch a single
creation point.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

if TYPE_CHECKING:
    from .booking_repository import BookingRepository
    from .payment_repository import PaymentRepository
    from .tractor_repository import TractorRepository


class RepositoryFactory:
    @staticmethod
    def create_booking_repository(db: Session) -> "BookingRepository":
        from .booking_repository import BookingRepository

        return BookingRepository(db)

    @staticmethod
    def create_tractor_repository(db: Session) -> "TractorRepository":
        from .tractor_repository import TractorRepository

        return TractorRepository(db)

    @staticmethod
    def create_payment_repository(db: Session) -> "PaymentRepository":
        from .payment_repository import PaymentRepository

        return PaymentRepository(db)
