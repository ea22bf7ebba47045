from .base_repository import BaseRepository
from .booking_repository import BookingRepository
from .factory import RepositoryFactory
from .payment_repository import PaymentRepository
from .tractor_repository import TractorRepository

__all__ = [
    "BaseRepository",
    "BookingRepository",
    "PaymentRepository",
    "RepositoryFactory",
    "TractorRepository",
]
