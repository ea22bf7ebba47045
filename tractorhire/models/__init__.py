"""ORM models; importing this package registers every table on ``Base.metadata``."""

from .booking import MINIMUM_CHARGE_MINUTES, Booking
from .payment import BookingPayment
from .tractor import Tractor

__all__ = ["Booking", "BookingPayment", "MINIMUM_CHARGE_MINUTES", "Tractor"]
