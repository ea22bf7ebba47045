from .availability_service import AvailabilityService
from .base import BaseService
from .booking_service import BookingService
from .notification_service import NotificationService
from .pricing_service import PricingService
from .reminder_service import ReminderService
from .reset_code_service import ResetCodeService
from .tracking_service import TrackingService

__all__ = [
    "AvailabilityService",
    "BaseService",
    "BookingService",
    "NotificationService",
    "PricingService",
    "ReminderService",
    "ResetCodeService",
    "TrackingService",
]
