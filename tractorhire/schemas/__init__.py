from .booking import (
    BookingSnapshot,
    DeliveryTarget,
    ReminderSweepResult,
    TransitionResult,
    UsageDetails,
)
from .tracking import DeliveryWindow, DispatchSummary, LocationPoint, TrackingPayload

__all__ = [
    "BookingSnapshot",
    "DeliveryTarget",
    "DeliveryWindow",
    "DispatchSummary",
    "LocationPoint",
    "ReminderSweepResult",
    "TrackingPayload",
    "TransitionResult",
    "UsageDetails",
]
