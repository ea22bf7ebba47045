"""Application-wide constants for the tractor hire booking engine."""

from __future__ import annotations

# Billing
MINIMUM_CHARGE_MINUTES = 30  # usage shorter than this is billed as this
MIN_BOOKING_MINUTES = 30  # shortest window a customer may request
COMMISSION_RATE = 0.15  # platform share of a completed booking's final price
CANCELLATION_FEE_RATE = 0.03  # kept by the platform when a paid booking is refunded

# Dispatch estimation
EARTH_RADIUS_KM = 6371.0
DEFAULT_AVERAGE_SPEED_KPH = 25.0

# Reset codes
RESET_CODE_DIGITS = 6
