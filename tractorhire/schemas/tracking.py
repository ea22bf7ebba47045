"""Tracking and dispatch payloads."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from ._strict_base import StrictModel


class LocationPoint(StrictModel):
    latitude: float
    longitude: float
    address: Optional[str] = None
    updated_at: Optional[datetime] = None


class DeliveryWindow(StrictModel):
    start_at: datetime
    end_at: datetime


class TrackingPayload(StrictModel):
    tractor_id: str
    tractor_name: str
    status: str
    current_location: Optional[LocationPoint] = None
    destination: Optional[LocationPoint] = None
    original_location: Optional[LocationPoint] = None
    distance_km: Optional[float] = None
    eta_minutes: Optional[int] = None
    route: List[List[float]] = []
    booking_id: Optional[str] = None
    booking_status: Optional[str] = None
    admin_status: Optional[str] = None
    delivery_window: Optional[DeliveryWindow] = None
    delivery_address: Optional[str] = None


class DispatchSummary(StrictModel):
    has_data: bool
    booking_id: Optional[str] = None
    tractor_name: Optional[str] = None
    status: Optional[str] = None
    distance_km: Optional[float] = None
    eta_minutes: Optional[int] = None
    current_location: Optional[LocationPoint] = None
    destination: Optional[LocationPoint] = None
    terrain: Optional[str] = None
