# tractorhire/services/tracking_service.py
"""
Tracking payloads for tractors on their way to a delivery.

Distances are straight-line haversine estimates between the tractor's last
reported position and its destination; the route is the two-point segment
between them. Nothing here calls out to the network.
"""

from datetime import datetime
import logging
from typing import Callable, Optional

from sqlalchemy.orm import Session

from ..core.exceptions import NotFoundException, ValidationException
from ..models.booking import Booking
from ..models.tractor import Tractor
from ..principal import Actor
from ..repositories import RepositoryFactory
from ..repositories.booking_repository import BookingRepository
from ..repositories.tractor_repository import TractorRepository
from ..schemas.tracking import DeliveryWindow, DispatchSummary, LocationPoint, TrackingPayload
from ..utils.time_helpers import ensure_utc, utc_now
from .access import require_admin_or_tractor_owner, require_participant
from .base import BaseService
from .dispatch_estimator import distance_km, eta_minutes, route_distance_km, straight_route

logger = logging.getLogger(__name__)

DEFAULT_DISPATCH_NAME = "Active Tractor"


def _terrain_label(address: Optional[str]) -> str:
    return "Hill terrain" if address and "hill" in address.lower() else "Mixed terrain"


class TrackingService(BaseService):
    def __init__(
        self,
        db: Session,
        booking_repository: Optional[BookingRepository] = None,
        tractor_repository: Optional[TractorRepository] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        super().__init__(db)
        self.booking_repository = (
            booking_repository or RepositoryFactory.create_booking_repository(db)
        )
        self.tractor_repository = (
            tractor_repository or RepositoryFactory.create_tractor_repository(db)
        )
        self.clock = clock or utc_now

    @staticmethod
    def _current_location(tractor: Tractor) -> Optional[LocationPoint]:
        if not tractor.has_position:
            return None
        return LocationPoint(
            latitude=tractor.latitude,
            longitude=tractor.longitude,
            address=tractor.location,
            updated_at=(
                ensure_utc(tractor.location_updated_at) if tractor.location_updated_at else None
            ),
        )

    def build_payload(self, tractor: Tractor, booking: Optional[Booking] = None) -> TrackingPayload:
        current = self._current_location(tractor)
        payload = TrackingPayload(
            tractor_id=tractor.id,
            tractor_name=tractor.name,
            status=tractor.status,
            current_location=current,
        )

        if tractor.has_destination:
            payload.destination = LocationPoint(
                latitude=tractor.destination_latitude,
                longitude=tractor.destination_longitude,
                address=tractor.destination_address,
            )
            if current is not None:
                route = straight_route(
                    (tractor.latitude, tractor.longitude),
                    (tractor.destination_latitude, tractor.destination_longitude),
                )
                km = route_distance_km(route)
                payload.route = route
                payload.distance_km = km
                payload.eta_minutes = eta_minutes(km)

        if booking is not None:
            payload.booking_id = booking.id
            payload.booking_status = booking.status
            payload.admin_status = booking.admin_status
            payload.delivery_window = DeliveryWindow(
                start_at=ensure_utc(booking.start_at), end_at=ensure_utc(booking.end_at)
            )
            payload.delivery_address = booking.delivery_address
            if booking.original_latitude is not None and booking.original_longitude is not None:
                payload.original_location = LocationPoint(
                    latitude=booking.original_latitude,
                    longitude=booking.original_longitude,
                    address=booking.original_location,
                )
        return payload

    def _get_booking(self, booking_id: str) -> Booking:
        booking = self.booking_repository.get_by_id(booking_id)
        if not booking:
            raise NotFoundException(
                "Booking not found", code="BOOKING_NOT_FOUND", details={"booking_id": booking_id}
            )
        return booking

    def _get_tractor(self, tractor_id: str) -> Tractor:
        tractor = self.tractor_repository.get_by_id(tractor_id)
        if not tractor:
            raise NotFoundException(
                "Tractor not found", code="TRACTOR_NOT_FOUND", details={"tractor_id": tractor_id}
            )
        return tractor

    @BaseService.measure_operation("get_booking_tracking")
    def get_booking_tracking(self, actor: Actor, booking_id: str) -> TrackingPayload:
        booking = self._get_booking(booking_id)
        tractor = booking.tractor
        require_participant(actor, booking, tractor, "view tracking")
        if tractor is None:
            raise NotFoundException(
                "Tractor data unavailable",
                code="TRACTOR_NOT_FOUND",
                details={"booking_id": booking_id},
            )
        return self.build_payload(tractor, booking)

    @BaseService.measure_operation("get_tractor_tracking")
    def get_tractor_tracking(self, tractor_id: str) -> TrackingPayload:
        """Tracking for a tractor, attached to its most imminent active booking if any."""
        tractor = self._get_tractor(tractor_id)
        active = self.booking_repository.get_active_tracking_bookings(tractor_id)
        return self.build_payload(tractor, active[0] if active else None)

    @BaseService.measure_operation("get_latest_dispatch")
    def get_latest_dispatch(self) -> DispatchSummary:
        booking = self.booking_repository.get_latest_with_delivery_target()
        if booking is None:
            return DispatchSummary(has_data=False)

        tractor = booking.tractor
        current = self._current_location(tractor) if tractor is not None else None
        km = 0.0
        if current is not None:
            km = distance_km(
                tractor.latitude,
                tractor.longitude,
                booking.delivery_latitude,
                booking.delivery_longitude,
            )
        return DispatchSummary(
            has_data=True,
            booking_id=booking.id,
            tractor_name=tractor.name if tractor is not None else DEFAULT_DISPATCH_NAME,
            status=booking.status,
            distance_km=km,
            eta_minutes=eta_minutes(km),
            current_location=current,
            destination=LocationPoint(
                latitude=booking.delivery_latitude,
                longitude=booking.delivery_longitude,
                address=booking.delivery_address,
            ),
            terrain=_terrain_label(booking.delivery_address),
        )

    @BaseService.measure_operation("update_live_location")
    def update_live_location(
        self,
        actor: Actor,
        tractor_id: str,
        latitude: float,
        longitude: float,
        address: Optional[str] = None,
    ) -> TrackingPayload:
        """Record a position report from the tractor (admin or its owner)."""
        if not (-90 <= latitude <= 90 and -180 <= longitude <= 180):
            raise ValidationException(
                "Latitude and longitude are out of range",
                code="INVALID_COORDINATES",
                details={"latitude": latitude, "longitude": longitude},
            )
        tractor = self._get_tractor(tractor_id)
        require_admin_or_tractor_owner(actor, tractor, "report a tractor location")

        with self.transaction():
            tractor.latitude = latitude
            tractor.longitude = longitude
            if address is not None:
                tractor.location = address
            tractor.location_updated_at = self.clock()

        self.log_operation("update_live_location", tractor_id=tractor_id)
        return self.build_payload(tractor)
