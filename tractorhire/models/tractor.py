# tractorhire/models/tractor.py
"""
Tractor model.

A tractor row is an inventory pool: ``quantity`` identical units share one
listing, calendar and hourly rate. Position fields track where the unit is,
and the destination fields are only populated while a delivery is in flight.
"""

from typing import Any, Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    Integer,
    Numeric,
    String,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import ulid

from ..core.enums import UnitState
from ..database import Base
from ..utils.money import format_money


class Tractor(Base):
    __tablename__ = "tractors"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    name = Column(String(255), nullable=False)
    owner_id = Column(String(26), nullable=True, index=True)

    hourly_rate = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)

    # Current position
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    location = Column(String(500), nullable=True)
    location_updated_at = Column(DateTime(timezone=True), nullable=True)

    # Delivery target while in transit
    destination_latitude = Column(Float, nullable=True)
    destination_longitude = Column(Float, nullable=True)
    destination_address = Column(String(500), nullable=True)

    status = Column(String(20), nullable=False, default=UnitState.AVAILABLE.value)
    available = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    bookings = relationship("Booking", back_populates="tractor")

    __table_args__ = (
        CheckConstraint("hourly_rate > 0", name="check_tractor_rate_positive"),
        CheckConstraint("quantity > 0", name="check_tractor_quantity_positive"),
        CheckConstraint(
            "status IN ('AVAILABLE', 'IN_USE')",
            name="ck_tractors_status",
        ),
    )

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        if self.quantity is None:
            self.quantity = 1
        if not self.status:
            self.status = UnitState.AVAILABLE.value
        if self.available is None:
            self.available = True

    def __repr__(self) -> str:
        return (
            f"<Tractor {self.id}: name={self.name!r}, quantity={self.quantity}, "
            f"status={self.status}>"
        )

    @property
    def has_position(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def has_destination(self) -> bool:
        return self.destination_latitude is not None and self.destination_longitude is not None

    def set_destination(
        self, latitude: float, longitude: float, address: Optional[str] = None
    ) -> None:
        self.destination_latitude = latitude
        self.destination_longitude = longitude
        self.destination_address = address

    def clear_destination(self) -> None:
        self.destination_latitude = None
        self.destination_longitude = None
        self.destination_address = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "owner_id": self.owner_id,
            "hourly_rate": (
                format_money(self.hourly_rate) if self.hourly_rate is not None else None
            ),
            "quantity": self.quantity,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "location": self.location,
            "status": self.status,
            "available": self.available,
        }
