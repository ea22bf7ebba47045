"""Role and ownership checks shared by the booking and tracking services."""

from typing import Optional

from ..core.exceptions import UnauthorizedException
from ..models.booking import Booking
from ..models.tractor import Tractor
from ..principal import Actor


def owns_tractor(actor: Actor, tractor: Optional[Tractor]) -> bool:
    return (
        actor.is_tractor_owner
        and tractor is not None
        and tractor.owner_id is not None
        and tractor.owner_id == actor.user_id
    )


def require_admin(actor: Actor, action: str) -> None:
    if not actor.is_admin:
        raise UnauthorizedException(
            f"Only administrators can {action}",
            details={"user_id": actor.user_id, "role": str(actor.role), "action": action},
        )


def require_booking_owner(actor: Actor, booking: Booking, action: str) -> None:
    if not booking.is_owned_by(actor.user_id):
        raise UnauthorizedException(
            f"Only the customer who made this booking can {action}",
            details={"user_id": actor.user_id, "booking_id": booking.id, "action": action},
        )


def require_admin_or_tractor_owner(actor: Actor, tractor: Optional[Tractor], action: str) -> None:
    if actor.is_admin or owns_tractor(actor, tractor):
        return
    raise UnauthorizedException(
        f"Only administrators or the tractor owner can {action}",
        details={
            "user_id": actor.user_id,
            "tractor_id": tractor.id if tractor is not None else None,
            "action": action,
        },
    )


def require_admin_or_booking_owner(actor: Actor, booking: Booking, action: str) -> None:
    if actor.is_admin or booking.is_owned_by(actor.user_id):
        return
    raise UnauthorizedException(
        f"You are not allowed to {action} for this booking",
        details={"user_id": actor.user_id, "booking_id": booking.id, "action": action},
    )


def require_participant(actor: Actor, booking: Booking, tractor: Optional[Tractor], action: str) -> None:
    """Admin, the booking's customer, or the owner of the booked tractor."""
    if actor.is_admin or booking.is_owned_by(actor.user_id) or owns_tractor(actor, tractor):
        return
    raise UnauthorizedException(
        f"You are not allowed to {action} for this booking",
        details={"user_id": actor.user_id, "booking_id": booking.id, "action": action},
    )
