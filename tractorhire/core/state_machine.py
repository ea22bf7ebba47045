"""
Transition tables for the two independent booking status axes.

The lifecycle axis tracks payment, delivery and completion; the approval axis
tracks whether an administrator sanctioned the booking against inventory.
Rules that need both (delivery requires approval) are checked by the service.
"""

from __future__ import annotations

from typing import Dict, FrozenSet

from .enums import AdminStatus, BookingStatus
from .exceptions import AlreadyFinalizedException, InvalidTransitionException

LIFECYCLE_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.PAID, BookingStatus.CANCELLED}),
    BookingStatus.PAID: frozenset({BookingStatus.REFUND_REQUESTED, BookingStatus.DELIVERED}),
    BookingStatus.REFUND_REQUESTED: frozenset({BookingStatus.CANCELLED, BookingStatus.PAID}),
    BookingStatus.DELIVERED: frozenset({BookingStatus.COMPLETED}),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELLED: frozenset(),
}

APPROVAL_TRANSITIONS: Dict[AdminStatus, FrozenSet[AdminStatus]] = {
    AdminStatus.PENDING_APPROVAL: frozenset({AdminStatus.APPROVED, AdminStatus.DENIED}),
    AdminStatus.APPROVED: frozenset(),
    AdminStatus.DENIED: frozenset(),
}

TERMINAL_STATUSES: FrozenSet[BookingStatus] = frozenset(
    status for status, targets in LIFECYCLE_TRANSITIONS.items() if not targets
)


def is_terminal(status: BookingStatus) -> bool:
    return BookingStatus(status) in TERMINAL_STATUSES


def can_transition(current: BookingStatus, target: BookingStatus) -> bool:
    return BookingStatus(target) in LIFECYCLE_TRANSITIONS[BookingStatus(current)]


def predecessors(target: BookingStatus) -> FrozenSet[BookingStatus]:
    """Statuses from which ``target`` is reachable in one step."""
    target = BookingStatus(target)
    return frozenset(src for src, targets in LIFECYCLE_TRANSITIONS.items() if target in targets)


def ensure_transition(booking_id: str, current: BookingStatus, target: BookingStatus) -> None:
    """
    Validate a lifecycle edge.

    Raises:
        AlreadyFinalizedException: ``current`` is terminal
        InvalidTransitionException: the edge is not in the graph
    """
    current = BookingStatus(current)
    target = BookingStatus(target)
    if is_terminal(current):
        raise AlreadyFinalizedException(booking_id, current.value)
    if not can_transition(current, target):
        raise InvalidTransitionException(
            current.value,
            [s.value for s in predecessors(target)],
            message=f"Cannot move booking from {current.value} to {target.value}",
        )


def ensure_approval_transition(booking_id: str, current: AdminStatus, target: AdminStatus) -> None:
    """Validate an edge on the admin-approval axis."""
    current = AdminStatus(current)
    target = AdminStatus(target)
    if target not in APPROVAL_TRANSITIONS[current]:
        raise InvalidTransitionException(
            current.value,
            [AdminStatus.PENDING_APPROVAL.value],
            message=f"Booking {booking_id} is already {current.value}",
            axis="admin_status",
        )
