# tractorhire/core/exceptions.py
"""
Domain-specific exceptions for the tractor hire booking engine.

Every failure carries a stable ``code`` and a ``details`` mapping with the
context a client needs to render an actionable message (current status,
required status, capacity numbers). ``to_dict()`` is the tagged failure handed
to transport layers; ``to_http_exception()`` maps it onto an HTTP status.
"""

from typing import Any, Dict, Iterable, List, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }

    def to_http_exception(self) -> HTTPException:
        return HTTPException(status_code=self.http_status, detail=self.to_dict())


class ValidationException(DomainException):
    """Raised when business validation fails."""

    http_status = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    http_status = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    http_status = status.HTTP_409_CONFLICT


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    http_status = HTTP_422_UNPROCESSABLE


class UnauthorizedException(DomainException):
    """Raised when the acting user lacks the role or ownership an operation needs."""

    http_status = status.HTTP_403_FORBIDDEN

    def __init__(
        self,
        message: str = "You are not allowed to perform this action",
        *,
        code: str = "UNAUTHORIZED",
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(message=message, code=code, details=details)


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message or "An error occurred processing your request",
            "details": self.details if self.details else {},
        }


# Specific business exceptions


class InvalidWindowException(ValidationException):
    """Raised when a requested rental window is malformed or too short."""

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message=message, code="INVALID_WINDOW", details=details or {})


class CapacityExceededException(ConflictException):
    """Raised when approving a booking would oversubscribe a unit's inventory."""

    def __init__(
        self,
        unit_id: str,
        quantity: int,
        overlapping: int,
        conflicting_booking_ids: Optional[List[str]] = None,
    ):
        details: Dict[str, Any] = {
            "unit_id": unit_id,
            "quantity": quantity,
            "overlapping": overlapping,
        }
        if conflicting_booking_ids:
            details["conflicting_booking_ids"] = list(conflicting_booking_ids)
        super().__init__(
            message=(
                f"Cannot approve: all {quantity} unit(s) are already booked for this time period"
            ),
            code="CAPACITY_EXCEEDED",
            details=details,
        )


class InvalidTransitionException(BusinessRuleException):
    """Raised when an operation is not legal from the booking's current status."""

    def __init__(
        self,
        current_status: str,
        required_status: Iterable[str],
        *,
        message: Optional[str] = None,
        axis: str = "status",
    ):
        required = sorted(str(s) for s in required_status)
        super().__init__(
            message=message
            or f"Cannot perform this action while booking {axis} is {current_status}",
            code="INVALID_TRANSITION",
            details={
                "axis": axis,
                "current_status": current_status,
                "required_status": required,
            },
        )


class AlreadyFinalizedException(BusinessRuleException):
    """Raised when mutating a booking that reached a terminal state or a set-once field."""

    def __init__(self, booking_id: str, current_status: str, *, field: Optional[str] = None):
        message = (
            f"Booking {booking_id} already has {field} recorded"
            if field
            else f"Booking {booking_id} is {current_status} and can no longer change"
        )
        details: Dict[str, Any] = {"booking_id": booking_id, "current_status": current_status}
        if field:
            details["field"] = field
        super().__init__(message=message, code="ALREADY_FINALIZED", details=details)


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """
