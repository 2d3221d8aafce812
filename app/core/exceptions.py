"""
Service-level errors.

Raised by the service layer and rendered by the exception handler in
``app.main`` as ``{"detail": message, "code": code}`` with ``status_code``.

Usage:
    from app.core.exceptions import NotFound, SlotConflict

    if booking is None:
        raise NotFound(f"Booking {booking_id} not found.")
"""

from typing import Any, Dict, Optional


class ServiceError(Exception):
    """Base exception for all booking-service errors"""

    status_code: int = 400

    def __init__(
        self,
        message: str,
        code: str = "SERVICE_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"detail": self.message, "code": self.code}
        if self.details:
            payload["details"] = self.details
        return payload


class SlotConflict(ServiceError):
    """A Pending or Approved booking already holds the room/date/slot"""

    status_code = 409

    def __init__(self, room_id: int, date: Any, time_slot: str):
        super().__init__(
            "This time slot is already booked or pending approval.",
            code="SLOT_CONFLICT",
            details={"room_id": room_id, "date": str(date), "time_slot": time_slot},
        )


class AuthorizationError(ServiceError):
    """Caller is not allowed to act on this resource"""

    status_code = 403

    def __init__(self, message: str = "You are not authorized to perform this action."):
        super().__init__(message, code="FORBIDDEN")


class NotFound(ServiceError):
    """Target document does not exist"""

    status_code = 404

    def __init__(self, message: str = "Resource not found."):
        super().__init__(message, code="NOT_FOUND")


class TransientStoreError(ServiceError):
    """The document store call failed (network, permission, quota)"""

    status_code = 503

    def __init__(self, message: str = "The booking store is temporarily unavailable."):
        super().__init__(message, code="STORE_UNAVAILABLE")


class InvalidRequest(ServiceError):
    """A precondition on the request does not hold"""

    status_code = 422

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="INVALID_REQUEST", details=details)
