# Import the Base class to make it accessible for models
# and for Alembic discovery via Base.metadata
from app.db.base_class import Base  # noqa: F401

from .user import User
from .room import Room
from .booking import Booking
from .announcement import Announcement
from .feedback import Feedback
from .notification import Notification
from .enums import (
    UserRole,
    BookingStatus,
    ACTIVE_BOOKING_STATUSES,
    NotificationType,
)

__all__ = [
    "Base",
    "User",
    "Room",
    "Booking",
    "Announcement",
    "Feedback",
    "Notification",
    "UserRole",
    "BookingStatus",
    "ACTIVE_BOOKING_STATUSES",
    "NotificationType",
]
