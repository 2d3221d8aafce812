from . import auth_service
from . import user_service
from . import room_service
from . import booking_service
from . import announcement_service
from . import feedback_service
from . import notification_service
from .booking_events import booking_events

__all__ = [
    "auth_service",
    "user_service",
    "room_service",
    "booking_service",
    "announcement_service",
    "feedback_service",
    "notification_service",
    "booking_events",
]
