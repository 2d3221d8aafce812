from __future__ import annotations
import enum
from enum import Enum


class UserRole(str, Enum):
    USER = "USER"
    ADMIN = "ADMIN"


class BookingStatus(str, enum.Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"
    CANCELLED = "Cancelled"


# Statuses that hold a room/date/slot
ACTIVE_BOOKING_STATUSES = (BookingStatus.PENDING, BookingStatus.APPROVED)


class NotificationType(str, enum.Enum):
    BOOKING_REQUESTED = "booking_requested"
    BOOKING_APPROVED = "booking_approved"
    BOOKING_REJECTED = "booking_rejected"
    BOOKING_VIOLATION = "booking_violation"
    GENERAL_ANNOUNCEMENT = "general_announcement"
    FEEDBACK_ADDRESSED = "feedback_addressed"
