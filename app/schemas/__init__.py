# flake8: noqa
from .common import Message
from .user import User, UserCreate, TelegramChatUpdate
from .token import Token, TokenWithUser, TokenPayload
from .room import Room, RoomCreate, RoomUpdate, AvailableSlots
from .booking import (
    Booking, BookingCreate, BookingWithRoom, BookingApprove, BookingReject,
    BookingViolationCreate, BookingCheckIn, ExternalReference, TimeSlotList
)
from .announcement import Announcement, AnnouncementCreate, AnnouncementUpdate
from .feedback import Feedback, FeedbackCreate, FeedbackAddress
from .notification import Notification
