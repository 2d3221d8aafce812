from sqlalchemy import Boolean, Column, Integer, String, DateTime, func, Enum as SQLEnum
from sqlalchemy.orm import relationship
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .booking import Booking
    from .notification import Notification

from app.db.base_class import Base
from .enums import UserRole

class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    full_name = Column(String, index=True, nullable=True)
    role = Column(SQLEnum(UserRole), nullable=False, default=UserRole.USER)
    is_active = Column(Boolean, default=True, nullable=False)
    telegram_chat_id = Column(String, nullable=True) # Set by the user from their profile
    created_at = Column(DateTime, default=func.now())
    last_login = Column(DateTime, nullable=True)

    bookings = relationship("Booking", back_populates="user")
    notifications = relationship("Notification", back_populates="user", cascade="all, delete-orphan")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN
