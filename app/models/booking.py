from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, Text, Enum as SQLEnum
from sqlalchemy.orm import relationship
from datetime import datetime

from app.db.base_class import Base
from .enums import BookingStatus

class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    user_email = Column(String, nullable=False) # Denormalized from the requesting user
    # Opaque reference into `rooms`; existence is not enforced
    room_id = Column(Integer, nullable=False, index=True)
    date = Column(DateTime, nullable=False, index=True) # Local midnight of the booked day
    time_slot = Column(String(64), nullable=False)
    status = Column(
        SQLEnum(BookingStatus, name="bookingstatus", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=BookingStatus.PENDING,
        index=True,
    )
    admin_message = Column(Text, nullable=True) # Approval message or rejection reason
    admin_id = Column(Integer, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    violations = Column(JSON, nullable=False, default=list)
    qr_code_data = Column(String, nullable=True)
    pdf_confirmation_ref = Column(String, nullable=True)
    calendar_event_ref = Column(String, nullable=True)
    checked_in_at = Column(DateTime, nullable=True)

    user = relationship("User", back_populates="bookings")
