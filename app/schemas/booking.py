from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime, date as DateType
from typing import List, Optional, Union

from app.models.enums import BookingStatus

class BookingCreate(BaseModel):
    room_id: int
    date: Union[DateType, datetime] # Time of day is discarded
    time_slot: str = Field(..., min_length=1)

class Booking(BaseModel):
    id: int
    user_id: int
    user_email: str
    room_id: int
    date: datetime
    time_slot: str
    status: BookingStatus
    admin_message: Optional[str] = None
    admin_id: Optional[int] = None
    created_at: datetime
    updated_at: datetime
    violations: List[str] = []
    qr_code_data: Optional[str] = None
    pdf_confirmation_ref: Optional[str] = None
    calendar_event_ref: Optional[str] = None
    checked_in_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class BookingWithRoom(Booking):
    """Booking as shown in admin lists, with the room's display name."""
    room_name: str

class BookingApprove(BaseModel):
    admin_message: Optional[str] = None

class BookingReject(BaseModel):
    reason: str = Field(..., min_length=1)

class BookingViolationCreate(BaseModel):
    note: str = Field(..., min_length=1)

class BookingCheckIn(BaseModel):
    qr_payload: str = Field(..., min_length=1)

class ExternalReference(BaseModel):
    reference: str = Field(..., min_length=1)

class TimeSlotList(BaseModel):
    time_slots: List[str]
