from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import datetime

class RoomBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    capacity: int = Field(..., ge=0)
    amenities: List[str] = []
    is_active: bool = True

class RoomCreate(RoomBase):
    pass

class RoomUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    capacity: Optional[int] = Field(default=None, ge=0)
    amenities: Optional[List[str]] = None
    is_active: Optional[bool] = None

class Room(RoomBase):
    id: int
    created_at: datetime
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class AvailableSlots(BaseModel):
    room_id: int
    date: datetime
    available_slots: List[str]
