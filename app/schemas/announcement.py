from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional

class AnnouncementCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=1)
    category: str = "General"

class AnnouncementUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    message: Optional[str] = Field(default=None, min_length=1)
    category: Optional[str] = None
    is_active: Optional[bool] = None

class Announcement(BaseModel):
    id: int
    admin_id: int
    title: str
    message: str
    category: str
    is_active: bool
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)
