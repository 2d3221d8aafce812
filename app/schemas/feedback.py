from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Optional

class FeedbackCreate(BaseModel):
    message: str = Field(..., min_length=1)
    category: Optional[str] = None

class FeedbackAddress(BaseModel):
    admin_notes: str = ""

class Feedback(BaseModel):
    id: int
    user_id: int
    user_email: str
    message: str
    category: Optional[str] = None
    is_addressed: bool
    admin_notes: Optional[str] = None
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)
