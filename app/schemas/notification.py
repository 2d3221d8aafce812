from pydantic import BaseModel, ConfigDict
from datetime import datetime
from typing import Optional

# Shared properties
class NotificationBase(BaseModel):
    title: str
    message: str
    type: str
    related_entity_id: Optional[int] = None

# Properties to return to client
class Notification(NotificationBase):
    id: int
    user_id: int # Recipient ID
    is_read: bool
    timestamp: datetime

    model_config = ConfigDict(from_attributes=True)
