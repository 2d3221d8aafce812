from typing import Optional
from pydantic import BaseModel, EmailStr, Field, ConfigDict
from datetime import datetime
from app.models.enums import UserRole

class UserBase(BaseModel):
    """
    Common user attributes.
    """
    email: EmailStr
    full_name: Optional[str] = Field(None, min_length=2, max_length=100)

class UserCreate(UserBase):
    password: str = Field(..., min_length=8)

class User(UserBase):
    id: int
    role: UserRole
    is_active: bool
    telegram_chat_id: Optional[str] = None
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class TelegramChatUpdate(BaseModel):
    telegram_chat_id: str = Field(..., min_length=1, max_length=64)
