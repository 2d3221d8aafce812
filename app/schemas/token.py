from pydantic import BaseModel
from typing import Optional

from .user import User

class Token(BaseModel):
    access_token: str
    token_type: str

class TokenWithUser(Token):
    user: User

class TokenPayload(BaseModel):
    sub: Optional[str] = None # 'sub' is the standard JWT field for subject (the user's email)
    user_id: Optional[int] = None
    role: Optional[str] = None
