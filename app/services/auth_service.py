import logging
from datetime import timedelta
from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app import crud, models, schemas
from app.core.config import settings
from app.models.enums import UserRole
from app.security import create_access_token, verify_password

logger = logging.getLogger(__name__)

async def register_user(
    db: AsyncSession, *, user_in: schemas.UserCreate, role: UserRole = UserRole.USER
) -> models.User:
    """
    Creates a user account. Emails are unique across users.
    """
    existing_user = await crud.crud_user.get_user_by_email(db, email=user_in.email)
    if existing_user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered",
        )
    db_user = await crud.crud_user.create_user(db, obj_in=user_in, role=role)
    logger.info(f"Registered user {db_user.id} ({db_user.email})")
    return db_user

async def authenticate_user(db: AsyncSession, *, email: str, password: str) -> Optional[models.User]:
    user = await crud.crud_user.get_user_by_email(db, email=email)
    if not user or not verify_password(password, user.hashed_password):
        return None
    return user

def issue_access_token(user: models.User) -> str:
    token_data = {"sub": user.email, "user_id": user.id, "role": user.role.value if user.role else None}
    return create_access_token(
        data=token_data, expires_delta=timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    )
