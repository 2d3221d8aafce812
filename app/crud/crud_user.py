from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy.exc import SQLAlchemyError
from datetime import datetime
from typing import Optional
import logging

from app.models.user import User
from app.models.enums import UserRole
from app.schemas.user import UserCreate
from app.security import get_password_hash

logger = logging.getLogger(__name__)

async def get_user_by_id(db: AsyncSession, user_id: int) -> Optional[User]:
    result = await db.execute(select(User).filter(User.id == user_id))
    return result.scalars().first()

async def get_user_by_email(db: AsyncSession, *, email: str) -> User | None:
    logger.debug(f"Fetching user by email: {email}")
    result = await db.execute(select(User).filter(User.email == email))
    user = result.scalars().first()
    if not user:
        logger.warning(f"User with email {email} not found.")
    return user

async def create_user(db: AsyncSession, *, obj_in: UserCreate, role: UserRole = UserRole.USER) -> User:
    user_data = obj_in.model_dump()
    hashed_password = get_password_hash(user_data.pop("password"))

    db_user = User(
        email=user_data.get("email"),
        hashed_password=hashed_password,
        full_name=user_data.get("full_name"),
        role=role,
        is_active=True,
    )

    db.add(db_user)
    await db.commit()
    await db.refresh(db_user)
    logger.info(f"Created user {db_user.id} ({db_user.email}) with role {role.value}")
    return db_user

async def touch_last_login(db: AsyncSession, *, user: User) -> User:
    user.last_login = datetime.utcnow()
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user

async def update_telegram_chat_id(db: AsyncSession, *, user: User, chat_id: str) -> User:
    user.telegram_chat_id = chat_id
    db.add(user)
    try:
        await db.commit()
        await db.refresh(user)
        logger.info(f"Updated Telegram chat id for user {user.id}")
        return user
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error(f"Database error updating Telegram chat id for user {user.id}: {e}", exc_info=True)
        raise
