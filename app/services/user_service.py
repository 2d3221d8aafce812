import logging

from sqlalchemy.ext.asyncio import AsyncSession

from app import crud, models

logger = logging.getLogger(__name__)

async def update_telegram_chat_id(db: AsyncSession, *, user: models.User, chat_id: str) -> models.User:
    """Registers the chat that receives this user's booking updates."""
    return await crud.crud_user.update_telegram_chat_id(db, user=user, chat_id=chat_id.strip())
