from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app import models, schemas, services
from app.db.session import get_db
from app.dependencies import get_current_active_user

router = APIRouter()

@router.get("/me", response_model=schemas.User)
async def read_current_user(current_user: models.User = Depends(get_current_active_user)):
    return current_user

@router.put("/me/telegram", response_model=schemas.User)
async def update_telegram_chat(
    chat_in: schemas.TelegramChatUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(get_current_active_user),
):
    """
    Register the Telegram chat that receives booking approvals, rejections
    and violation notices.
    """
    return await services.user_service.update_telegram_chat_id(
        db, user=current_user, chat_id=chat_in.telegram_chat_id
    )
