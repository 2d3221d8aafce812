from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from sqlalchemy import update
from typing import List, Optional
import logging

from app.models.notification import Notification
from app.models.enums import NotificationType

logger = logging.getLogger(__name__)

async def create_notification(
    db: AsyncSession,
    *,
    user_id: int,
    type: NotificationType,
    title: str,
    message: str,
    related_entity_id: Optional[int] = None,
) -> Notification:
    notification = Notification(
        user_id=user_id,
        type=type.value,
        title=title,
        message=message,
        related_entity_id=related_entity_id,
        is_read=False,
    )
    db.add(notification)
    await db.commit()
    await db.refresh(notification)
    logger.info(f"Notification {notification.id} ({type.value}) stored for user {user_id}")
    return notification

async def get_notifications_for_user(
    db: AsyncSession,
    *,
    user_id: int,
    skip: int = 0,
    limit: int = 100,
    include_read: bool = True
) -> List[Notification]:
    """Newest first; include_read=False keeps only the unread inbox."""
    query = select(Notification).filter(Notification.user_id == user_id)
    if not include_read:
        query = query.filter(Notification.is_read.is_(False))
    query = query.order_by(Notification.timestamp.desc(), Notification.id.desc())
    result = await db.execute(query.offset(skip).limit(limit))
    return result.scalars().all()

async def get_notification_by_id(db: AsyncSession, *, notification_id: int) -> Optional[Notification]:
    return await db.get(Notification, notification_id)

async def mark_notification_as_read(db: AsyncSession, *, notification: Notification) -> Notification:
    # already-read notifications are returned untouched
    if notification.is_read:
        return notification
    notification.is_read = True
    await db.commit()
    await db.refresh(notification)
    return notification

async def mark_all_notifications_as_read(db: AsyncSession, *, user_id: int) -> int:
    result = await db.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.is_read.is_(False))
        .values(is_read=True)
    )
    await db.commit()
    logger.info(f"User {user_id}: {result.rowcount} notifications marked read")
    return result.rowcount

async def delete_notification(db: AsyncSession, *, notification: Notification) -> None:
    notification_id = notification.id
    await db.delete(notification)
    await db.commit()
    logger.info(f"Notification {notification_id} deleted")
