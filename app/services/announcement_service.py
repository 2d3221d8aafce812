import logging
from datetime import datetime
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from app import crud, models, schemas
from app.core.exceptions import NotFound

logger = logging.getLogger(__name__)

async def get_announcement(db: AsyncSession, *, announcement_id: int) -> models.Announcement:
    announcement = await crud.announcement.get(db, id=announcement_id)
    if not announcement:
        raise NotFound("Announcement not found.")
    return announcement

async def list_active(db: AsyncSession) -> List[models.Announcement]:
    return await crud.announcement.get_newest_first(db, active_only=True)

async def list_all(db: AsyncSession) -> List[models.Announcement]:
    return await crud.announcement.get_newest_first(db)

async def post_announcement(
    db: AsyncSession, *, announcement_in: schemas.AnnouncementCreate, admin_id: int
) -> models.Announcement:
    announcement = await crud.announcement.create(
        db, obj_in=announcement_in, admin_id=admin_id, is_active=True, timestamp=datetime.utcnow()
    )
    logger.info(f"Admin {admin_id} posted announcement {announcement.id}")
    return announcement

async def update_announcement(
    db: AsyncSession, *, announcement_id: int, announcement_in: schemas.AnnouncementUpdate
) -> models.Announcement:
    """
    Applies only the given fields. The timestamp is refreshed only when at
    least one of them differs from the stored value.
    """
    announcement = await get_announcement(db, announcement_id=announcement_id)
    changes = {
        field: value
        for field, value in announcement_in.model_dump(exclude_unset=True).items()
        if value is not None and getattr(announcement, field) != value
    }
    if not changes:
        return announcement
    changes["timestamp"] = datetime.utcnow()
    announcement = await crud.announcement.update(db, db_obj=announcement, obj_in=changes)
    logger.info(f"Updated announcement {announcement.id}: {sorted(k for k in changes if k != 'timestamp')}")
    return announcement

async def set_active(db: AsyncSession, *, announcement_id: int, is_active: bool) -> models.Announcement:
    announcement = await get_announcement(db, announcement_id=announcement_id)
    return await crud.announcement.update(
        db, db_obj=announcement, obj_in={"is_active": is_active, "timestamp": datetime.utcnow()}
    )

async def delete_announcement(db: AsyncSession, *, announcement_id: int) -> None:
    await get_announcement(db, announcement_id=announcement_id)
    await crud.announcement.remove(db, id=announcement_id)
    logger.info(f"Deleted announcement {announcement_id}")
