from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from typing import List

from app.crud.base import CRUDBase
from app.models.announcement import Announcement
from app.schemas.announcement import AnnouncementCreate, AnnouncementUpdate

class CRUDAnnouncement(CRUDBase[Announcement, AnnouncementCreate, AnnouncementUpdate]):
    async def get_newest_first(self, db: AsyncSession, *, active_only: bool = False) -> List[Announcement]:
        stmt = select(Announcement)
        if active_only:
            stmt = stmt.where(Announcement.is_active == True)
        stmt = stmt.order_by(Announcement.timestamp.desc(), Announcement.id.desc())
        result = await db.execute(stmt)
        return result.scalars().all()

announcement = CRUDAnnouncement(Announcement)
