from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from typing import List

from app.crud.base import CRUDBase
from app.models.room import Room
from app.schemas.room import RoomCreate, RoomUpdate

class CRUDRoom(CRUDBase[Room, RoomCreate, RoomUpdate]):
    async def get_active(self, db: AsyncSession) -> List[Room]:
        stmt = select(Room).where(Room.is_active == True).order_by(Room.name.asc())
        result = await db.execute(stmt)
        return result.scalars().all()

    async def get_all_newest_first(self, db: AsyncSession) -> List[Room]:
        stmt = select(Room).order_by(Room.created_at.desc(), Room.id.desc())
        result = await db.execute(stmt)
        return result.scalars().all()

room = CRUDRoom(Room)
