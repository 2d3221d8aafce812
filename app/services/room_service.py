import logging
from datetime import datetime
from typing import Dict, List

from sqlalchemy.ext.asyncio import AsyncSession

from app import crud, models, schemas
from app.core.exceptions import NotFound

logger = logging.getLogger(__name__)


class RoomNameCache:
    """Room id -> display name, filled on first lookup.

    Entries are never invalidated for the lifetime of the cache, so create
    one per request (or screen) rather than per process.
    """

    def __init__(self):
        self._names: Dict[int, str] = {}

    def __contains__(self, room_id: int) -> bool:
        return room_id in self._names

    async def get_name(self, db: AsyncSession, room_id: int) -> str:
        if room_id in self._names:
            return self._names[room_id]
        room = await crud.room.get(db, id=room_id)
        if room is None:
            # Not cached, a room created later should still resolve
            return str(room_id)
        self._names[room_id] = room.name
        return room.name


async def get_room(db: AsyncSession, *, room_id: int) -> models.Room:
    room = await crud.room.get(db, id=room_id)
    if not room:
        raise NotFound(f"Room {room_id} not found.")
    return room

async def list_active_rooms(db: AsyncSession) -> List[models.Room]:
    return await crud.room.get_active(db)

async def list_all_rooms(db: AsyncSession) -> List[models.Room]:
    return await crud.room.get_all_newest_first(db)

async def create_room(db: AsyncSession, *, room_in: schemas.RoomCreate) -> models.Room:
    now = datetime.utcnow()
    room = await crud.room.create(db, obj_in=room_in, created_at=now, updated_at=now)
    logger.info(f"Created room {room.id} ('{room.name}')")
    return room

async def update_room(db: AsyncSession, *, room_id: int, room_in: schemas.RoomUpdate) -> models.Room:
    room = await get_room(db, room_id=room_id)
    # explicit nulls mean "leave unchanged"; every room column is NOT NULL
    update_data = {k: v for k, v in room_in.model_dump(exclude_unset=True).items() if v is not None}
    update_data["updated_at"] = datetime.utcnow()
    room = await crud.room.update(db, db_obj=room, obj_in=update_data)
    logger.info(f"Updated room {room.id}")
    return room

async def set_room_active(db: AsyncSession, *, room_id: int, is_active: bool) -> models.Room:
    room = await get_room(db, room_id=room_id)
    room = await crud.room.update(db, db_obj=room, obj_in={"is_active": is_active, "updated_at": datetime.utcnow()})
    logger.info(f"Room {room.id} {'activated' if is_active else 'deactivated'}")
    return room

async def delete_room(db: AsyncSession, *, room_id: int) -> None:
    await get_room(db, room_id=room_id)
    await crud.room.remove(db, id=room_id)
    logger.info(f"Deleted room {room_id}")
