from datetime import date as DateType
from typing import List

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from app import models, schemas, services
from app.db.session import get_db
from app.dependencies import get_current_active_user, require_admin

router = APIRouter()

@router.get("", response_model=List[schemas.Room])
async def list_rooms(
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(get_current_active_user),
):
    """Bookable rooms, by name."""
    return await services.room_service.list_active_rooms(db)

@router.get("/all", response_model=List[schemas.Room])
async def list_all_rooms(
    db: AsyncSession = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    return await services.room_service.list_all_rooms(db)

@router.get("/{room_id}", response_model=schemas.Room)
async def read_room(
    room_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(get_current_active_user),
):
    return await services.room_service.get_room(db, room_id=room_id)

@router.get("/{room_id}/available-slots", response_model=schemas.AvailableSlots)
async def read_available_slots(
    room_id: int,
    date: DateType = Query(..., description="Day to check, YYYY-MM-DD"),
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(get_current_active_user),
):
    slots = await services.booking_service.list_available_slots(db, room_id=room_id, date=date)
    return schemas.AvailableSlots(
        room_id=room_id,
        date=services.booking_service.normalize_booking_date(date),
        available_slots=slots,
    )

@router.post("", response_model=schemas.Room, status_code=status.HTTP_201_CREATED)
async def create_room(
    room_in: schemas.RoomCreate,
    db: AsyncSession = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    return await services.room_service.create_room(db, room_in=room_in)

@router.put("/{room_id}", response_model=schemas.Room)
async def update_room(
    room_id: int,
    room_in: schemas.RoomUpdate,
    db: AsyncSession = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    return await services.room_service.update_room(db, room_id=room_id, room_in=room_in)

@router.post("/{room_id}/activate", response_model=schemas.Room)
async def activate_room(
    room_id: int,
    db: AsyncSession = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    return await services.room_service.set_room_active(db, room_id=room_id, is_active=True)

@router.post("/{room_id}/deactivate", response_model=schemas.Room)
async def deactivate_room(
    room_id: int,
    db: AsyncSession = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    return await services.room_service.set_room_active(db, room_id=room_id, is_active=False)

@router.delete("/{room_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_room(
    room_id: int,
    db: AsyncSession = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    await services.room_service.delete_room(db, room_id=room_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
