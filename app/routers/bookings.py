from typing import List, Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app import models, schemas, services
from app.core.config import settings
from app.core.exceptions import AuthorizationError
from app.db.session import get_db
from app.dependencies import get_current_active_user
from app.models.enums import BookingStatus

router = APIRouter()

async def _get_visible_booking(db: AsyncSession, booking_id: int, user: models.User) -> models.Booking:
    booking = await services.booking_service.get_booking(db, booking_id=booking_id)
    if booking.user_id != user.id and not user.is_admin:
        raise AuthorizationError("Not authorized to access this booking.")
    return booking

@router.get("/time-slots", response_model=schemas.TimeSlotList)
async def list_time_slots(current_user: models.User = Depends(get_current_active_user)):
    return schemas.TimeSlotList(time_slots=list(settings.TIME_SLOTS))

@router.post("", response_model=schemas.Booking, status_code=status.HTTP_201_CREATED)
async def request_booking(
    booking_in: schemas.BookingCreate,
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(get_current_active_user),
):
    """
    Submit a booking request. It starts as Pending until an admin acts on it;
    409 if the slot is already held by a Pending or Approved booking.
    """
    return await services.booking_service.request_booking(
        db,
        user_id=current_user.id,
        user_email=current_user.email,
        room_id=booking_in.room_id,
        date=booking_in.date,
        time_slot=booking_in.time_slot,
    )

@router.get("/me", response_model=List[schemas.BookingWithRoom])
async def list_my_bookings(
    status: Optional[BookingStatus] = None,
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(get_current_active_user),
):
    bookings = await services.booking_service.list_user_bookings(db, user_id=current_user.id, status=status)
    return await services.booking_service.with_room_names(db, bookings)

@router.get("/{booking_id}", response_model=schemas.Booking)
async def read_booking(
    booking_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(get_current_active_user),
):
    return await _get_visible_booking(db, booking_id, current_user)

@router.post("/{booking_id}/cancel", response_model=schemas.Booking)
async def cancel_booking(
    booking_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(get_current_active_user),
):
    return await services.booking_service.cancel_booking(
        db, booking_id=booking_id, requesting_user_id=current_user.id
    )

@router.put("/{booking_id}/pdf-confirmation", response_model=schemas.Booking)
async def attach_pdf_confirmation(
    booking_id: int,
    ref_in: schemas.ExternalReference,
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(get_current_active_user),
):
    await _get_visible_booking(db, booking_id, current_user)
    return await services.booking_service.attach_pdf_confirmation(
        db, booking_id=booking_id, reference=ref_in.reference
    )

@router.put("/{booking_id}/calendar-event", response_model=schemas.Booking)
async def attach_calendar_event(
    booking_id: int,
    ref_in: schemas.ExternalReference,
    db: AsyncSession = Depends(get_db),
    current_user: models.User = Depends(get_current_active_user),
):
    await _get_visible_booking(db, booking_id, current_user)
    return await services.booking_service.attach_calendar_event(
        db, booking_id=booking_id, reference=ref_in.reference
    )
