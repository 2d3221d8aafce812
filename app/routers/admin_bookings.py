from datetime import date as DateType
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app import models, schemas, services
from app.db.session import get_db
from app.dependencies import require_admin
from app.models.enums import BookingStatus

router = APIRouter()

@router.get("", response_model=List[schemas.BookingWithRoom])
async def list_bookings(
    status: Optional[BookingStatus] = None,
    room_id: Optional[int] = None,
    date: Optional[DateType] = None,
    db: AsyncSession = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    bookings = await services.booking_service.list_bookings(db, status=status, room_id=room_id, date=date)
    return await services.booking_service.with_room_names(db, bookings)

@router.get("/pending", response_model=List[schemas.BookingWithRoom])
async def list_pending_bookings(
    db: AsyncSession = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    bookings = await services.booking_service.list_pending_bookings(db)
    return await services.booking_service.with_room_names(db, bookings)

@router.post("/check-in", response_model=schemas.Booking)
async def check_in(
    check_in_in: schemas.BookingCheckIn,
    db: AsyncSession = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    """Check in the booking identified by a scanned QR code."""
    return await services.booking_service.check_in(db, qr_payload=check_in_in.qr_payload, admin_id=admin.id)

@router.post("/{booking_id}/approve", response_model=schemas.Booking)
async def approve_booking(
    booking_id: int,
    approve_in: schemas.BookingApprove,
    db: AsyncSession = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    return await services.booking_service.approve_booking(
        db, booking_id=booking_id, admin_id=admin.id, admin_message=approve_in.admin_message
    )

@router.post("/{booking_id}/reject", response_model=schemas.Booking)
async def reject_booking(
    booking_id: int,
    reject_in: schemas.BookingReject,
    db: AsyncSession = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    return await services.booking_service.reject_booking(
        db, booking_id=booking_id, admin_id=admin.id, reason=reject_in.reason
    )

@router.post("/{booking_id}/violations", response_model=schemas.Booking)
async def add_violation(
    booking_id: int,
    violation_in: schemas.BookingViolationCreate,
    db: AsyncSession = Depends(get_db),
    admin: models.User = Depends(require_admin),
):
    return await services.booking_service.add_violation(
        db, booking_id=booking_id, admin_id=admin.id, note=violation_in.note
    )
