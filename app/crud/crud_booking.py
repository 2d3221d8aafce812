from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select
from datetime import datetime
from typing import Any, Iterable, List, Optional
import logging

from app.models.booking import Booking
from app.models.enums import ACTIVE_BOOKING_STATUSES, BookingStatus

logger = logging.getLogger(__name__)

async def get_booking_by_id(db: AsyncSession, *, booking_id: int) -> Optional[Booking]:
    result = await db.execute(select(Booking).filter(Booking.id == booking_id))
    return result.scalars().first()

async def get_bookings(
    db: AsyncSession,
    *,
    user_id: Optional[int] = None,
    room_id: Optional[int] = None,
    date: Optional[datetime] = None,
    time_slot: Optional[str] = None,
    statuses: Optional[Iterable[BookingStatus]] = None,
) -> List[Booking]:
    """Equality-filter query over bookings, newest first."""
    query = select(Booking)
    if user_id is not None:
        query = query.filter(Booking.user_id == user_id)
    if room_id is not None:
        query = query.filter(Booking.room_id == room_id)
    if date is not None:
        query = query.filter(Booking.date == date)
    if time_slot is not None:
        query = query.filter(Booking.time_slot == time_slot)
    if statuses is not None:
        query = query.filter(Booking.status.in_(list(statuses)))

    query = query.order_by(Booking.created_at.desc(), Booking.id.desc())
    result = await db.execute(query)
    return result.scalars().all()

async def get_active_bookings_for_slot(
    db: AsyncSession, *, room_id: int, date: datetime, time_slot: str
) -> List[Booking]:
    return await get_bookings(
        db, room_id=room_id, date=date, time_slot=time_slot, statuses=ACTIVE_BOOKING_STATUSES
    )

async def create_booking(
    db: AsyncSession,
    *,
    user_id: int,
    user_email: str,
    room_id: int,
    date: datetime,
    time_slot: str,
) -> Booking:
    now = datetime.utcnow()
    db_booking = Booking(
        user_id=user_id,
        user_email=user_email,
        room_id=room_id,
        date=date,
        time_slot=time_slot,
        status=BookingStatus.PENDING,
        created_at=now,
        updated_at=now,
        violations=[],
    )
    db.add(db_booking)
    await db.commit()
    await db.refresh(db_booking)
    logger.info(f"Created booking id {db_booking.id} for user {user_id} (room {room_id}, {time_slot})")
    return db_booking

async def update_booking_fields(db: AsyncSession, *, booking: Booking, **fields: Any) -> Booking:
    """Single-document field update; always stamps updated_at."""
    for field, value in fields.items():
        setattr(booking, field, value)
    booking.updated_at = datetime.utcnow()
    db.add(booking)
    await db.commit()
    await db.refresh(booking)
    return booking
