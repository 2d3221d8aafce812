"""
Booking lifecycle: request, approve, reject, cancel and the slot-conflict check.

The conflict check in ``request_booking`` is a plain read followed by an
unconditional insert. Two concurrent requests for the same room/date/slot can
both pass the read before either writes; nothing here prevents that.

Notifications (in-app and Telegram) run after the booking change has been
committed and never fail the operation.
"""

import logging
from datetime import date as DateType, datetime
from typing import Awaitable, Callable, List, Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from app import crud, models, schemas
from app.core.config import settings
from app.core.exceptions import AuthorizationError, InvalidRequest, NotFound, SlotConflict
from app.crud.base import translate_store_errors
from app.models.enums import ACTIVE_BOOKING_STATUSES, BookingStatus, NotificationType
from app.services.booking_events import BookingEvent, BookingEventType, booking_events
from app.services.room_service import RoomNameCache
from app.utils import telegram

logger = logging.getLogger(__name__)


def normalize_booking_date(value: Union[DateType, datetime]) -> datetime:
    """
    Drops the time of day: every booking date is stored as a naive midnight.
    Aware datetimes are converted to server-local time first.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone()
        value = value.date()
    return datetime(value.year, value.month, value.day)

def format_booking_date(value: datetime) -> str:
    return f"{value.day}/{value.month}/{value.year}"

def _validate_time_slot(time_slot: str) -> None:
    if time_slot not in settings.TIME_SLOTS:
        raise InvalidRequest(
            f"Unknown time slot '{time_slot}'.",
            details={"time_slot": time_slot, "allowed": list(settings.TIME_SLOTS)},
        )

def _detach(db: AsyncSession, booking: models.Booking) -> models.Booking:
    # A rollback in a notification step must not expire the committed state
    db.expunge(booking)
    return booking


async def _notify_safely(db: AsyncSession, description: str, send: Callable[[], Awaitable[object]]) -> None:
    """Runs a notification side effect; failures are logged and dropped."""
    try:
        await send()
    except Exception as e:
        logger.error(f"Failed to {description}: {e}", exc_info=True)
        await db.rollback()

async def _publish(event_type: BookingEventType, booking: models.Booking) -> None:
    event = BookingEvent(
        type=event_type,
        booking_id=booking.id,
        user_id=booking.user_id,
        room_id=booking.room_id,
        date=booking.date,
        time_slot=booking.time_slot,
        status=booking.status,
        data=schemas.Booking.model_validate(booking).model_dump(mode="json"),
    )
    await booking_events.publish(event)

async def _slot_details(db: AsyncSession, booking: models.Booking) -> str:
    room_name = await RoomNameCache().get_name(db, booking.room_id)
    return (
        f"Room: {room_name}\n"
        f"Date: {format_booking_date(booking.date)}\n"
        f"Time: {booking.time_slot}"
    )

async def _notify_owner(
    db: AsyncSession,
    booking: models.Booking,
    *,
    type: NotificationType,
    title: str,
    build_message: Callable[[str], str],
) -> None:
    """In-app notification plus a Telegram message if the owner registered a chat.

    ``build_message`` receives the room/date/time block and returns the body.
    """
    message: Optional[str] = None

    async def _in_app():
        nonlocal message
        message = build_message(await _slot_details(db, booking))
        await crud.crud_notification.create_notification(
            db,
            user_id=booking.user_id,
            type=type,
            title=title,
            message=message,
            related_entity_id=booking.id,
        )

    async def _chat():
        owner = await crud.crud_user.get_user_by_id(db, user_id=booking.user_id)
        if owner is None or not owner.telegram_chat_id:
            logger.debug(f"Owner of booking {booking.id} has no Telegram chat registered.")
            return
        body = message or build_message(await _slot_details(db, booking))
        await telegram.send_message(owner.telegram_chat_id, f"*{title}*\n\n{body}")

    await _notify_safely(db, f"create '{type.value}' notification for booking {booking.id}", _in_app)
    await _notify_safely(db, f"send Telegram message to owner of booking {booking.id}", _chat)


async def _get_booking_or_404(db: AsyncSession, booking_id: int) -> models.Booking:
    booking = await crud.crud_booking.get_booking_by_id(db, booking_id=booking_id)
    if booking is None:
        raise NotFound(f"Booking {booking_id} not found.")
    return booking


async def request_booking(
    db: AsyncSession,
    *,
    user_id: int,
    user_email: str,
    room_id: int,
    date: Union[DateType, datetime],
    time_slot: str,
) -> models.Booking:
    _validate_time_slot(time_slot)
    booking_date = normalize_booking_date(date)

    with translate_store_errors("request_booking"):
        existing = await crud.crud_booking.get_active_bookings_for_slot(
            db, room_id=room_id, date=booking_date, time_slot=time_slot
        )
        if existing:
            logger.info(
                f"Slot conflict for room {room_id} on {booking_date.date()} ({time_slot}): "
                f"held by booking {existing[0].id}"
            )
            raise SlotConflict(room_id, booking_date.date(), time_slot)

        booking = await crud.crud_booking.create_booking(
            db,
            user_id=user_id,
            user_email=user_email,
            room_id=room_id,
            date=booking_date,
            time_slot=time_slot,
        )
    booking = _detach(db, booking)
    logger.info(f"Booking {booking.id} requested by user {user_id} for room {room_id}")

    async def _in_app():
        details = await _slot_details(db, booking)
        await crud.crud_notification.create_notification(
            db,
            user_id=user_id,
            type=NotificationType.BOOKING_REQUESTED,
            title="Booking Request Submitted",
            message=f"Your booking request details:\n\n{details}\nStatus: {booking.status.value}",
            related_entity_id=booking.id,
        )

    async def _admin_chat():
        details = await _slot_details(db, booking)
        await telegram.notify_admin(f"*New booking request*\n\nUser: {user_email}\n{details}")

    await _notify_safely(db, f"create request notification for booking {booking.id}", _in_app)
    await _notify_safely(db, f"notify admin of booking {booking.id}", _admin_chat)
    await _publish(BookingEventType.REQUESTED, booking)
    return booking

async def approve_booking(
    db: AsyncSession, *, booking_id: int, admin_id: int, admin_message: Optional[str] = None
) -> models.Booking:
    with translate_store_errors("approve_booking"):
        booking = await _get_booking_or_404(db, booking_id)
        booking = await crud.crud_booking.update_booking_fields(
            db,
            booking=booking,
            status=BookingStatus.APPROVED,
            admin_id=admin_id,
            admin_message=admin_message,
            qr_code_data=str(booking.id),
        )
    booking = _detach(db, booking)
    logger.info(f"Booking {booking.id} approved by admin {admin_id}")

    def _message(details: str) -> str:
        message = f"Your booking has been approved!\n\n{details}\nStatus: Approved"
        if admin_message:
            message += f"\nAdmin Message: {admin_message}"
        return message

    await _notify_owner(
        db, booking, type=NotificationType.BOOKING_APPROVED, title="Booking Approved!", build_message=_message
    )
    await _publish(BookingEventType.APPROVED, booking)
    return booking

async def reject_booking(db: AsyncSession, *, booking_id: int, admin_id: int, reason: str) -> models.Booking:
    if not reason or not reason.strip():
        raise InvalidRequest("A rejection reason is required.")

    with translate_store_errors("reject_booking"):
        booking = await _get_booking_or_404(db, booking_id)
        booking = await crud.crud_booking.update_booking_fields(
            db,
            booking=booking,
            status=BookingStatus.REJECTED,
            admin_id=admin_id,
            admin_message=reason,
        )
    booking = _detach(db, booking)
    logger.info(f"Booking {booking.id} rejected by admin {admin_id}")

    await _notify_owner(
        db,
        booking,
        type=NotificationType.BOOKING_REJECTED,
        title="Booking Rejected",
        build_message=lambda details: f"Your booking request has been rejected.\n\n{details}\nReason: {reason}",
    )
    await _publish(BookingEventType.REJECTED, booking)
    return booking

async def cancel_booking(db: AsyncSession, *, booking_id: int, requesting_user_id: int) -> models.Booking:
    with translate_store_errors("cancel_booking"):
        booking = await _get_booking_or_404(db, booking_id)
        if booking.user_id != requesting_user_id:
            logger.warning(f"User {requesting_user_id} tried to cancel booking {booking.id} owned by {booking.user_id}")
            raise AuthorizationError("You can only cancel your own bookings.")
        booking = await crud.crud_booking.update_booking_fields(db, booking=booking, status=BookingStatus.CANCELLED)
    logger.info(f"Booking {booking.id} cancelled by user {requesting_user_id}")
    await _publish(BookingEventType.CANCELLED, booking)
    return booking

async def add_violation(db: AsyncSession, *, booking_id: int, admin_id: int, note: str) -> models.Booking:
    if not note or not note.strip():
        raise InvalidRequest("A violation note is required.")

    with translate_store_errors("add_violation"):
        booking = await _get_booking_or_404(db, booking_id)
        # Reassign, an in-place append is not tracked on a JSON column
        violations = list(booking.violations or []) + [note]
        booking = await crud.crud_booking.update_booking_fields(db, booking=booking, violations=violations)
    booking = _detach(db, booking)
    logger.info(f"Violation recorded on booking {booking.id} by admin {admin_id}")

    await _notify_owner(
        db,
        booking,
        type=NotificationType.BOOKING_VIOLATION,
        title="Violation Reported",
        build_message=lambda details: f"A violation has been reported for your booking.\n\n{details}\nViolation: {note}",
    )
    await _publish(BookingEventType.VIOLATION_ADDED, booking)
    return booking

async def check_in(db: AsyncSession, *, qr_payload: str, admin_id: int) -> models.Booking:
    """Resolves a scanned QR payload (the booking id) and stamps the check-in."""
    payload = (qr_payload or "").strip()
    if not (payload.isascii() and payload.isdigit()):
        raise InvalidRequest("QR code does not contain a booking reference.", details={"qr_payload": qr_payload})

    with translate_store_errors("check_in"):
        booking = await _get_booking_or_404(db, int(payload))
        if booking.status != BookingStatus.APPROVED:
            raise InvalidRequest(
                f"Booking {booking.id} is {booking.status.value}; only approved bookings can be checked in.",
                details={"status": booking.status.value},
            )
        booking = await crud.crud_booking.update_booking_fields(db, booking=booking, checked_in_at=datetime.utcnow())
    logger.info(f"Booking {booking.id} checked in by admin {admin_id}")
    await _publish(BookingEventType.CHECKED_IN, booking)
    return booking

async def attach_pdf_confirmation(db: AsyncSession, *, booking_id: int, reference: str) -> models.Booking:
    with translate_store_errors("attach_pdf_confirmation"):
        booking = await _get_booking_or_404(db, booking_id)
        booking = await crud.crud_booking.update_booking_fields(db, booking=booking, pdf_confirmation_ref=reference)
    logger.info(f"PDF confirmation attached to booking {booking.id}")
    await _publish(BookingEventType.UPDATED, booking)
    return booking

async def attach_calendar_event(db: AsyncSession, *, booking_id: int, reference: str) -> models.Booking:
    with translate_store_errors("attach_calendar_event"):
        booking = await _get_booking_or_404(db, booking_id)
        booking = await crud.crud_booking.update_booking_fields(db, booking=booking, calendar_event_ref=reference)
    logger.info(f"Calendar event attached to booking {booking.id}")
    await _publish(BookingEventType.UPDATED, booking)
    return booking


async def list_available_slots(db: AsyncSession, *, room_id: int, date: Union[DateType, datetime]) -> List[str]:
    booking_date = normalize_booking_date(date)
    with translate_store_errors("list_available_slots"):
        held = await crud.crud_booking.get_bookings(
            db, room_id=room_id, date=booking_date, statuses=ACTIVE_BOOKING_STATUSES
        )
    booked = {b.time_slot for b in held}
    return [slot for slot in settings.TIME_SLOTS if slot not in booked]

async def get_booking(db: AsyncSession, *, booking_id: int) -> models.Booking:
    with translate_store_errors("get_booking"):
        return await _get_booking_or_404(db, booking_id)

async def list_user_bookings(
    db: AsyncSession, *, user_id: int, status: Optional[BookingStatus] = None
) -> List[models.Booking]:
    with translate_store_errors("list_user_bookings"):
        return await crud.crud_booking.get_bookings(
            db, user_id=user_id, statuses=[status] if status is not None else None
        )

async def list_bookings(
    db: AsyncSession,
    *,
    status: Optional[BookingStatus] = None,
    room_id: Optional[int] = None,
    date: Optional[Union[DateType, datetime]] = None,
) -> List[models.Booking]:
    with translate_store_errors("list_bookings"):
        return await crud.crud_booking.get_bookings(
            db,
            room_id=room_id,
            date=normalize_booking_date(date) if date is not None else None,
            statuses=[status] if status is not None else None,
        )

async def list_pending_bookings(db: AsyncSession) -> List[models.Booking]:
    return await list_bookings(db, status=BookingStatus.PENDING)

async def with_room_names(db: AsyncSession, bookings: List[models.Booking]) -> List[schemas.BookingWithRoom]:
    """Admin list view: each booking with its room's display name."""
    names = RoomNameCache()
    result = []
    with translate_store_errors("with_room_names"):
        for booking in bookings:
            room_name = await names.get_name(db, booking.room_id)
            result.append(
                schemas.BookingWithRoom(**schemas.Booking.model_validate(booking).model_dump(), room_name=room_name)
            )
    return result
