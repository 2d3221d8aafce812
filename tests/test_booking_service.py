import asyncio
from datetime import date, datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import OperationalError

from app import crud
from app.core.config import settings
from app.core.exceptions import AuthorizationError, InvalidRequest, NotFound, SlotConflict, TransientStoreError
from app.models.enums import BookingStatus, NotificationType
from app.services import booking_service

from .conftest import make_user

DAY = date(2025, 3, 10)
SLOT = "9:00 AM - 10:00 AM"


class _Clock:
    def __init__(self, start: datetime):
        self.now = start

    def tick(self) -> datetime:
        self.now += timedelta(minutes=1)
        return self.now


@pytest.fixture
def clock(monkeypatch):
    """Controls the timestamps the booking store writes."""
    fake = _Clock(datetime(2025, 3, 1, 8, 0))

    class _FakeDatetime(datetime):
        @classmethod
        def utcnow(cls):
            return fake.now

    monkeypatch.setattr(crud.crud_booking, "datetime", _FakeDatetime)
    return fake


async def _request(db, user, room, *, day=DAY, slot=SLOT):
    return await booking_service.request_booking(
        db, user_id=user.id, user_email=user.email, room_id=room.id, date=day, time_slot=slot
    )


async def test_request_creates_pending_booking(db_session, test_user, room):
    booking = await _request(db_session, test_user, room)

    assert booking.id is not None
    assert booking.status == BookingStatus.PENDING
    assert booking.user_email == test_user.email
    assert booking.date == datetime(2025, 3, 10)
    assert booking.violations == []
    assert booking.admin_id is None
    assert booking.admin_message is None
    assert booking.qr_code_data is None
    assert booking.created_at == booking.updated_at


async def test_second_sequential_request_for_same_slot_conflicts(db_session, test_user, other_user, room):
    await _request(db_session, test_user, room)

    with pytest.raises(SlotConflict) as exc_info:
        await _request(db_session, other_user, room)

    assert exc_info.value.code == "SLOT_CONFLICT"
    held = await crud.crud_booking.get_bookings(db_session, room_id=room.id)
    assert len(held) == 1


async def test_time_of_day_is_ignored_when_checking_conflicts(db_session, test_user, other_user, room):
    await _request(db_session, test_user, room, day=datetime(2025, 3, 10, 8, 15))

    with pytest.raises(SlotConflict):
        await _request(db_session, other_user, room, day=datetime(2025, 3, 10, 21, 45))


def test_booking_dates_normalize_to_naive_local_midnight():
    assert booking_service.normalize_booking_date(DAY) == datetime(2025, 3, 10)
    assert booking_service.normalize_booking_date(datetime(2025, 3, 10, 23, 59)) == datetime(2025, 3, 10)

    aware = datetime(2025, 3, 10, 23, 30, tzinfo=timezone(timedelta(hours=-5)))
    normalized = booking_service.normalize_booking_date(aware)

    local_day = aware.astimezone().date()
    assert normalized == datetime(local_day.year, local_day.month, local_day.day)
    assert normalized.tzinfo is None


async def test_same_slot_in_another_room_or_day_is_free(db_session, test_user, other_user, room):
    other_room = await crud.room.create(db_session, obj_in={"name": "Annex", "capacity": 2, "amenities": []})
    await _request(db_session, test_user, room)

    await _request(db_session, other_user, other_room)
    await _request(db_session, other_user, room, day=date(2025, 3, 11))
    await _request(db_session, other_user, room, slot="10:00 AM - 11:00 AM")


@pytest.mark.parametrize("terminal", ["reject", "cancel"])
async def test_rejected_or_cancelled_booking_does_not_hold_slot(db_session, test_user, other_user, admin_user, room, terminal):
    first = await _request(db_session, test_user, room)
    if terminal == "reject":
        await booking_service.reject_booking(db_session, booking_id=first.id, admin_id=admin_user.id, reason="Closed")
    else:
        await booking_service.cancel_booking(db_session, booking_id=first.id, requesting_user_id=test_user.id)

    second = await _request(db_session, other_user, room)

    assert second.status == BookingStatus.PENDING
    assert second.id != first.id


async def test_unknown_time_slot_is_rejected(db_session, test_user, room):
    with pytest.raises(InvalidRequest):
        await _request(db_session, test_user, room, slot="7:00 PM - 8:00 PM")


async def test_room_existence_is_not_checked(db_session, test_user):
    booking = await booking_service.request_booking(
        db_session, user_id=test_user.id, user_email=test_user.email, room_id=9999, date=DAY, time_slot=SLOT
    )
    assert booking.room_id == 9999


async def test_approve_records_admin_and_qr_payload(db_session, test_user, admin_user, room, clock):
    booking = await _request(db_session, test_user, room)
    approved_at = clock.tick()

    approved = await booking_service.approve_booking(
        db_session, booking_id=booking.id, admin_id=admin_user.id, admin_message="Enjoy"
    )

    assert approved.status == BookingStatus.APPROVED
    assert approved.admin_id == admin_user.id
    assert approved.admin_message == "Enjoy"
    assert approved.qr_code_data == str(booking.id)
    assert approved.updated_at == approved_at
    assert approved.updated_at > booking.created_at


async def test_approve_has_no_prior_state_guard(db_session, test_user, admin_user, room):
    booking = await _request(db_session, test_user, room)
    await booking_service.reject_booking(db_session, booking_id=booking.id, admin_id=admin_user.id, reason="Full")

    approved = await booking_service.approve_booking(db_session, booking_id=booking.id, admin_id=admin_user.id)

    assert approved.status == BookingStatus.APPROVED


async def test_reject_stores_reason_in_admin_message(db_session, test_user, admin_user, room):
    booking = await _request(db_session, test_user, room)

    rejected = await booking_service.reject_booking(
        db_session, booking_id=booking.id, admin_id=admin_user.id, reason="Room under maintenance"
    )

    assert rejected.status == BookingStatus.REJECTED
    assert rejected.admin_message == "Room under maintenance"
    assert rejected.admin_id == admin_user.id


async def test_reject_requires_reason(db_session, test_user, admin_user, room):
    booking = await _request(db_session, test_user, room)

    with pytest.raises(InvalidRequest):
        await booking_service.reject_booking(db_session, booking_id=booking.id, admin_id=admin_user.id, reason="  ")

    stored = await crud.crud_booking.get_booking_by_id(db_session, booking_id=booking.id)
    assert stored.status == BookingStatus.PENDING


async def test_missing_booking_raises_not_found(db_session, admin_user):
    with pytest.raises(NotFound):
        await booking_service.approve_booking(db_session, booking_id=404, admin_id=admin_user.id)
    with pytest.raises(NotFound):
        await booking_service.get_booking(db_session, booking_id=404)


async def test_cancel_by_non_owner_is_forbidden_and_leaves_status(db_session, test_user, other_user, room):
    booking = await _request(db_session, test_user, room)

    with pytest.raises(AuthorizationError):
        await booking_service.cancel_booking(db_session, booking_id=booking.id, requesting_user_id=other_user.id)

    stored = await crud.crud_booking.get_booking_by_id(db_session, booking_id=booking.id)
    assert stored.status == BookingStatus.PENDING


async def test_admin_cannot_cancel_someone_elses_booking(db_session, test_user, admin_user, room):
    booking = await _request(db_session, test_user, room)

    with pytest.raises(AuthorizationError):
        await booking_service.cancel_booking(db_session, booking_id=booking.id, requesting_user_id=admin_user.id)


async def test_cancelling_twice_succeeds_and_restamps(db_session, test_user, room, clock):
    booking = await _request(db_session, test_user, room)
    first_cancel = clock.tick()
    first = await booking_service.cancel_booking(db_session, booking_id=booking.id, requesting_user_id=test_user.id)
    assert first.updated_at == first_cancel

    second_cancel = clock.tick()
    second = await booking_service.cancel_booking(db_session, booking_id=booking.id, requesting_user_id=test_user.id)

    assert second.status == BookingStatus.CANCELLED
    assert second.updated_at == second_cancel
    assert second.updated_at > first_cancel


async def test_every_transition_stamps_updated_at(db_session, test_user, admin_user, room, clock):
    booking = await _request(db_session, test_user, room)
    assert booking.created_at == booking.updated_at == clock.now

    rejected_at = clock.tick()
    rejected = await booking_service.reject_booking(
        db_session, booking_id=booking.id, admin_id=admin_user.id, reason="Closed for cleaning"
    )
    assert rejected.updated_at == rejected_at
    assert rejected.admin_id == admin_user.id

    approved_at = clock.tick()
    approved = await booking_service.approve_booking(db_session, booking_id=booking.id, admin_id=admin_user.id)
    assert approved.updated_at == approved_at

    stored = await crud.crud_booking.get_booking_by_id(db_session, booking_id=booking.id)
    assert stored.created_at == booking.created_at
    assert stored.updated_at == approved_at


async def test_owner_can_cancel_a_rejected_booking(db_session, test_user, admin_user, room, clock):
    booking = await _request(db_session, test_user, room)
    await booking_service.reject_booking(db_session, booking_id=booking.id, admin_id=admin_user.id, reason="Full")

    cancelled_at = clock.tick()
    cancelled = await booking_service.cancel_booking(
        db_session, booking_id=booking.id, requesting_user_id=test_user.id
    )

    assert cancelled.status == BookingStatus.CANCELLED
    assert cancelled.updated_at == cancelled_at
    assert cancelled.admin_message == "Full"

async def test_available_slots_exclude_active_bookings(db_session, test_user, admin_user, room, monkeypatch):
    monkeypatch.setattr(settings, "TIME_SLOTS", ["S1", "S2", "S3"])
    booking = await _request(db_session, test_user, room, slot="S2")
    await booking_service.approve_booking(db_session, booking_id=booking.id, admin_id=admin_user.id)

    slots = await booking_service.list_available_slots(db_session, room_id=room.id, date=DAY)

    assert slots == ["S1", "S3"]


async def test_available_slots_keep_predefined_order_and_ignore_terminal(db_session, test_user, admin_user, room):
    pending = await _request(db_session, test_user, room, slot=settings.TIME_SLOTS[0])
    rejected = await _request(db_session, test_user, room, slot=settings.TIME_SLOTS[3])
    await booking_service.reject_booking(db_session, booking_id=rejected.id, admin_id=admin_user.id, reason="No")

    slots = await booking_service.list_available_slots(db_session, room_id=room.id, date=DAY)

    assert pending.time_slot not in slots
    assert slots == settings.TIME_SLOTS[1:]


async def test_concurrent_requests_can_double_book_a_slot(session_factory, test_user, other_user, room, monkeypatch):
    """The conflict check and the insert are not atomic.

    Both requests are held after their conflict check until the other one
    has checked too; both then write and both succeed.
    """
    original_create = crud.crud_booking.create_booking
    arrived = 0
    both_checked = asyncio.Event()

    async def create_after_both_checked(db, **kwargs):
        nonlocal arrived
        arrived += 1
        if arrived == 2:
            both_checked.set()
        await asyncio.wait_for(both_checked.wait(), timeout=5)
        return await original_create(db, **kwargs)

    monkeypatch.setattr(crud.crud_booking, "create_booking", create_after_both_checked)

    async def request_in_own_session(user):
        async with session_factory() as db:
            return await _request(db, user, room)

    first, second = await asyncio.gather(request_in_own_session(test_user), request_in_own_session(other_user))

    assert first.id != second.id
    async with session_factory() as db:
        held = await crud.crud_booking.get_active_bookings_for_slot(
            db, room_id=room.id, date=datetime(2025, 3, 10), time_slot=SLOT
        )
    assert len(held) == 2


async def test_request_notifies_requester_and_admin(db_session, test_user, room, telegram_outbox):
    booking = await _request(db_session, test_user, room)

    notifications = await crud.crud_notification.get_notifications_for_user(db_session, user_id=test_user.id)
    assert [n.title for n in notifications] == ["Booking Request Submitted"]
    assert notifications[0].type == NotificationType.BOOKING_REQUESTED.value
    assert notifications[0].related_entity_id == booking.id
    assert room.name in notifications[0].message

    assert len(telegram_outbox) == 1
    chat_id, text = telegram_outbox[0]
    assert chat_id == "admin"
    assert test_user.email in text
    assert SLOT in text


async def test_owner_with_chat_id_gets_telegram_on_approval(db_session, admin_user, room, telegram_outbox):
    owner = await make_user(db_session, telegram_chat_id="555123")
    booking = await _request(db_session, owner, room)
    telegram_outbox.clear()

    await booking_service.approve_booking(
        db_session, booking_id=booking.id, admin_id=admin_user.id, admin_message="See you"
    )

    assert len(telegram_outbox) == 1
    chat_id, text = telegram_outbox[0]
    assert chat_id == "555123"
    assert "Booking Approved!" in text
    assert "Admin Message: See you" in text


async def test_owner_without_chat_id_gets_only_in_app_notice(db_session, test_user, admin_user, room, telegram_outbox):
    booking = await _request(db_session, test_user, room)
    telegram_outbox.clear()

    await booking_service.reject_booking(db_session, booking_id=booking.id, admin_id=admin_user.id, reason="Closed")

    assert telegram_outbox == []
    notifications = await crud.crud_notification.get_notifications_for_user(db_session, user_id=test_user.id)
    assert notifications[0].title == "Booking Rejected"
    assert "Reason: Closed" in notifications[0].message


async def test_notification_failures_do_not_fail_the_booking(db_session, test_user, room, monkeypatch):
    async def broken_notify_admin(text, *, client=None):
        raise ConnectionError("telegram unreachable")

    async def broken_create_notification(db, **kwargs):
        raise OperationalError("INSERT INTO notifications", {}, Exception("database is locked"))

    monkeypatch.setattr(booking_service.telegram, "notify_admin", broken_notify_admin)
    monkeypatch.setattr(crud.crud_notification, "create_notification", broken_create_notification)

    booking = await _request(db_session, test_user, room)

    assert booking.status == BookingStatus.PENDING
    stored = await crud.crud_booking.get_booking_by_id(db_session, booking_id=booking.id)
    assert stored is not None


async def test_store_failures_surface_as_transient_errors(db_session, test_user, room, monkeypatch):
    async def broken_query(db, **kwargs):
        raise OperationalError("SELECT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(crud.crud_booking, "get_active_bookings_for_slot", broken_query)

    with pytest.raises(TransientStoreError) as exc_info:
        await _request(db_session, test_user, room)

    assert isinstance(exc_info.value.__cause__, OperationalError)


async def test_add_violation_appends_and_notifies(db_session, test_user, admin_user, room):
    booking = await _request(db_session, test_user, room)

    await booking_service.add_violation(db_session, booking_id=booking.id, admin_id=admin_user.id, note="Left food")
    updated = await booking_service.add_violation(db_session, booking_id=booking.id, admin_id=admin_user.id, note="Noise")

    assert updated.violations == ["Left food", "Noise"]
    notifications = await crud.crud_notification.get_notifications_for_user(db_session, user_id=test_user.id)
    assert sum(1 for n in notifications if n.type == NotificationType.BOOKING_VIOLATION.value) == 2


async def test_check_in_requires_approved_booking(db_session, test_user, admin_user, room):
    booking = await _request(db_session, test_user, room)

    with pytest.raises(InvalidRequest):
        await booking_service.check_in(db_session, qr_payload=str(booking.id), admin_id=admin_user.id)

    approved = await booking_service.approve_booking(db_session, booking_id=booking.id, admin_id=admin_user.id)
    checked_in = await booking_service.check_in(db_session, qr_payload=approved.qr_code_data, admin_id=admin_user.id)

    assert checked_in.checked_in_at is not None


async def test_check_in_with_unknown_or_garbled_payload(db_session, admin_user):
    with pytest.raises(NotFound):
        await booking_service.check_in(db_session, qr_payload="12345", admin_id=admin_user.id)
    with pytest.raises(InvalidRequest):
        await booking_service.check_in(db_session, qr_payload="https://example.com", admin_id=admin_user.id)
    with pytest.raises(InvalidRequest):
        await booking_service.check_in(db_session, qr_payload="²", admin_id=admin_user.id)
    with pytest.raises(InvalidRequest):
        await booking_service.check_in(db_session, qr_payload="٣", admin_id=admin_user.id)


async def test_external_references_are_recorded(db_session, test_user, room):
    booking = await _request(db_session, test_user, room)

    await booking_service.attach_pdf_confirmation(db_session, booking_id=booking.id, reference="pdf/confirm-1.pdf")
    updated = await booking_service.attach_calendar_event(db_session, booking_id=booking.id, reference="evt_abc")

    assert updated.pdf_confirmation_ref == "pdf/confirm-1.pdf"
    assert updated.calendar_event_ref == "evt_abc"


async def test_listing_filters(db_session, test_user, other_user, admin_user, room):
    mine = await _request(db_session, test_user, room)
    theirs = await _request(db_session, other_user, room, slot="10:00 AM - 11:00 AM")
    await booking_service.approve_booking(db_session, booking_id=theirs.id, admin_id=admin_user.id)

    assert [b.id for b in await booking_service.list_user_bookings(db_session, user_id=test_user.id)] == [mine.id]
    pending = await booking_service.list_pending_bookings(db_session)
    assert [b.id for b in pending] == [mine.id]
    approved = await booking_service.list_bookings(db_session, status=BookingStatus.APPROVED, room_id=room.id, date=DAY)
    assert [b.id for b in approved] == [theirs.id]
    assert await booking_service.list_bookings(db_session, date=date(2025, 3, 11)) == []


async def test_room_names_fall_back_to_id(db_session, test_user, room):
    known = await _request(db_session, test_user, room)
    unknown = await booking_service.request_booking(
        db_session, user_id=test_user.id, user_email=test_user.email, room_id=777, date=DAY, time_slot=SLOT
    )

    rows = await booking_service.with_room_names(db_session, [known, unknown])

    assert rows[0].room_name == room.name
    assert rows[1].room_name == "777"
