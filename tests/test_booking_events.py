import asyncio
from datetime import date, datetime

import pytest

from app.core.exceptions import SlotConflict
from app.models.enums import BookingStatus
from app.services import booking_service
from app.services.booking_events import BookingEvent, BookingEventHub, BookingEventType, booking_events
from app.socket_handlers import bridge_booking_events
from app.socket_instance import ADMINS_ROOM, room_watch_room

DAY = datetime(2025, 3, 10)


def make_event(**overrides) -> BookingEvent:
    fields = dict(
        type=BookingEventType.REQUESTED,
        booking_id=1,
        user_id=10,
        room_id=3,
        date=DAY,
        time_slot="9:00 AM - 10:00 AM",
        status=BookingStatus.PENDING,
    )
    fields.update(overrides)
    return BookingEvent(**fields)


async def test_publish_respects_every_filter():
    hub = BookingEventHub()
    seen = {"all": [], "user": [], "room_day": [], "approved": []}
    hub.subscribe(seen["all"].append)
    hub.subscribe(seen["user"].append, user_id=10)
    hub.subscribe(seen["room_day"].append, room_id=3, date=DAY)
    hub.subscribe(seen["approved"].append, statuses=[BookingStatus.APPROVED])

    await hub.publish(make_event())
    await hub.publish(make_event(booking_id=2, user_id=11, room_id=4))
    await hub.publish(make_event(booking_id=3, status=BookingStatus.APPROVED, date=datetime(2025, 3, 11)))

    assert [e.booking_id for e in seen["all"]] == [1, 2, 3]
    assert [e.booking_id for e in seen["user"]] == [1, 3]
    assert [e.booking_id for e in seen["room_day"]] == [1]
    assert [e.booking_id for e in seen["approved"]] == [3]


async def test_listeners_run_in_registration_order_sync_and_async():
    hub = BookingEventHub()
    calls = []

    async def async_listener(event):
        await asyncio.sleep(0)
        calls.append("async")

    hub.subscribe(lambda event: calls.append("first"))
    hub.subscribe(async_listener)
    hub.subscribe(lambda event: calls.append("last"))

    delivered = await hub.publish(make_event())

    assert calls == ["first", "async", "last"]
    assert delivered == 3


async def test_failing_listener_is_isolated():
    hub = BookingEventHub()
    received = []

    def broken(event):
        raise RuntimeError("listener bug")

    hub.subscribe(broken)
    hub.subscribe(received.append)

    delivered = await hub.publish(make_event())

    assert delivered == 1
    assert len(received) == 1


async def test_unsubscribe_is_idempotent_and_context_manager_tears_down():
    hub = BookingEventHub()
    received = []

    subscription = hub.subscribe(received.append)
    subscription.unsubscribe()
    subscription.unsubscribe()
    assert not subscription.active

    with hub.subscribe(received.append) as scoped:
        assert scoped.active
        await hub.publish(make_event())
    assert not scoped.active
    assert len(hub) == 0

    await hub.publish(make_event(booking_id=2))
    assert [e.booking_id for e in received] == [1]


async def test_stream_yields_matching_events_and_unsubscribes_on_close():
    hub = BookingEventHub()
    stream = hub.stream(room_id=3)

    consumer = asyncio.ensure_future(stream.__anext__())
    await asyncio.sleep(0)
    assert len(hub) == 1

    await hub.publish(make_event(room_id=4))
    await hub.publish(make_event(booking_id=7))
    event = await asyncio.wait_for(consumer, timeout=1)

    assert event.booking_id == 7
    await stream.aclose()
    assert len(hub) == 0


def test_event_serializes_to_plain_dict():
    payload = make_event(data={"id": 1}).to_dict()

    assert payload["type"] == "requested"
    assert payload["status"] == "Pending"
    assert payload["booking"] == {"id": 1}
    assert isinstance(payload["timestamp"], str)


async def test_lifecycle_changes_are_published(db_session, test_user, admin_user, room):
    events = []
    with booking_events.subscribe(events.append, user_id=test_user.id):
        booking = await booking_service.request_booking(
            db_session,
            user_id=test_user.id,
            user_email=test_user.email,
            room_id=room.id,
            date=date(2025, 3, 10),
            time_slot="9:00 AM - 10:00 AM",
        )
        await booking_service.approve_booking(db_session, booking_id=booking.id, admin_id=admin_user.id)
        await booking_service.check_in(db_session, qr_payload=str(booking.id), admin_id=admin_user.id)
        await booking_service.cancel_booking(db_session, booking_id=booking.id, requesting_user_id=test_user.id)

    assert [e.type for e in events] == [
        BookingEventType.REQUESTED,
        BookingEventType.APPROVED,
        BookingEventType.CHECKED_IN,
        BookingEventType.CANCELLED,
    ]
    assert events[1].data["qr_code_data"] == str(booking.id)
    assert events[-1].status == BookingStatus.CANCELLED
    assert all(e.booking_id == booking.id for e in events)


async def test_conflicting_request_publishes_nothing(db_session, test_user, other_user, room):
    kwargs = dict(room_id=room.id, date=date(2025, 3, 10), time_slot="9:00 AM - 10:00 AM")
    await booking_service.request_booking(db_session, user_id=test_user.id, user_email=test_user.email, **kwargs)

    events = []
    with booking_events.subscribe(events.append, room_id=room.id):
        with pytest.raises(SlotConflict):
            await booking_service.request_booking(
                db_session, user_id=other_user.id, user_email=other_user.email, **kwargs
            )

    assert events == []


class RecordingServer:
    def __init__(self):
        self.emitted = []

    async def emit(self, event, data=None, room=None, **kwargs):
        self.emitted.append((event, data, room))


async def test_socket_bridge_emits_once_to_owner_admins_and_watchers():
    hub = BookingEventHub()
    server = RecordingServer()
    subscription = bridge_booking_events(server, hub)

    await hub.publish(make_event(user_id=10, room_id=3))
    subscription.unsubscribe()
    await hub.publish(make_event(booking_id=2))

    assert len(server.emitted) == 1
    event, data, rooms = server.emitted[0]
    assert event == "booking_changed"
    assert data["booking_id"] == 1
    assert rooms == ["10", ADMINS_ROOM, room_watch_room(3)]
