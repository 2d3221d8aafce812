"""
Booking change subscriptions.

Every committed state change of a booking is published here as a
``BookingEvent``. Consumers register a filter (equality on user, room, day
and/or a set of statuses) and receive only matching events:

    subscription = booking_events.subscribe(on_change, room_id=3)
    ...
    subscription.unsubscribe()

or, as an async stream with teardown on exit:

    async for event in booking_events.stream(user_id=user.id):
        ...

Listener failures are logged and never reach the publisher.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, AsyncIterator, Callable, Dict, FrozenSet, Iterable, List, Optional
import asyncio
import itertools
import logging

from app.models.enums import BookingStatus

logger = logging.getLogger(__name__)


class BookingEventType(str, Enum):
    REQUESTED = "requested"
    APPROVED = "approved"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    VIOLATION_ADDED = "violation_added"
    CHECKED_IN = "checked_in"
    UPDATED = "updated"


@dataclass
class BookingEvent:
    type: BookingEventType
    booking_id: int
    user_id: int
    room_id: int
    date: datetime
    time_slot: str
    status: BookingStatus
    data: Dict[str, Any] = field(default_factory=dict) # Serialized booking
    timestamp: datetime = field(default_factory=datetime.utcnow)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type.value,
            "booking_id": self.booking_id,
            "status": self.status.value,
            "booking": self.data,
            "timestamp": self.timestamp.isoformat(),
        }


BookingListener = Callable[[BookingEvent], Any]


@dataclass(frozen=True)
class BookingQuery:
    """Equality filter over the fields of a booking. None means 'any'."""
    user_id: Optional[int] = None
    room_id: Optional[int] = None
    date: Optional[datetime] = None
    statuses: Optional[FrozenSet[BookingStatus]] = None

    def matches(self, event: BookingEvent) -> bool:
        if self.user_id is not None and event.user_id != self.user_id:
            return False
        if self.room_id is not None and event.room_id != self.room_id:
            return False
        if self.date is not None and event.date != self.date:
            return False
        if self.statuses is not None and event.status not in self.statuses:
            return False
        return True


class Subscription:
    def __init__(self, hub: "BookingEventHub", subscription_id: int, query: BookingQuery, listener: BookingListener):
        self._hub = hub
        self.id = subscription_id
        self.query = query
        self.listener = listener

    @property
    def active(self) -> bool:
        return self._hub.is_subscribed(self)

    def unsubscribe(self) -> None:
        self._hub.unsubscribe(self)

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, *exc_info) -> None:
        self.unsubscribe()


class BookingEventHub:
    def __init__(self):
        self._subscriptions: Dict[int, Subscription] = {}
        self._ids = itertools.count(1)

    def subscribe(
        self,
        listener: BookingListener,
        *,
        user_id: Optional[int] = None,
        room_id: Optional[int] = None,
        date: Optional[datetime] = None,
        statuses: Optional[Iterable[BookingStatus]] = None,
    ) -> Subscription:
        query = BookingQuery(
            user_id=user_id,
            room_id=room_id,
            date=date,
            statuses=frozenset(statuses) if statuses is not None else None,
        )
        subscription = Subscription(self, next(self._ids), query, listener)
        self._subscriptions[subscription.id] = subscription
        logger.debug(f"Registered booking subscription {subscription.id} with {query}")
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        if self._subscriptions.pop(subscription.id, None) is not None:
            logger.debug(f"Removed booking subscription {subscription.id}")

    def is_subscribed(self, subscription: Subscription) -> bool:
        return subscription.id in self._subscriptions

    def __len__(self) -> int:
        return len(self._subscriptions)

    async def publish(self, event: BookingEvent) -> int:
        """Deliver an event to every matching listener in registration order.

        Returns the number of listeners that received it.
        """
        # Snapshot, so listeners may (un)subscribe while being called
        targets: List[Subscription] = [
            s for s in list(self._subscriptions.values()) if s.query.matches(event)
        ]
        delivered = 0
        for subscription in targets:
            try:
                result = subscription.listener(event)
                if asyncio.iscoroutine(result):
                    await result
                delivered += 1
            except Exception as e:
                logger.error(
                    f"Booking listener {subscription.id} failed on {event.type.value} for booking {event.booking_id}: {e}",
                    exc_info=True,
                )
        return delivered

    async def stream(
        self,
        *,
        user_id: Optional[int] = None,
        room_id: Optional[int] = None,
        date: Optional[datetime] = None,
        statuses: Optional[Iterable[BookingStatus]] = None,
        max_queue: int = 100,
    ) -> AsyncIterator[BookingEvent]:
        queue: asyncio.Queue = asyncio.Queue(maxsize=max_queue)

        def _enqueue(event: BookingEvent) -> None:
            try:
                queue.put_nowait(event)
            except asyncio.QueueFull:
                logger.warning(f"Booking stream queue full; dropping event for booking {event.booking_id}")

        subscription = self.subscribe(_enqueue, user_id=user_id, room_id=room_id, date=date, statuses=statuses)
        try:
            while True:
                yield await queue.get()
        finally:
            subscription.unsubscribe()


booking_events = BookingEventHub()
