import socketio
import logging
from jose import JWTError
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from app import crud, models, security
from app.db.session import AsyncSessionLocal
from app.schemas.token import TokenPayload
from app.services.booking_events import BookingEvent, BookingEventHub, Subscription
from app.socket_instance import ADMINS_ROOM, room_watch_room

logger = logging.getLogger(__name__)

# {sid: user_id}. Single process only.
sid_user_map = {}

async def _get_user_from_token(token: str, db: AsyncSession) -> Optional[models.User]:
    """Helper to validate token and get the connecting user."""
    if not token:
        return None
    try:
        payload = security.decode_access_token(token)
        token_data = TokenPayload(**payload)
        if token_data.user_id is None:
            logger.warning("Token payload missing user_id")
            return None
    except (JWTError, ValidationError) as e:
        logger.warning(f"Token validation error: {e}")
        return None

    user = await crud.crud_user.get_user_by_id(db, user_id=token_data.user_id)
    if user is None:
        logger.warning(f"User not found for ID: {token_data.user_id}")
        return None
    if not user.is_active:
        logger.warning(f"Attempted connection by inactive user: {user.id}")
        return None
    return user

def _parse_room_id(data) -> Optional[int]:
    try:
        return int(data['room_id'])
    except (KeyError, ValueError, TypeError):
        return None

def register_socketio_handlers(sio: socketio.AsyncServer):
    @sio.event
    async def connect(sid, environ, auth):
        """Authenticates the client and joins its user room (and 'admins' for admins)."""
        token = auth.get('token') if auth else None
        if not token:
            logger.warning(f"Connection refused for {sid}: No token provided.")
            return False

        async with AsyncSessionLocal() as db:
            user = await _get_user_from_token(token, db)
        if not user:
            logger.warning(f"Connection refused for {sid}: Token is invalid or user not found.")
            return False

        sid_user_map[sid] = user.id
        await sio.enter_room(sid, str(user.id))
        if user.is_admin:
            await sio.enter_room(sid, ADMINS_ROOM)
        logger.info(f"Sid {sid} connected as user {user.id}{' (admin)' if user.is_admin else ''}")

    @sio.event
    async def disconnect(sid):
        user_id = sid_user_map.pop(sid, None)
        if user_id is None:
            logger.warning(f"Sid {sid} disconnected but had no user mapping.")
        else:
            logger.info(f"Sid {sid} (user {user_id}) disconnected")

    @sio.on('watch_room')
    async def handle_watch_room(sid, data):
        """Subscribe this client to booking changes of one library room."""
        if sid not in sid_user_map:
            logger.warning(f"Received 'watch_room' from unknown sid: {sid}")
            return
        room_id = _parse_room_id(data)
        if room_id is None:
            logger.error(f"Invalid 'watch_room' data from {sid}: {data}")
            return
        await sio.enter_room(sid, room_watch_room(room_id))
        logger.debug(f"Sid {sid} watching room {room_id}")

    @sio.on('unwatch_room')
    async def handle_unwatch_room(sid, data):
        room_id = _parse_room_id(data)
        if room_id is None:
            logger.error(f"Invalid 'unwatch_room' data from {sid}: {data}")
            return
        await sio.leave_room(sid, room_watch_room(room_id))


def bridge_booking_events(sio: socketio.AsyncServer, hub: BookingEventHub) -> Subscription:
    """
    Forwards every booking change as 'booking_changed' to the owner's user
    room, to 'admins', and to clients watching the booked library room.
    A client in several of those rooms receives the event once.
    """

    async def _forward(event: BookingEvent) -> None:
        rooms = [str(event.user_id), ADMINS_ROOM, room_watch_room(event.room_id)]
        await sio.emit('booking_changed', event.to_dict(), room=rooms)

    return hub.subscribe(_forward)
