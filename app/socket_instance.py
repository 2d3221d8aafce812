import socketio
from app.core.config import settings

# Same origins as the HTTP API; clients authenticate on connect with their JWT
sio = socketio.AsyncServer(
    async_mode='asgi',
    cors_allowed_origins=settings.ALLOWED_ORIGINS,
)

ADMINS_ROOM = "admins"

def room_watch_room(room_id: int) -> str:
    """Socket.IO room for clients watching slot changes of one library room."""
    return f"room:{room_id}"
