import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from starlette.middleware.cors import CORSMiddleware
import socketio

from app.routers import (
    auth, users, rooms, bookings, admin_bookings,
    announcements, feedback, notifications,
)
from app.core.config import settings
from app.core.exceptions import ServiceError
from app.services.booking_events import booking_events
from app.socket_handlers import bridge_booking_events, register_socketio_handlers
from app.socket_instance import sio

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Initialize FastAPI app, but name it 'fastapi_app' to avoid conflict
fastapi_app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json"
)

fastapi_app.state.sio = sio

# Set all CORS enabled origins
if settings.ALLOWED_ORIGINS:
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=[str(origin).strip() for origin in settings.ALLOWED_ORIGINS],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

@fastapi_app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

api = settings.API_V1_STR
fastapi_app.include_router(auth.router, prefix=f"{api}/auth", tags=["auth"])
fastapi_app.include_router(users.router, prefix=f"{api}/users", tags=["users"])
fastapi_app.include_router(rooms.router, prefix=f"{api}/rooms", tags=["rooms"])
fastapi_app.include_router(bookings.router, prefix=f"{api}/bookings", tags=["bookings"])
fastapi_app.include_router(admin_bookings.router, prefix=f"{api}/admin/bookings", tags=["admin bookings"])
fastapi_app.include_router(announcements.router, prefix=f"{api}/announcements", tags=["announcements"])
fastapi_app.include_router(feedback.router, prefix=f"{api}/feedback", tags=["feedback"])
fastapi_app.include_router(notifications.router, prefix=f"{api}/notifications", tags=["notifications"])

@fastapi_app.get("/health", tags=["health"])
def read_root():
    return {"status": "ok"}

# Create the final ASGI app that wraps FastAPI and Socket.IO.
# This 'app' is what uvicorn will run.
app = socketio.asgi.ASGIApp(sio, other_asgi_app=fastapi_app)
register_socketio_handlers(sio)
bridge_booking_events(sio, booking_events)
