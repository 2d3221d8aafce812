"""
Library Room Booking - test configuration and fixtures
"""
import os
from typing import AsyncGenerator

import pytest
from faker import Faker
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Settings are read at import time
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test_library_booking.db'
os.environ['SECRET_KEY'] = 'test-secret-key-for-testing-only'
os.environ['LOG_LEVEL'] = 'DEBUG'
for key in ('TELEGRAM_BOT_TOKEN', 'TELEGRAM_ADMIN_CHAT_ID'):
    os.environ.pop(key, None)

from app import crud, schemas
from app.db.base_class import Base
from app.db.session import get_db
from app.main import fastapi_app
from app.models import Room, User
from app.models.enums import UserRole
from app.services import auth_service
from app.utils import telegram

fake = Faker()

TEST_PASSWORD = 'testpassword123'


@pytest.fixture
async def engine(tmp_path):
    """A fresh SQLite file database per test"""
    test_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """Test client; every request gets its own session, like production"""
    async def override_get_db():
        async with session_factory() as session:
            yield session

    fastapi_app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    fastapi_app.dependency_overrides.clear()


async def make_user(db: AsyncSession, role: UserRole = UserRole.USER, **fields) -> User:
    user = await crud.crud_user.create_user(
        db,
        obj_in=schemas.UserCreate(email=fake.unique.email(), full_name=fake.name(), password=TEST_PASSWORD),
        role=role,
    )
    if fields:
        for key, value in fields.items():
            setattr(user, key, value)
        await db.commit()
        await db.refresh(user)
    return user


def headers_for(user: User) -> dict:
    return {'Authorization': f'Bearer {auth_service.issue_access_token(user)}'}


@pytest.fixture
async def test_user(db_session: AsyncSession) -> User:
    return await make_user(db_session)


@pytest.fixture
async def other_user(db_session: AsyncSession) -> User:
    return await make_user(db_session)


@pytest.fixture
async def admin_user(db_session: AsyncSession) -> User:
    return await make_user(db_session, role=UserRole.ADMIN)


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    return headers_for(test_user)


@pytest.fixture
def other_auth_headers(other_user: User) -> dict:
    return headers_for(other_user)


@pytest.fixture
def admin_auth_headers(admin_user: User) -> dict:
    return headers_for(admin_user)


@pytest.fixture
async def room(db_session: AsyncSession) -> Room:
    return await crud.room.create(
        db_session,
        obj_in=schemas.RoomCreate(name=f"{fake.last_name()} Room", capacity=6, amenities=['Whiteboard']),
    )


@pytest.fixture
def telegram_outbox(monkeypatch) -> list:
    """Records Telegram sends instead of calling the Bot API: [(chat_id, text)]"""
    outbox = []

    async def fake_send_message(chat_id, text, *, client=None):
        outbox.append((chat_id, text))
        return True

    async def fake_notify_admin(text, *, client=None):
        outbox.append(('admin', text))
        return True

    monkeypatch.setattr(telegram, 'send_message', fake_send_message)
    monkeypatch.setattr(telegram, 'notify_admin', fake_notify_admin)
    return outbox
