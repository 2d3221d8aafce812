import asyncio
import os
import sys

from faker import Faker
from sqlalchemy.ext.asyncio import AsyncSession

# Make sure paths are correct for script execution
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

from app import crud, schemas
from app.db.session import AsyncSessionLocal
from app.models import Announcement, Booking, Feedback, Notification, Room, User
from app.models.enums import UserRole

faker = Faker()

DEFAULT_PASSWORD = "Password123!"
ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@citylibrary.org")

AMENITIES = ["Projector", "Whiteboard", "TV Screen", "Video Conferencing", "Power Outlets", "Air Conditioning"]

seeded_user_credentials = {}

async def clear_all_data(db: AsyncSession):
    """Clears all data for a fresh seed, children before parents."""
    print("--- Clearing All Existing Data ---")
    for model in (Notification, Feedback, Booking, Announcement, Room, User):
        await db.execute(model.__table__.delete())
    await db.commit()

async def create_user(db: AsyncSession, email: str, full_name: str, role: UserRole) -> User:
    existing = await crud.crud_user.get_user_by_email(db, email=email)
    if existing:
        print(f"User {email} already exists. Skipping creation.")
        return existing
    user = await crud.crud_user.create_user(
        db,
        obj_in=schemas.UserCreate(email=email, full_name=full_name, password=DEFAULT_PASSWORD),
        role=role,
    )
    seeded_user_credentials[email] = DEFAULT_PASSWORD
    print(f"Created User: {email} (Role: {role.value})")
    return user

async def create_rooms(db: AsyncSession, count: int = 6):
    for i in range(count):
        room_in = schemas.RoomCreate(
            name=f"{faker.last_name()} Study Room {i + 1}",
            capacity=faker.random_int(min=2, max=12),
            amenities=faker.random_elements(elements=AMENITIES, length=3, unique=True),
        )
        room = await crud.room.create(db, obj_in=room_in)
        print(f"Created Room: {room.name} (capacity {room.capacity})")

async def seed_data(clear: bool = False):
    async with AsyncSessionLocal() as db:
        if clear:
            await clear_all_data(db)

        print("--- Seeding Library Data ---")
        admin = await create_user(db, ADMIN_EMAIL, "Library Admin", UserRole.ADMIN)
        for _ in range(3):
            await create_user(db, faker.unique.email(), faker.name(), UserRole.USER)

        print("\n--- Creating Rooms ---")
        await create_rooms(db)

        await crud.announcement.create(
            db,
            obj_in=schemas.AnnouncementCreate(
                title="Welcome",
                message="Study rooms can now be booked online. Requests are reviewed by library staff.",
            ),
            admin_id=admin.id,
        )
    print("\n--- Seeding Completed ---")

    print("\n--- Seeded User Credentials ---")
    for email, password in seeded_user_credentials.items():
        print(f"Email: {email}, Password: {password}")

async def main():
    print("Starting database seed process...")
    await seed_data(clear="--clear" in sys.argv)
    print("Database seed process finished.")

if __name__ == "__main__":
    # Apply migrations first: alembic upgrade head
    asyncio.run(main())
