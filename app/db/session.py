from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from app.core.config import settings

# One engine per process, shared by every request
engine = create_async_engine(settings.DATABASE_URL, pool_pre_ping=True)

# Create a session factory bound to the engine
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

# Dependency function for FastAPI to get a DB session
async def get_db() -> AsyncSession:
    """Dependency function to get DB session."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
