# app/db/database.py
import logging
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker, declarative_base
from app.core.config import settings

logger = logging.getLogger(__name__)

try:
    database_url = str(settings.get_database_url)

    # Hosted MySQL hands out 'mysql://...'; the async engine needs aiomysql
    if database_url and database_url.startswith("mysql://"):
        database_url = database_url.replace("mysql://", "mysql+aiomysql://")

    engine_kwargs = {"pool_pre_ping": True, "echo": False}
    if database_url.startswith("mysql"):
        engine_kwargs.update(
            pool_recycle=3600,
            pool_size=settings.DATABASE_POOL_SIZE,
            max_overflow=settings.DATABASE_MAX_OVERFLOW,
        )

    engine = create_async_engine(database_url, **engine_kwargs)
    logger.info("Async database engine created.")

except Exception as e:
    logger.error(f"Failed to create async engine: {e}")
    raise

# Use expire_on_commit=False to keep objects usable after commit
AsyncSessionLocal = sessionmaker(
    bind=engine,
    class_=AsyncSession,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False
)

Base = declarative_base()


async def get_db() -> AsyncSession:
    """
    Dependency that provides an async database session.
    Ensures session is closed after request is handled.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


async def create_db_and_tables():
    # models must be imported so their tables are registered on Base.metadata
    from app.models import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def get_engine():
    """Helper to expose engine (useful for migrations)."""
    return engine
