import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from fightnight.database import init_db
from fightnight.services.store import GuildStore


@pytest_asyncio.fixture
async def store():
    """GuildStore on a fresh in-memory database."""
    # StaticPool shares the single in-memory connection across sessions
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await init_db(engine)
    yield GuildStore(async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False))
    await engine.dispose()
