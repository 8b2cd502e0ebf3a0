import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from channel_access.db.database import Base
from channel_access.db.models import (
    User, Channel, ChannelMember, ChannelAdmin, ChannelOwner, SuperUser,
)

# Each test gets its own in-memory database. StaticPool keeps a single
# connection so every session opened on the engine sees the same data.
TEST_DATABASE_URL = "sqlite+aiosqlite://"


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
async def test_engine():
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine.sync_engine, "connect", _enable_sqlite_foreign_keys)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def test_session(test_engine):
    async_session = sessionmaker(
        test_engine, class_=AsyncSession, expire_on_commit=False
    )
    async with async_session() as session:
        yield session


@pytest.fixture
def make_user(test_session):
    """Create and commit a user; returns the persisted User."""
    async def _make_user(username: str) -> User:
        user = User(username=username, email=f"{username}@example.com", display_name=username.title())
        test_session.add(user)
        await test_session.commit()
        return user
    return _make_user


@pytest.fixture
def make_channel(test_session):
    async def _make_channel(name: str) -> Channel:
        channel = Channel(name=name, display_name=name.title())
        test_session.add(channel)
        await test_session.commit()
        return channel
    return _make_channel


@pytest.fixture
def grant(test_session):
    """Insert a relation row directly, bypassing the stores.

    kind is one of "member", "admin", "owner", "super_user".
    """
    models = {"member": ChannelMember, "admin": ChannelAdmin, "owner": ChannelOwner}

    async def _grant(kind: str, user: User, channel: Channel | None = None):
        if kind == "super_user":
            row = SuperUser(user_id=user.id)
        else:
            row = models[kind](user_id=user.id, channel_id=channel.id)
        test_session.add(row)
        await test_session.commit()
        return row
    return _grant
