from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from channel_access.core.config import settings

# Convert sync URL to async
DATABASE_URL = settings.DATABASE_URL
if DATABASE_URL.startswith("postgresql://"):
    ASYNC_DATABASE_URL = DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://", 1)
else:
    ASYNC_DATABASE_URL = DATABASE_URL

async_engine = create_async_engine(ASYNC_DATABASE_URL, echo=settings.DEBUG)

# Session factory
async_session = async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)

# Base class for models
Base = declarative_base()


async def get_db():
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


@asynccontextmanager
async def transaction(db: AsyncSession):
    """Run a block as one logical transaction.

    Opens (and commits or rolls back) a transaction when the session is idle.
    When the caller already holds an open transaction the block joins it and
    the caller keeps ownership of commit/rollback, so nested operations such
    as the admin gate inside a membership change share one snapshot.

    A rollback expires every instance loaded in the session, even with
    expire_on_commit=False. Read the ids you still need (user.id and the
    like) before the block; touching an expired attribute afterwards lazy
    loads outside the greenlet and fails under asyncio.
    """
    if db.in_transaction():
        yield db
        return
    async with db.begin():
        yield db


async def create_tables():
    async with async_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
