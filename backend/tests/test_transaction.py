import pytest
from sqlalchemy import select, func, inspect as sa_inspect

from channel_access.db.database import transaction
from channel_access.db.models import ChannelMember, ChannelAdmin
from channel_access.permissions.repository import member_store, admin_store

pytestmark = pytest.mark.anyio


async def _count(session, model) -> int:
    result = await session.execute(select(func.count()).select_from(model))
    return result.scalar_one()


async def test_error_after_write_rolls_back_everything(test_session, make_user, make_channel):
    user = await make_user("alice")
    channel = await make_channel("general")
    user_id, channel_id = user.id, channel.id

    with pytest.raises(RuntimeError):
        async with transaction(test_session):
            await member_store.create(test_session, user_id, channel_id)
            await admin_store.create(test_session, user_id, channel_id)
            raise RuntimeError("write failed")

    assert await _count(test_session, ChannelMember) == 0
    assert await _count(test_session, ChannelAdmin) == 0


async def test_nested_block_joins_outer_transaction(test_session, make_user, make_channel):
    user = await make_user("alice")
    channel = await make_channel("general")
    user_id, channel_id = user.id, channel.id

    outer = await test_session.begin()
    async with transaction(test_session):
        await member_store.create(test_session, user_id, channel_id)
    # The inner block did not commit: the outer owner decides.
    assert test_session.in_transaction()
    await outer.rollback()

    assert await _count(test_session, ChannelMember) == 0


async def test_idle_session_commits(test_session, test_engine, make_user, make_channel):
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.orm import sessionmaker

    user = await make_user("alice")
    channel = await make_channel("general")

    async with transaction(test_session):
        await member_store.create(test_session, user.id, channel.id)
    assert not test_session.in_transaction()

    other_factory = sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with other_factory() as other:
        assert await _count(other, ChannelMember) == 1


async def test_rollback_expires_loaded_instances(test_session, make_user, make_channel):
    user = await make_user("alice")
    channel = await make_channel("general")
    user_id, channel_id = user.id, channel.id

    with pytest.raises(RuntimeError):
        async with transaction(test_session):
            await member_store.create(test_session, user_id, channel_id)
            raise RuntimeError("write failed")

    assert sa_inspect(user).expired
    # Ids captured before the block remain usable.
    assert not await member_store.exists(test_session, user_id, channel_id)
