"""
Out-of-band super user provisioning.

Not gated by any channel role: only operators with direct database access
(see scripts/grant_super_user.py) call these.
"""
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from channel_access.core.logging import permissions_logger
from channel_access.db.database import transaction
from channel_access.db.models import SuperUser, User
from channel_access.permissions.repository import super_user_store
from channel_access.services.users import get_user


async def grant_super_user(db: AsyncSession, identifier: str) -> tuple[SuperUser, bool]:
    """Grant super user to a user. Returns (grant, created); existing grants are kept."""
    async with transaction(db):
        user = await get_user(db, identifier)
        result = await db.execute(select(SuperUser).where(SuperUser.user_id == user.id))
        grant = result.scalar_one_or_none()
        if grant is not None:
            return grant, False
        grant = await super_user_store.create(db, user.id)
        user_id = user.id

    permissions_logger.info("super user granted", user_id=user_id)
    return grant, True


async def revoke_super_user(db: AsyncSession, identifier: str) -> bool:
    """Revoke a user's super user grant. Returns False if there was none."""
    async with transaction(db):
        user = await get_user(db, identifier)
        result = await db.execute(select(SuperUser).where(SuperUser.user_id == user.id))
        grant = result.scalar_one_or_none()
        if grant is None:
            return False
        await super_user_store.delete(db, grant.id)
        user_id = user.id

    permissions_logger.info("super user revoked", user_id=user_id)
    return True


async def list_super_users(db: AsyncSession) -> list[User]:
    async with transaction(db):
        grants = await super_user_store.list_all(db)
        if not grants:
            return []
        result = await db.execute(
            select(User).where(User.id.in_([g.user_id for g in grants])).order_by(User.id)
        )
        return list(result.scalars().all())
