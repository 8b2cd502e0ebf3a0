"""
Role relation storage.

One generic store for the channel-scoped relation kinds (member, admin,
owner) and one for the global super-user grant. Stores hold no
cross-relation logic: they answer existence, enumerate, insert and delete,
enforcing per-kind uniqueness.
"""
from sqlalchemy import select, exists as sa_exists
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from channel_access.core.logging import db_logger
from channel_access.db.models import ChannelMember, ChannelAdmin, ChannelOwner, SuperUser
from channel_access.permissions.exceptions import Conflict, NotFound


class ChannelRelationStore:
    """Storage for one channel-scoped relation kind, tagged by its model."""

    def __init__(self, model, label: str):
        self.model = model
        self.label = label

    def __repr__(self) -> str:
        return f"ChannelRelationStore({self.model.__name__})"

    async def exists(self, db: AsyncSession, user_id: int, channel_id: int) -> bool:
        result = await db.execute(
            select(
                sa_exists().where(
                    self.model.user_id == user_id,
                    self.model.channel_id == channel_id,
                )
            )
        )
        return bool(result.scalar())

    async def list_by_channel(self, db: AsyncSession, channel_id: int) -> list:
        result = await db.execute(
            select(self.model)
            .where(self.model.channel_id == channel_id)
            .order_by(self.model.id)
        )
        return list(result.scalars().all())

    async def find_by_id(self, db: AsyncSession, relation_id: int):
        relation = await db.get(self.model, relation_id)
        if relation is None:
            raise NotFound(f"Channel {self.label}")
        return relation

    async def create(self, db: AsyncSession, user_id: int, channel_id: int):
        if await self.exists(db, user_id, channel_id):
            raise Conflict(f"User is already a {self.label} of this channel.")

        relation = self.model(user_id=user_id, channel_id=channel_id)
        db.add(relation)
        try:
            await db.flush()
        except IntegrityError as exc:
            # A concurrent insert for the same pair won the race.
            db_logger.info(
                f"{self.model.__tablename__} unique violation",
                user_id=user_id,
                channel_id=channel_id,
            )
            raise Conflict(f"User is already a {self.label} of this channel.") from exc
        return relation

    async def delete(self, db: AsyncSession, relation_id: int) -> None:
        relation = await self.find_by_id(db, relation_id)
        await db.delete(relation)
        await db.flush()


class SuperUserStore:
    """Global super-user grants; at most one per user."""

    model = SuperUser

    async def exists(self, db: AsyncSession, user_id: int) -> bool:
        result = await db.execute(
            select(sa_exists().where(SuperUser.user_id == user_id))
        )
        return bool(result.scalar())

    async def list_all(self, db: AsyncSession) -> list[SuperUser]:
        result = await db.execute(select(SuperUser).order_by(SuperUser.id))
        return list(result.scalars().all())

    async def find_by_id(self, db: AsyncSession, super_user_id: int) -> SuperUser:
        grant = await db.get(SuperUser, super_user_id)
        if grant is None:
            raise NotFound("Super user")
        return grant

    async def create(self, db: AsyncSession, user_id: int) -> SuperUser:
        if await self.exists(db, user_id):
            raise Conflict("User is already a super user.")

        grant = SuperUser(user_id=user_id)
        db.add(grant)
        try:
            await db.flush()
        except IntegrityError as exc:
            raise Conflict("User is already a super user.") from exc
        return grant

    async def delete(self, db: AsyncSession, super_user_id: int) -> None:
        grant = await self.find_by_id(db, super_user_id)
        await db.delete(grant)
        await db.flush()


member_store = ChannelRelationStore(ChannelMember, "member")
admin_store = ChannelRelationStore(ChannelAdmin, "admin")
owner_store = ChannelRelationStore(ChannelOwner, "owner")
super_user_store = SuperUserStore()
