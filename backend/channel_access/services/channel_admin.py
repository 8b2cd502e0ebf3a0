"""
Channel administration use-cases.

Every operation resolves the acting username, requires the actor to be
admin-or-above in the channel and only then touches the relation stores.
The gate, the existence checks and the write run in one transaction.
"""
from sqlalchemy.ext.asyncio import AsyncSession

from channel_access.core.logging import permissions_logger, log_operation
from channel_access.db.database import transaction
from channel_access.db.models import ChannelMember, ChannelAdmin, User
from channel_access.permissions.exceptions import Forbidden, NotFound
from channel_access.permissions.repository import ChannelRelationStore, member_store, admin_store
from channel_access.permissions.service import PermissionService, permission_service
from channel_access.services.channels import get_channel
from channel_access.services.users import get_user, get_user_by_id


class ChannelAdminService:
    def __init__(
        self,
        permissions: PermissionService = permission_service,
        members: ChannelRelationStore = member_store,
        admins: ChannelRelationStore = admin_store,
    ):
        self.permissions = permissions
        self.members = members
        self.admins = admins

    async def _require_admin_or_above(
        self,
        db: AsyncSession,
        username: str,
        channel_id: int,
        action: str,
    ) -> User:
        """Return the acting user, or raise Forbidden without saying why."""
        try:
            user = await get_user(db, username)
        except NotFound:
            permissions_logger.info(
                f"[PERMS_DENIED] unknown principal channel_id={channel_id} action={action}"
            )
            raise Forbidden(action) from None

        if not await self.permissions.is_admin_or_above(db, user, channel_id):
            permissions_logger.info(
                f"[PERMS_DENIED] user_id={user.id} channel_id={channel_id} action={action}"
            )
            raise Forbidden(action)
        return user

    async def _add_relation(
        self,
        db: AsyncSession,
        store: ChannelRelationStore,
        username: str,
        channel_id: int,
        user_id: int,
        action: str,
    ):
        async with transaction(db):
            actor_id = (await self._require_admin_or_above(db, username, channel_id, action)).id
            await get_user_by_id(db, user_id)
            await get_channel(db, channel_id)
            relation = await store.create(db, user_id, channel_id)
            new_relation_id = relation.id

        permissions_logger.info(
            f"channel {store.label} added",
            actor_id=actor_id,
            user_id=user_id,
            channel_id=channel_id,
            relation_id=new_relation_id,
        )
        return relation

    async def _remove_relation(
        self,
        db: AsyncSession,
        store: ChannelRelationStore,
        username: str,
        channel_id: int,
        relation_id: int,
        action: str,
    ) -> None:
        async with transaction(db):
            actor_id = (await self._require_admin_or_above(db, username, channel_id, action)).id
            relation = await store.find_by_id(db, relation_id)
            # The gate only covers channel_id; a row of another channel is invisible here.
            if relation.channel_id != channel_id:
                raise NotFound(f"Channel {store.label}")
            await store.delete(db, relation_id)

        permissions_logger.info(
            f"channel {store.label} removed",
            actor_id=actor_id,
            channel_id=channel_id,
            relation_id=relation_id,
        )

    @log_operation("list_members")
    async def list_members(self, db: AsyncSession, username: str, channel_id: int) -> list[ChannelMember]:
        async with transaction(db):
            await self._require_admin_or_above(db, username, channel_id, "view channel members")
            return await self.members.list_by_channel(db, channel_id)

    @log_operation("add_member")
    async def add_member(
        self, db: AsyncSession, username: str, channel_id: int, new_user_id: int
    ) -> ChannelMember:
        return await self._add_relation(
            db, self.members, username, channel_id, new_user_id, "add members"
        )

    @log_operation("remove_member")
    async def remove_member(
        self, db: AsyncSession, username: str, channel_id: int, member_id: int
    ) -> None:
        await self._remove_relation(
            db, self.members, username, channel_id, member_id, "remove members"
        )

    @log_operation("list_admins")
    async def list_admins(self, db: AsyncSession, username: str, channel_id: int) -> list[ChannelAdmin]:
        async with transaction(db):
            await self._require_admin_or_above(db, username, channel_id, "view channel admins")
            return await self.admins.list_by_channel(db, channel_id)

    @log_operation("add_admin")
    async def add_admin(
        self, db: AsyncSession, username: str, channel_id: int, user_id: int
    ) -> ChannelAdmin:
        return await self._add_relation(
            db, self.admins, username, channel_id, user_id, "add admins"
        )

    @log_operation("remove_admin")
    async def remove_admin(
        self, db: AsyncSession, username: str, channel_id: int, admin_id: int
    ) -> None:
        await self._remove_relation(
            db, self.admins, username, channel_id, admin_id, "remove admins"
        )


channel_admin_service = ChannelAdminService()
