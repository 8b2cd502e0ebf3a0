from sqlalchemy.ext.asyncio import AsyncSession

from channel_access.core.logging import permissions_logger
from channel_access.db.database import transaction
from channel_access.db.models import User
from .exceptions import InvalidRole
from .repository import super_user_store
from .role_map import ROLE_PRECEDENCE, EXACT_ROLE_CHECKS
from .roles import ChannelRole, ADMIN_OR_ABOVE, parse_role


class PermissionService:
    """Resolve a user's effective role in a channel and check role gates."""

    def __init__(self, precedence=ROLE_PRECEDENCE, exact_checks=EXACT_ROLE_CHECKS):
        self.precedence = precedence
        self.exact_checks = exact_checks

    async def has_super_user_permission(self, db: AsyncSession, user: User) -> bool:
        async with transaction(db):
            return await super_user_store.exists(db, user.id)

    async def resolve_role(
        self,
        db: AsyncSession,
        user: User,
        channel_id: int,
    ) -> ChannelRole:
        """
        Return the highest-ranked role the user holds for the channel.
        Stale lower rows (e.g. a member row left behind after promotion to
        admin) are masked by the precedence order.
        """
        async with transaction(db):
            for role, holds in self.precedence:
                if await holds(db, user.id, channel_id):
                    return role
        return ChannelRole.NOT_ALLOWED

    async def authorize(
        self,
        db: AsyncSession,
        user: User,
        channel_id: int,
        required_role,
    ) -> bool:
        """
        Check exact relation membership for `required_role`.

        This is not an "at least" check: a super user is not a MEMBER unless a
        member row exists. NOT_ALLOWED asserts the user holds no relation at all.
        Unknown role values deny.
        """
        try:
            role = parse_role(required_role)
        except InvalidRole as exc:
            permissions_logger.warning(
                "authorize called with invalid role",
                user_id=user.id,
                channel_id=channel_id,
                role=repr(exc.value),
            )
            return False

        async with transaction(db):
            if role is ChannelRole.NOT_ALLOWED:
                for holds in self.exact_checks.values():
                    if await holds(db, user.id, channel_id):
                        return False
                return True

            check = self.exact_checks.get(role)
            if check is None:
                return False
            return await check(db, user.id, channel_id)

    async def is_admin_or_above(
        self,
        db: AsyncSession,
        user: User,
        channel_id: int,
    ) -> bool:
        return await self.resolve_role(db, user, channel_id) in ADMIN_OR_ABOVE


permission_service = PermissionService()
