from .repository import member_store, admin_store, owner_store, super_user_store
from .roles import ChannelRole

CHANNEL_RELATION_STORES = {
    ChannelRole.MEMBER: member_store,
    ChannelRole.ADMIN: admin_store,
    ChannelRole.OWNER: owner_store,
}


async def _holds_super_user(db, user_id: int, channel_id: int) -> bool:
    return await super_user_store.exists(db, user_id)


def _holds_relation(role: ChannelRole):
    store = CHANNEL_RELATION_STORES[role]

    async def check(db, user_id: int, channel_id: int) -> bool:
        return await store.exists(db, user_id, channel_id)

    check.__name__ = f"holds_{role.value}"
    return check


# Highest rank first. The first matching predicate is the effective role;
# a user matching none resolves to NOT_ALLOWED.
ROLE_PRECEDENCE = (
    (ChannelRole.SUPER_USER, _holds_super_user),
    (ChannelRole.OWNER, _holds_relation(ChannelRole.OWNER)),
    (ChannelRole.ADMIN, _holds_relation(ChannelRole.ADMIN)),
    (ChannelRole.MEMBER, _holds_relation(ChannelRole.MEMBER)),
)

# Exact-membership checks used by authorize(); NOT_ALLOWED is handled separately.
EXACT_ROLE_CHECKS = dict(ROLE_PRECEDENCE)
