from enum import Enum

from .exceptions import InvalidRole


class ChannelRole(str, Enum):
    NOT_ALLOWED = "not_allowed"
    MEMBER = "member"
    ADMIN = "admin"
    OWNER = "owner"
    SUPER_USER = "super_user"


# Roles that pass the gate on every channel administration operation.
ADMIN_OR_ABOVE = frozenset({ChannelRole.ADMIN, ChannelRole.OWNER, ChannelRole.SUPER_USER})


def parse_role(value) -> ChannelRole:
    """Coerce a role name or enum member to ChannelRole, raising InvalidRole."""
    if isinstance(value, ChannelRole):
        return value
    try:
        return ChannelRole(value)
    except (ValueError, TypeError) as exc:
        raise InvalidRole(value) from exc
