"""
Channel permissions

Role relations (member / admin / owner per channel, super user globally),
effective-role resolution and exact role gates.
"""
from channel_access.permissions.exceptions import (
    AccessControlError,
    Forbidden,
    NotFound,
    Conflict,
    InvalidRole,
)
from channel_access.permissions.roles import ChannelRole, ADMIN_OR_ABOVE, parse_role
from channel_access.permissions.repository import (
    ChannelRelationStore,
    SuperUserStore,
    member_store,
    admin_store,
    owner_store,
    super_user_store,
)
from channel_access.permissions.service import PermissionService, permission_service
