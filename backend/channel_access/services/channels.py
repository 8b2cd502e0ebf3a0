from sqlalchemy.ext.asyncio import AsyncSession

from channel_access.db.models import Channel
from channel_access.permissions.exceptions import NotFound


async def get_channel(db: AsyncSession, channel_id: int) -> Channel:
    channel = await db.get(Channel, channel_id)
    if channel is None:
        raise NotFound("Channel")
    return channel
