from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from channel_access.db.models import User
from channel_access.permissions.exceptions import NotFound


async def get_user(db: AsyncSession, identifier: str) -> User:
    """Resolve an authenticated principal (username or email) to a User.

    Usernames and emails are unique only within their own column, so one
    user's username may equal another user's email. An identifier that
    matches more than one user is treated as unknown.
    """
    result = await db.execute(
        select(User)
        .where(or_(User.username == identifier, User.email == identifier))
        .limit(2)
    )
    users = result.scalars().all()
    if len(users) != 1:
        raise NotFound("User")
    return users[0]


async def get_user_by_id(db: AsyncSession, user_id: int) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFound("User")
    return user
