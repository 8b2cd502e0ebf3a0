from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import declared_attr
from sqlalchemy.sql import func
from channel_access.db.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(50), unique=True, index=True, nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    display_name = Column(String(100))
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False)


class Channel(Base):
    __tablename__ = "channels"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), index=True, nullable=False)
    display_name = Column(String(200))
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False)


class ChannelRelationMixin:
    """Columns shared by every channel-scoped role relation.

    One row links one user to one channel under the role kind named by the
    concrete table; (user_id, channel_id) is unique per table.
    """

    id = Column(Integer, primary_key=True, index=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False)

    @declared_attr
    def user_id(cls):
        return Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    @declared_attr
    def channel_id(cls):
        return Column(Integer, ForeignKey("channels.id", ondelete="CASCADE"), nullable=False, index=True)

    @declared_attr
    def __table_args__(cls):
        return (
            UniqueConstraint("user_id", "channel_id", name=f"uq_{cls.__tablename__}_user_channel"),
        )


class ChannelMember(ChannelRelationMixin, Base):
    __tablename__ = "channel_members"


class ChannelAdmin(ChannelRelationMixin, Base):
    __tablename__ = "channel_admins"


class ChannelOwner(ChannelRelationMixin, Base):
    __tablename__ = "channel_owners"


class SuperUser(Base):
    """Global elevated privileges; no channel scope."""
    __tablename__ = "super_users"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True, index=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, server_default=func.now(), nullable=False)
