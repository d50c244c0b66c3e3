# models/support.py

import enum
from datetime import datetime, timezone
from sqlalchemy import (
    Column, Integer, String, Text, Boolean, DateTime, JSON, ForeignKey,
    UniqueConstraint, Enum as SqlEnum
)
from sqlalchemy.orm import relationship
from mindful.core.config import Base


class MemberRole(str, enum.Enum):
    founder = "founder"
    moderator = "moderator"
    member = "member"


class SupportTopic(Base):
    __tablename__ = "support_topics"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)
    description = Column(String(1000), nullable=True)
    icon = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)


class SupportGroup(Base):
    __tablename__ = "support_groups"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    description = Column(String(1000), nullable=True)
    topic_id = Column(Integer, ForeignKey("support_topics.id"), nullable=True)
    is_private = Column(Boolean, nullable=False, default=False)
    max_members = Column(Integer, nullable=False, default=50)
    invite_code = Column(String(255), unique=True, nullable=True)

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    topic = relationship("SupportTopic")
    memberships = relationship("GroupMembership", back_populates="group", cascade="all, delete-orphan")


class GroupMembership(Base):
    __tablename__ = "group_memberships"
    __table_args__ = (
        UniqueConstraint("user_id", "group_id", name="uq_group_membership"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    group_id = Column(Integer, ForeignKey("support_groups.id", ondelete="CASCADE"), nullable=False, index=True)
    anonymous_name = Column(String(255), nullable=False)
    role = Column(SqlEnum(MemberRole), nullable=False, default=MemberRole.member)
    permissions = Column(JSON, nullable=True)
    is_admin = Column(Boolean, nullable=False, default=False)

    joined_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)
    last_active = Column(DateTime, nullable=True)

    group = relationship("SupportGroup", back_populates="memberships")


class SupportMessage(Base):
    __tablename__ = "support_messages"

    id = Column(Integer, primary_key=True, index=True)
    group_id = Column(Integer, ForeignKey("support_groups.id", ondelete="CASCADE"), nullable=False, index=True)
    # Nulled when the author leaves; the message stays in the group history
    membership_id = Column(Integer, ForeignKey("group_memberships.id", ondelete="SET NULL"), nullable=True)
    content = Column(Text, nullable=False)
    attachment_url = Column(String(1000), nullable=True)
    is_anonymous = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)
    edited_at = Column(DateTime, nullable=True)

    membership = relationship("GroupMembership")
