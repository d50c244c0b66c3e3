# services/support.py
import logging
import secrets
from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from mindful.core.exceptions import ConflictError, NotFoundError, PermissionDeniedError
from mindful.models.user import User
from mindful.models.support import SupportGroup, GroupMembership, SupportTopic
from mindful.schemas.support import GroupCreate, GroupOut, MessageCreate, MessageOut
from mindful.crud.support import crud_support
from mindful.services.subscription import subscription_service

logger = logging.getLogger(__name__)


INITIAL_SUPPORT_TOPICS = [
    {"name": "Anxiety", "description": "Coping with worry, stress and panic", "icon": "cloud"},
    {"name": "Depression", "description": "Support through low moods", "icon": "sun"},
    {"name": "Grief", "description": "Navigating loss together", "icon": "heart"},
    {"name": "Mindfulness", "description": "Building a steady practice", "icon": "leaf"},
    {"name": "Productivity", "description": "Focus, burnout and balance", "icon": "target"},
]

ANONYMOUS_ADJECTIVES = [
    "Calm", "Gentle", "Brave", "Kind", "Quiet", "Bright", "Steady", "Hopeful", "Warm", "Patient",
]
ANONYMOUS_NOUNS = [
    "Otter", "Willow", "River", "Sparrow", "Cedar", "Fox", "Harbor", "Meadow", "Heron", "Pine",
]

FORMER_MEMBER_NAME = "Former member"


def generate_anonymous_name() -> str:
    return f"{secrets.choice(ANONYMOUS_ADJECTIVES)} {secrets.choice(ANONYMOUS_NOUNS)}"


def generate_invite_code() -> str:
    return secrets.token_urlsafe(9)


class SupportService:
    """Service layer for peer support groups."""

    def __init__(self):
        self.crud = crud_support

    # =====================================================================
    # HELPERS
    # =====================================================================

    def _to_group_out(
        self, db: Session, group: SupportGroup, membership: Optional[GroupMembership]
    ) -> GroupOut:
        return GroupOut(
            id=group.id,
            name=group.name,
            description=group.description,
            topic_id=group.topic_id,
            is_private=group.is_private,
            max_members=group.max_members,
            member_count=self.crud.count_members(db, group_id=group.id),
            is_member=membership is not None,
            invite_code=group.invite_code if membership is not None and membership.is_admin else None,
            created_at=group.created_at,
        )

    def _require_group(self, db: Session, group_id: int) -> SupportGroup:
        group = self.crud.get_group(db, group_id)
        if group is None:
            raise NotFoundError("Group not found")
        return group

    def _require_membership(self, db: Session, group_id: int, user: User) -> GroupMembership:
        membership = self.crud.get_membership(db, group_id=group_id, user_id=user.id)
        if membership is None:
            raise PermissionDeniedError("You are not a member of this group")
        return membership

    def _join(self, db: Session, group: SupportGroup, user: User) -> GroupOut:
        if self.crud.get_membership(db, group_id=group.id, user_id=user.id):
            raise ConflictError("Already a member of this group")
        if self.crud.count_members(db, group_id=group.id) >= group.max_members:
            raise ConflictError("Group is full")
        if not subscription_service.can_join_group(db, user):
            raise PermissionDeniedError("Group limit reached for your plan. Upgrade to join more groups.")

        membership = self.crud.add_member(
            db, group_id=group.id, user_id=user.id, anonymous_name=generate_anonymous_name()
        )
        logger.info(f"User {user.id} joined support group {group.id}")
        return self._to_group_out(db, group, membership)

    # =====================================================================
    # TOPICS
    # =====================================================================

    def seed_topics(self, db: Session) -> int:
        created = self.crud.create_missing_topics(db, definitions=INITIAL_SUPPORT_TOPICS)
        if created:
            logger.info(f"Seeded {created} support topic(s)")
        return created

    def list_topics(self, db: Session) -> List[SupportTopic]:
        return self.crud.get_topics(db)

    # =====================================================================
    # GROUPS
    # =====================================================================

    def list_groups(self, db: Session, user: User) -> List[GroupOut]:
        groups = self.crud.get_visible_groups(db, user_id=user.id)
        return [
            self._to_group_out(
                db, group, self.crud.get_membership(db, group_id=group.id, user_id=user.id)
            )
            for group in groups
        ]

    def get_group(self, db: Session, group_id: int, user: User) -> GroupOut:
        group = self._require_group(db, group_id)
        membership = self.crud.get_membership(db, group_id=group.id, user_id=user.id)
        # Private groups are invisible to non-members
        if group.is_private and membership is None:
            raise NotFoundError("Group not found")
        return self._to_group_out(db, group, membership)

    def create_group(self, db: Session, group_data: GroupCreate, user: User) -> GroupOut:
        if group_data.topic_id is not None and self.crud.get_topic(db, group_data.topic_id) is None:
            raise NotFoundError("Topic not found")
        if not subscription_service.can_join_group(db, user):
            raise PermissionDeniedError("Group limit reached for your plan. Upgrade to join more groups.")

        group = self.crud.create_group(
            db,
            obj_in=group_data,
            invite_code=generate_invite_code(),
            founder_id=user.id,
            founder_name=generate_anonymous_name(),
        )
        logger.info(f"User {user.id} created support group {group.id}")
        membership = self.crud.get_membership(db, group_id=group.id, user_id=user.id)
        return self._to_group_out(db, group, membership)

    def join_group(self, db: Session, group_id: int, user: User) -> GroupOut:
        group = self._require_group(db, group_id)
        if group.is_private:
            raise PermissionDeniedError("This group is private. Join with an invite link.")
        return self._join(db, group, user)

    def join_by_invite(self, db: Session, invite_code: str, user: User) -> GroupOut:
        group = self.crud.get_group_by_invite(db, invite_code)
        if group is None:
            raise NotFoundError("Invalid or expired invite code")
        return self._join(db, group, user)

    def leave_group(self, db: Session, group_id: int, user: User) -> None:
        self._require_group(db, group_id)
        membership = self.crud.get_membership(db, group_id=group_id, user_id=user.id)
        if membership is None:
            raise NotFoundError("You are not a member of this group")
        self.crud.remove_member(db, membership=membership)
        logger.info(f"User {user.id} left support group {group_id}")

    def rotate_invite(self, db: Session, group_id: int, user: User) -> GroupOut:
        group = self._require_group(db, group_id)
        membership = self._require_membership(db, group_id, user)
        if not membership.is_admin:
            raise PermissionDeniedError("Only group admins can create invite links")
        group = self.crud.set_invite_code(db, group=group, invite_code=generate_invite_code())
        return self._to_group_out(db, group, membership)

    # =====================================================================
    # MEMBERS & MESSAGES
    # =====================================================================

    def list_members(self, db: Session, group_id: int, user: User) -> List[GroupMembership]:
        self._require_group(db, group_id)
        self._require_membership(db, group_id, user)
        return self.crud.get_members(db, group_id=group_id)

    def list_messages(
        self, db: Session, group_id: int, user: User, since: Optional[datetime] = None
    ) -> List[MessageOut]:
        self._require_group(db, group_id)
        membership = self._require_membership(db, group_id, user)

        # Stored timestamps are naive UTC
        if since is not None and since.tzinfo is not None:
            since = since.astimezone(timezone.utc).replace(tzinfo=None)

        messages = self.crud.get_messages(db, group_id=group_id, since=since)
        self.crud.touch_membership(db, membership=membership)
        return [self._to_message_out(message, membership) for message in messages]

    def post_message(
        self, db: Session, group_id: int, message_data: MessageCreate, user: User
    ) -> MessageOut:
        self._require_group(db, group_id)
        membership = self._require_membership(db, group_id, user)
        message = self.crud.create_message(
            db, group_id=group_id, membership=membership, obj_in=message_data
        )
        return self._to_message_out(message, membership)

    def _to_message_out(self, message, viewer: GroupMembership) -> MessageOut:
        author = message.membership.anonymous_name if message.membership else FORMER_MEMBER_NAME
        return MessageOut(
            id=message.id,
            group_id=message.group_id,
            author=author,
            content=message.content,
            attachment_url=message.attachment_url,
            is_anonymous=message.is_anonymous,
            is_own=message.membership_id == viewer.id,
            created_at=message.created_at,
            edited_at=message.edited_at,
        )


support_service = SupportService()
