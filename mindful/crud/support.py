# crud/support.py
from typing import Any, Dict, Iterable, List, Optional
from datetime import datetime, timezone
from sqlalchemy.orm import Session
from sqlalchemy import or_, asc

from mindful.models.support import (
    SupportTopic,
    SupportGroup,
    GroupMembership,
    SupportMessage,
    MemberRole,
)
from mindful.schemas.support import GroupCreate, MessageCreate


class SupportCRUD:
    """CRUD operations for the support network (topics, groups, members, messages)."""

    # =====================================================================
    # TOPICS
    # =====================================================================

    def get_topics(self, db: Session) -> List[SupportTopic]:
        return db.query(SupportTopic).order_by(SupportTopic.name).all()

    def get_topic(self, db: Session, id: int) -> Optional[SupportTopic]:
        return db.query(SupportTopic).filter(SupportTopic.id == id).first()

    def create_missing_topics(self, db: Session, *, definitions: Iterable[Dict[str, Any]]) -> int:
        existing = {name for (name,) in db.query(SupportTopic.name).all()}
        created = 0
        for definition in definitions:
            if definition["name"] in existing:
                continue
            db.add(SupportTopic(**definition))
            created += 1

        if created:
            db.commit()
        return created

    # =====================================================================
    # GROUPS
    # =====================================================================

    def create_group(
        self,
        db: Session,
        *,
        obj_in: GroupCreate,
        invite_code: str,
        founder_id: int,
        founder_name: str,
    ) -> SupportGroup:
        """Create a group and its founder membership in one commit."""
        group = SupportGroup(invite_code=invite_code, **obj_in.model_dump())
        db.add(group)
        db.flush()

        db.add(
            GroupMembership(
                user_id=founder_id,
                group_id=group.id,
                anonymous_name=founder_name,
                role=MemberRole.founder,
                is_admin=True,
                permissions=["invite", "moderate"],
            )
        )

        db.commit()
        db.refresh(group)
        return group

    def get_group(self, db: Session, id: int) -> Optional[SupportGroup]:
        return db.query(SupportGroup).filter(SupportGroup.id == id).first()

    def get_group_by_invite(self, db: Session, invite_code: str) -> Optional[SupportGroup]:
        return db.query(SupportGroup).filter(SupportGroup.invite_code == invite_code).first()

    def get_visible_groups(self, db: Session, *, user_id: int) -> List[SupportGroup]:
        """Public groups plus private groups the user belongs to."""
        member_group_ids = db.query(GroupMembership.group_id).filter(
            GroupMembership.user_id == user_id
        )
        return (
            db.query(SupportGroup)
            .filter(
                or_(
                    SupportGroup.is_private.is_(False),
                    SupportGroup.id.in_(member_group_ids),
                )
            )
            .order_by(asc(SupportGroup.name), asc(SupportGroup.id))
            .all()
        )

    def set_invite_code(self, db: Session, *, group: SupportGroup, invite_code: str) -> SupportGroup:
        group.invite_code = invite_code
        db.commit()
        db.refresh(group)
        return group

    # =====================================================================
    # MEMBERSHIPS
    # =====================================================================

    def add_member(
        self, db: Session, *, group_id: int, user_id: int, anonymous_name: str
    ) -> GroupMembership:
        membership = GroupMembership(
            user_id=user_id,
            group_id=group_id,
            anonymous_name=anonymous_name,
            role=MemberRole.member,
            is_admin=False,
            permissions=[],
        )
        db.add(membership)
        db.commit()
        db.refresh(membership)
        return membership

    def get_membership(self, db: Session, *, group_id: int, user_id: int) -> Optional[GroupMembership]:
        return (
            db.query(GroupMembership)
            .filter(GroupMembership.group_id == group_id, GroupMembership.user_id == user_id)
            .first()
        )

    def get_members(self, db: Session, *, group_id: int) -> List[GroupMembership]:
        return (
            db.query(GroupMembership)
            .filter(GroupMembership.group_id == group_id)
            .order_by(asc(GroupMembership.joined_at), asc(GroupMembership.id))
            .all()
        )

    def count_members(self, db: Session, *, group_id: int) -> int:
        return db.query(GroupMembership).filter(GroupMembership.group_id == group_id).count()

    def count_user_groups(self, db: Session, *, user_id: int) -> int:
        return db.query(GroupMembership).filter(GroupMembership.user_id == user_id).count()

    def remove_member(self, db: Session, *, membership: GroupMembership) -> None:
        """Delete a membership; the member's messages stay with a null author."""
        db.query(SupportMessage).filter(
            SupportMessage.membership_id == membership.id
        ).update({SupportMessage.membership_id: None}, synchronize_session=False)
        db.delete(membership)
        db.commit()

    def touch_membership(self, db: Session, *, membership: GroupMembership) -> None:
        membership.last_active = datetime.now(timezone.utc)
        db.commit()

    # =====================================================================
    # MESSAGES
    # =====================================================================

    def create_message(
        self, db: Session, *, group_id: int, membership: GroupMembership, obj_in: MessageCreate
    ) -> SupportMessage:
        message = SupportMessage(
            group_id=group_id,
            membership_id=membership.id,
            content=obj_in.content,
            attachment_url=obj_in.attachment_url,
            is_anonymous=obj_in.is_anonymous,
        )
        db.add(message)
        membership.last_active = datetime.now(timezone.utc)
        db.commit()
        db.refresh(message)
        return message

    def get_messages(
        self,
        db: Session,
        *,
        group_id: int,
        since: Optional[datetime] = None,
        limit: int = 100,
    ) -> List[SupportMessage]:
        """Oldest first so chat clients can append in order."""
        query = db.query(SupportMessage).filter(SupportMessage.group_id == group_id)
        if since is not None:
            query = query.filter(SupportMessage.created_at > since)
        return query.order_by(asc(SupportMessage.created_at), asc(SupportMessage.id)).limit(limit).all()


crud_support = SupportCRUD()
