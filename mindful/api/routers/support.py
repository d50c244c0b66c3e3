# mindful/api/routers/support.py
from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from mindful.core.config import get_db
from mindful.core.security import get_current_user
from mindful.services.support import support_service
from mindful.models.user import User
from mindful.schemas.user import SuccessResponse
from mindful.schemas.support import (
    TopicOut,
    GroupCreate,
    GroupOut,
    MemberOut,
    MessageCreate,
    MessageOut,
)

router = APIRouter(prefix="/api/support", tags=["Support Network"])


# =====================================================================
# TOPICS & GROUPS
# =====================================================================

@router.get("/topics", response_model=List[TopicOut], summary="Support topics")
def list_topics(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return support_service.list_topics(db)


@router.get("/groups", response_model=List[GroupOut], summary="Public groups and my groups")
def list_groups(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return support_service.list_groups(db, current_user)


@router.post(
    "/groups",
    response_model=GroupOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a support group"
)
def create_group(
    group_data: GroupCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """The creator becomes the group's founder and admin."""
    return support_service.create_group(db, group_data, current_user)


@router.get("/groups/{group_id}", response_model=GroupOut, summary="Get a group")
def get_group(
    group_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return support_service.get_group(db, group_id, current_user)


# =====================================================================
# MEMBERSHIP
# =====================================================================

@router.post("/groups/{group_id}/join", response_model=GroupOut, summary="Join a public group")
def join_group(
    group_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return support_service.join_group(db, group_id, current_user)


@router.post("/join/{invite_code}", response_model=GroupOut, summary="Join with an invite code")
def join_by_invite(
    invite_code: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return support_service.join_by_invite(db, invite_code, current_user)


@router.post("/groups/{group_id}/leave", response_model=SuccessResponse, summary="Leave a group")
def leave_group(
    group_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    support_service.leave_group(db, group_id, current_user)
    return SuccessResponse(message="Left group")


@router.post("/groups/{group_id}/invite", response_model=GroupOut, summary="Create a new invite code")
def rotate_invite(
    group_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Admins only. The previous invite code stops working."""
    return support_service.rotate_invite(db, group_id, current_user)


@router.get("/groups/{group_id}/members", response_model=List[MemberOut], summary="Group members")
def list_members(
    group_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return support_service.list_members(db, group_id, current_user)


# =====================================================================
# MESSAGES
# =====================================================================

@router.get("/groups/{group_id}/messages", response_model=List[MessageOut], summary="Group messages")
def list_messages(
    group_id: int,
    since: Optional[datetime] = Query(None, description="Only messages after this time (for polling)"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return support_service.list_messages(db, group_id, current_user, since=since)


@router.post(
    "/groups/{group_id}/messages",
    response_model=MessageOut,
    status_code=status.HTTP_201_CREATED,
    summary="Post a message"
)
def post_message(
    group_id: int,
    message_data: MessageCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return support_service.post_message(db, group_id, message_data, current_user)
