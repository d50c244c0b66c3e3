# schemas/support.py
from typing import Optional
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from mindful.models.support import MemberRole


class TopicOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    icon: Optional[str] = None


class GroupCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(None, max_length=1000)
    topic_id: Optional[int] = None
    is_private: bool = False
    max_members: int = Field(50, ge=2, le=500)


class GroupOut(BaseModel):
    id: int
    name: str
    description: Optional[str] = None
    topic_id: Optional[int] = None
    is_private: bool
    max_members: int
    member_count: int
    is_member: bool
    # Only returned to group admins
    invite_code: Optional[str] = None
    created_at: datetime


class MemberOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    anonymous_name: str
    role: MemberRole
    is_admin: bool
    joined_at: datetime
    last_active: Optional[datetime] = None


class MessageCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=5000)
    attachment_url: Optional[str] = Field(None, max_length=1000)
    is_anonymous: bool = True


class MessageOut(BaseModel):
    id: int
    group_id: int
    author: str
    content: str
    attachment_url: Optional[str] = None
    is_anonymous: bool
    is_own: bool
    created_at: datetime
    edited_at: Optional[datetime] = None
