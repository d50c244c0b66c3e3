# schemas/user.py
from pydantic import BaseModel, EmailStr, Field, ConfigDict, field_validator
from typing import Optional
from datetime import date, datetime

from mindful.models.user import SubscriptionTier


# =====================================================================
# CREATE / UPDATE SCHEMAS
# =====================================================================

class UserCreate(BaseModel):
    """Public registration payload."""
    username: str = Field(..., min_length=3, max_length=50)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=72)
    first_name: str = Field(..., min_length=1, max_length=255)
    last_name: str = Field(..., min_length=1, max_length=255)

    @field_validator('password')
    @classmethod
    def validate_password_strength(cls, v: str) -> str:
        if not any(c.isalpha() for c in v):
            raise ValueError('Password must contain at least one letter')
        if not any(c.isdigit() for c in v):
            raise ValueError('Password must contain at least one digit')
        return v


class UserUpdate(BaseModel):
    """Profile update - all optional."""
    first_name: Optional[str] = Field(None, min_length=1, max_length=255)
    last_name: Optional[str] = Field(None, min_length=1, max_length=255)
    email_notifications: Optional[bool] = None


# =====================================================================
# READ SCHEMAS
# =====================================================================

class UserOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    email: EmailStr
    first_name: str
    last_name: str
    email_notifications: bool = False
    subscription_tier: SubscriptionTier
    current_streak: int = 0
    longest_streak: int = 0
    last_entry_date: Optional[date] = None
    created_at: Optional[datetime] = None


# =====================================================================
# AUTH SCHEMAS
# =====================================================================

class LoginRequest(BaseModel):
    """User login request."""
    email: EmailStr
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    """Authentication token response."""
    access_token: str
    token_type: str = "bearer"
    refresh_token: str
    user: UserOut


class RefreshTokenRequest(BaseModel):
    """Refresh token request."""
    refresh_token: str


# =====================================================================
# RESPONSE WRAPPERS
# =====================================================================

class SuccessResponse(BaseModel):
    """Generic success response."""
    success: bool = True
    message: Optional[str] = None
