# models/user.py

import enum
from datetime import datetime, timezone
from sqlalchemy import (
    Column, String, Boolean, Date, DateTime, Integer, Enum as SqlEnum
)
from sqlalchemy.orm import relationship
from mindful.core.config import Base


class SubscriptionTier(str, enum.Enum):
    basic = "basic"
    premium = "premium"
    professional = "professional"


class User(Base):
    __tablename__ = "users"

    # ---- Identity ----
    id = Column(Integer, primary_key=True, index=True)
    username = Column(String(255), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    first_name = Column(String(255), nullable=False)
    last_name = Column(String(255), nullable=False)
    email_notifications = Column(Boolean, default=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    # ---- Streak (written only by the streak evaluator) ----
    current_streak = Column(Integer, nullable=False, default=0)
    longest_streak = Column(Integer, nullable=False, default=0)
    last_entry_date = Column(Date, nullable=True)

    # ---- Billing & quota ----
    stripe_customer_id = Column(String(255), unique=True, nullable=True)
    subscription_tier = Column(SqlEnum(SubscriptionTier), nullable=False, default=SubscriptionTier.basic)
    ai_requests_count = Column(Integer, nullable=False, default=0)
    ai_requests_reset_date = Column(Date, nullable=True)

    # ---- Relationships ----
    entries = relationship("JournalEntry", back_populates="user", cascade="all, delete-orphan")
    achievements = relationship("UserAchievement", back_populates="user", cascade="all, delete-orphan")
    goals = relationship("WellnessGoal", back_populates="user", cascade="all, delete-orphan")
    subscriptions = relationship("Subscription", back_populates="user", cascade="all, delete-orphan")
