# models/achievement.py

import enum
from datetime import datetime, timezone
from sqlalchemy import (
    Column, Integer, String, DateTime, ForeignKey, UniqueConstraint, Enum as SqlEnum
)
from sqlalchemy.orm import relationship
from mindful.core.config import Base


class AchievementKind(str, enum.Enum):
    first_entry = "first_entry"
    streak = "streak"
    challenges_completed = "challenges_completed"


class Achievement(Base):
    """Static catalog entry, seeded once and never mutated afterwards."""

    __tablename__ = "achievements"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)
    description = Column(String(1000), nullable=False)
    icon = Column(String(255), nullable=False)
    requirement = Column(String(500), nullable=False)  # human-readable
    level = Column(Integer, default=1)

    # Machine-readable unlock condition
    kind = Column(SqlEnum(AchievementKind), nullable=False)
    threshold = Column(Integer, nullable=False, default=1)

    unlocks = relationship("UserAchievement", back_populates="achievement")


class UserAchievement(Base):
    __tablename__ = "user_achievements"
    __table_args__ = (
        UniqueConstraint("user_id", "achievement_id", name="uq_user_achievement"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    achievement_id = Column(Integer, ForeignKey("achievements.id", ondelete="CASCADE"), nullable=False, index=True)
    unlocked_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)

    user = relationship("User", back_populates="achievements")
    achievement = relationship("Achievement", back_populates="unlocks")
