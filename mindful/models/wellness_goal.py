# models/wellness_goal.py

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from mindful.core.config import Base


class WellnessGoal(Base):
    __tablename__ = "wellness_goals"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String(255), nullable=False)
    description = Column(String(1000), nullable=True)
    category = Column(String(100), nullable=False)
    target_value = Column(Integer, nullable=False)
    current_value = Column(Integer, nullable=False, default=0)
    frequency = Column(String(50), nullable=False)  # daily, weekly, monthly

    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=True)
    is_completed = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)
    updated_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    user = relationship("User", back_populates="goals")
    progress = relationship("GoalProgress", back_populates="goal", cascade="all, delete-orphan")


class GoalProgress(Base):
    __tablename__ = "goal_progress"

    id = Column(Integer, primary_key=True, index=True)
    goal_id = Column(Integer, ForeignKey("wellness_goals.id", ondelete="CASCADE"), nullable=False, index=True)
    value = Column(Integer, nullable=False)
    note = Column(String(1000), nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)

    goal = relationship("WellnessGoal", back_populates="progress")
