# schemas/achievement.py
from typing import Optional
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict


class AchievementOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str
    icon: str
    requirement: str
    level: int = 1


class UserAchievementOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    achievement_id: int
    unlocked_at: datetime
    achievement: Optional[AchievementOut] = None


class StreakOut(BaseModel):
    current_streak: int
    longest_streak: int
    last_entry_date: Optional[date] = None
