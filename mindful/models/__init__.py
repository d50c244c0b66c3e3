# mindful/models/__init__.py

from mindful.core.config import Base

# Import all models here so metadata.create_all and app-wide imports work
from .user import User, SubscriptionTier
from .journal_entry import JournalEntry
from .achievement import Achievement, UserAchievement, AchievementKind
from .affirmation import Affirmation
from .daily_challenge import DailyChallenge
from .wellness_goal import WellnessGoal, GoalProgress
from .subscription import SubscriptionPlan, Subscription
from .support import SupportTopic, SupportGroup, GroupMembership, SupportMessage, MemberRole

__all__ = [
    "Base",
    "User",
    "SubscriptionTier",
    "JournalEntry",
    "Achievement",
    "UserAchievement",
    "AchievementKind",
    "Affirmation",
    "DailyChallenge",
    "WellnessGoal",
    "GoalProgress",
    "SubscriptionPlan",
    "Subscription",
    "SupportTopic",
    "SupportGroup",
    "GroupMembership",
    "SupportMessage",
    "MemberRole",
]
