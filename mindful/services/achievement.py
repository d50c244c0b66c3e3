# services/achievement.py
import logging
from typing import Iterable, List, Optional, Set

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from mindful.models.achievement import Achievement, UserAchievement, AchievementKind
from mindful.crud.achievement import crud_achievement
from mindful.crud.daily_challenge import crud_daily_challenge

logger = logging.getLogger(__name__)


# =====================================================================
# CATALOG
# =====================================================================

ACHIEVEMENT_CATALOG = [
    {
        "name": "First Step",
        "description": "You wrote your very first journal entry.",
        "icon": "footprints",
        "requirement": "Write your first journal entry",
        "level": 1,
        "kind": AchievementKind.first_entry,
        "threshold": 1,
    },
    {
        "name": "Getting Started",
        "description": "Three days of journaling in a row.",
        "icon": "sprout",
        "requirement": "Maintain a 3-day journaling streak",
        "level": 1,
        "kind": AchievementKind.streak,
        "threshold": 3,
    },
    {
        "name": "Week Warrior",
        "description": "A full week of daily reflection.",
        "icon": "flame",
        "requirement": "Maintain a 7-day journaling streak",
        "level": 2,
        "kind": AchievementKind.streak,
        "threshold": 7,
    },
    {
        "name": "Mindful Month",
        "description": "Thirty consecutive days of journaling.",
        "icon": "trophy",
        "requirement": "Maintain a 30-day journaling streak",
        "level": 3,
        "kind": AchievementKind.streak,
        "threshold": 30,
    },
    {
        "name": "Challenge Accepted",
        "description": "You completed your first daily challenge.",
        "icon": "target",
        "requirement": "Complete a daily challenge",
        "level": 1,
        "kind": AchievementKind.challenges_completed,
        "threshold": 1,
    },
]


# =====================================================================
# UNLOCK PLANNING
# =====================================================================

def plan_unlocks(
    catalog: Iterable[Achievement],
    unlocked_ids: Set[int],
    *,
    current_streak: Optional[int] = None,
    entry_count: Optional[int] = None,
    challenges_completed: Optional[int] = None,
) -> List[int]:
    """
    Decide which achievements should be unlocked now.

    Every catalog row is checked on its own, so crossing several thresholds at
    once (or catching up on a missed one) yields all of them. A metric passed as
    ``None`` is not evaluated.

    Args:
        catalog: All catalog achievements
        unlocked_ids: Achievement ids the user already holds
        current_streak: Streak after the current transition
        entry_count: Total entries after the insert
        challenges_completed: Total completed daily challenges

    Returns:
        Achievement ids to insert, in catalog order
    """
    planned: List[int] = []
    for achievement in catalog:
        if achievement.id in unlocked_ids or achievement.id in planned:
            continue

        if achievement.kind == AchievementKind.streak:
            earned = current_streak is not None and current_streak >= achievement.threshold
        elif achievement.kind == AchievementKind.first_entry:
            earned = entry_count is not None and entry_count == achievement.threshold
        elif achievement.kind == AchievementKind.challenges_completed:
            earned = challenges_completed is not None and challenges_completed >= achievement.threshold
        else:
            earned = False

        if earned:
            planned.append(achievement.id)
    return planned


# =====================================================================
# SERVICE CLASS
# =====================================================================

class AchievementService:
    """Service layer for the achievement catalog and unlocks."""

    def __init__(self):
        self.crud = crud_achievement

    def seed_catalog(self, db: Session) -> int:
        """Insert missing catalog rows; safe to call on every startup."""
        created = self.crud.create_missing(db, definitions=ACHIEVEMENT_CATALOG)
        if created:
            logger.info(f"Seeded {created} achievement(s)")
        return created

    def list_catalog(self, db: Session) -> List[Achievement]:
        return self.crud.get_all(db)

    def list_unlocked(self, db: Session, user_id: int) -> List[UserAchievement]:
        return self.crud.get_unlocks_by_user(db, user_id=user_id)

    def apply_unlocks(
        self,
        db: Session,
        user_id: int,
        *,
        current_streak: Optional[int] = None,
        entry_count: Optional[int] = None,
        challenges_completed: Optional[int] = None,
    ) -> List[UserAchievement]:
        """Compute the unlocked set once, plan, then insert the batch."""
        catalog = self.crud.get_all(db)
        unlocked_ids = self.crud.get_unlocked_ids(db, user_id=user_id)
        to_unlock = plan_unlocks(
            catalog,
            unlocked_ids,
            current_streak=current_streak,
            entry_count=entry_count,
            challenges_completed=challenges_completed,
        )
        rows = self.crud.unlock_many(db, user_id=user_id, achievement_ids=to_unlock)
        if rows:
            logger.info(f"User {user_id} unlocked achievement ids {to_unlock}")
        return rows

    def evaluate_challenges(self, db: Session, user_id: int) -> List[UserAchievement]:
        """Unlock challenge achievements; store failures are logged, not raised."""
        try:
            completed = crud_daily_challenge.count_completed(db, user_id=user_id)
            return self.apply_unlocks(db, user_id, challenges_completed=completed)
        except SQLAlchemyError:
            db.rollback()
            logger.exception(f"Challenge achievement evaluation failed for user {user_id}")
            return []


# Create singleton instance
achievement_service = AchievementService()
