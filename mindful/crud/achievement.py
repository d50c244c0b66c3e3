# crud/achievement.py
from typing import Any, Dict, Iterable, List, Optional, Set
from sqlalchemy.orm import Session, joinedload

from mindful.models.achievement import Achievement, UserAchievement


class AchievementCRUD:
    """CRUD operations for the achievement catalog and user unlocks."""

    # =====================================================================
    # CATALOG
    # =====================================================================

    def get_all(self, db: Session) -> List[Achievement]:
        return db.query(Achievement).order_by(Achievement.level, Achievement.id).all()

    def get_by_name(self, db: Session, name: str) -> Optional[Achievement]:
        return db.query(Achievement).filter(Achievement.name == name).first()

    def create_missing(self, db: Session, *, definitions: Iterable[Dict[str, Any]]) -> int:
        """
        Insert catalog definitions whose name is not present yet.

        Returns:
            Number of rows inserted
        """
        existing = {name for (name,) in db.query(Achievement.name).all()}
        created = 0
        for definition in definitions:
            if definition["name"] in existing:
                continue
            db.add(Achievement(**definition))
            created += 1

        if created:
            db.commit()
        return created

    # =====================================================================
    # UNLOCKS
    # =====================================================================

    def get_unlocked_ids(self, db: Session, *, user_id: int) -> Set[int]:
        rows = (
            db.query(UserAchievement.achievement_id)
            .filter(UserAchievement.user_id == user_id)
            .all()
        )
        return {achievement_id for (achievement_id,) in rows}

    def get_unlocks_by_user(self, db: Session, *, user_id: int) -> List[UserAchievement]:
        return (
            db.query(UserAchievement)
            .options(joinedload(UserAchievement.achievement))
            .filter(UserAchievement.user_id == user_id)
            .order_by(UserAchievement.unlocked_at, UserAchievement.id)
            .all()
        )

    def unlock_many(
        self, db: Session, *, user_id: int, achievement_ids: Iterable[int]
    ) -> List[UserAchievement]:
        """Insert a batch of unlock rows in one commit."""
        rows = [
            UserAchievement(user_id=user_id, achievement_id=achievement_id)
            for achievement_id in achievement_ids
        ]
        if not rows:
            return []

        db.add_all(rows)
        db.commit()
        for row in rows:
            db.refresh(row)
        return rows


crud_achievement = AchievementCRUD()
