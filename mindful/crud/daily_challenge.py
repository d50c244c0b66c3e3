# crud/daily_challenge.py
from typing import List, Optional
from datetime import datetime, timezone
from sqlalchemy.orm import Session
from sqlalchemy import desc

from mindful.models.daily_challenge import DailyChallenge
from mindful.schemas.challenge import GeneratedChallenge


class DailyChallengeCRUD:
    """CRUD operations for DailyChallenge model."""

    def create(self, db: Session, *, user_id: int, obj_in: GeneratedChallenge) -> DailyChallenge:
        db_obj = DailyChallenge(
            user_id=user_id,
            challenge=obj_in.challenge,
            category=obj_in.category,
            difficulty=obj_in.difficulty,
            completed=False,
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def get_for_user(self, db: Session, *, id: int, user_id: int) -> Optional[DailyChallenge]:
        return (
            db.query(DailyChallenge)
            .filter(DailyChallenge.id == id, DailyChallenge.user_id == user_id)
            .first()
        )

    def get_latest(self, db: Session, *, user_id: int) -> Optional[DailyChallenge]:
        return (
            db.query(DailyChallenge)
            .filter(DailyChallenge.user_id == user_id)
            .order_by(desc(DailyChallenge.created_at), desc(DailyChallenge.id))
            .first()
        )

    def get_history(self, db: Session, *, user_id: int, limit: int = 30) -> List[DailyChallenge]:
        return (
            db.query(DailyChallenge)
            .filter(DailyChallenge.user_id == user_id)
            .order_by(desc(DailyChallenge.created_at), desc(DailyChallenge.id))
            .limit(limit)
            .all()
        )

    def count_completed(self, db: Session, *, user_id: int) -> int:
        return (
            db.query(DailyChallenge)
            .filter(DailyChallenge.user_id == user_id, DailyChallenge.completed.is_(True))
            .count()
        )

    def mark_completed(
        self, db: Session, *, db_obj: DailyChallenge, reflection_note: Optional[str] = None
    ) -> DailyChallenge:
        db_obj.completed = True
        db_obj.completed_at = datetime.now(timezone.utc)
        db_obj.reflection_note = reflection_note
        db.commit()
        db.refresh(db_obj)
        return db_obj


crud_daily_challenge = DailyChallengeCRUD()
