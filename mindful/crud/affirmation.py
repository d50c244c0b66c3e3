# crud/affirmation.py
from typing import Optional
from sqlalchemy.orm import Session
from sqlalchemy import desc

from mindful.models.affirmation import Affirmation


class AffirmationCRUD:
    """CRUD operations for Affirmation model."""

    def create(self, db: Session, *, user_id: int, content: str) -> Affirmation:
        db_obj = Affirmation(user_id=user_id, content=content)
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def get_latest(self, db: Session, *, user_id: int) -> Optional[Affirmation]:
        return (
            db.query(Affirmation)
            .filter(Affirmation.user_id == user_id)
            .order_by(desc(Affirmation.created_at), desc(Affirmation.id))
            .first()
        )


crud_affirmation = AffirmationCRUD()
