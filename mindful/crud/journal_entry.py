# crud/journal_entry.py
from typing import Any, Dict, List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import desc

from mindful.models.journal_entry import JournalEntry
from mindful.schemas.journal_entry import EntryCreate, EntryUpdate


class JournalEntryCRUD:
    """CRUD operations for JournalEntry model."""

    def create(self, db: Session, *, obj_in: EntryCreate, user_id: int) -> JournalEntry:
        """Insert a new entry owned by ``user_id``."""
        db_obj = JournalEntry(
            user_id=user_id,
            content=obj_in.content,
            mood=obj_in.mood,
            tags=obj_in.tags,
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def get(self, db: Session, id: int) -> Optional[JournalEntry]:
        return db.query(JournalEntry).filter(JournalEntry.id == id).first()

    def get_for_user(self, db: Session, *, id: int, user_id: int) -> Optional[JournalEntry]:
        """Get an entry only if it belongs to ``user_id``."""
        return (
            db.query(JournalEntry)
            .filter(JournalEntry.id == id, JournalEntry.user_id == user_id)
            .first()
        )

    def get_multi_by_user(
        self, db: Session, *, user_id: int, skip: int = 0, limit: int = 100
    ) -> List[JournalEntry]:
        """Newest first."""
        return (
            db.query(JournalEntry)
            .filter(JournalEntry.user_id == user_id)
            .order_by(desc(JournalEntry.created_at), desc(JournalEntry.id))
            .offset(skip)
            .limit(limit)
            .all()
        )

    def count_by_user(self, db: Session, *, user_id: int) -> int:
        return db.query(JournalEntry).filter(JournalEntry.user_id == user_id).count()

    def update(self, db: Session, *, db_obj: JournalEntry, obj_in: EntryUpdate) -> JournalEntry:
        update_data = obj_in.model_dump(exclude_unset=True)

        for field, value in update_data.items():
            if value is not None:
                setattr(db_obj, field, value)

        db.commit()
        db.refresh(db_obj)
        return db_obj

    def set_analysis(
        self, db: Session, *, db_obj: JournalEntry, analysis: Dict[str, Any]
    ) -> JournalEntry:
        db_obj.analysis = analysis
        db.commit()
        db.refresh(db_obj)
        return db_obj


crud_journal_entry = JournalEntryCRUD()
