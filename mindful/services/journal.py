# services/journal.py
import logging
from typing import List

from sqlalchemy.orm import Session

from mindful.core.exceptions import NotFoundError
from mindful.models.user import User
from mindful.models.journal_entry import JournalEntry
from mindful.schemas.journal_entry import EntryCreate, EntryUpdate
from mindful.crud.journal_entry import crud_journal_entry
from mindful.services.llm import llm_client, neutral_analysis
from mindful.services.streak import streak_evaluator
from mindful.services.subscription import subscription_service

logger = logging.getLogger(__name__)


class JournalService:
    """Service layer for journal entries."""

    def __init__(self):
        self.crud = crud_journal_entry
        self.llm = llm_client
        self.evaluator = streak_evaluator

    # =====================================================================
    # HELPERS
    # =====================================================================

    def _analyze(self, db: Session, user: User, content: str, mood: int) -> dict:
        """Best-effort sentiment analysis; over quota yields the neutral payload."""
        if not subscription_service.consume_ai_request(db, user):
            return neutral_analysis()
        return self.llm.analyze_entry(content, mood)

    def _get_owned(self, db: Session, entry_id: int, user: User) -> JournalEntry:
        entry = self.crud.get_for_user(db, id=entry_id, user_id=user.id)
        if entry is None:
            raise NotFoundError("Entry not found")
        return entry

    # =====================================================================
    # OPERATIONS
    # =====================================================================

    def create_entry(self, db: Session, entry_data: EntryCreate, user: User) -> JournalEntry:
        """
        Persist an entry, attach its analysis, then run the streak evaluator.

        Analysis and the evaluator are side effects of creation: failures in
        either are logged and the created entry is still returned.
        """
        entry = self.crud.create(db, obj_in=entry_data, user_id=user.id)
        entry_id = entry.id

        try:
            analysis = self._analyze(db, user, entry.content, entry.mood)
        except Exception:
            db.rollback()
            logger.exception(f"Sentiment analysis failed for user {user.id}, entry {entry_id}")
            analysis = neutral_analysis()
        entry = self.crud.set_analysis(db, db_obj=entry, analysis=analysis)

        try:
            self.evaluator.record_entry(db, user.id)
        except Exception:
            db.rollback()
            logger.exception(f"Streak/achievement evaluation failed for user {user.id}, entry {entry_id}")

        db.refresh(entry)
        return entry

    def update_entry(
        self, db: Session, entry_id: int, update_data: EntryUpdate, user: User
    ) -> JournalEntry:
        """Edit content/mood/tags; re-analyses on content or mood change, never touches the streak."""
        entry = self._get_owned(db, entry_id, user)

        content_changed = update_data.content is not None and update_data.content != entry.content
        mood_changed = update_data.mood is not None and update_data.mood != entry.mood

        entry = self.crud.update(db, db_obj=entry, obj_in=update_data)

        if content_changed or mood_changed:
            analysis = self._analyze(db, user, entry.content, entry.mood)
            entry = self.crud.set_analysis(db, db_obj=entry, analysis=analysis)
        return entry

    def get_entry(self, db: Session, entry_id: int, user: User) -> JournalEntry:
        return self._get_owned(db, entry_id, user)

    def list_entries(
        self, db: Session, user: User, skip: int = 0, limit: int = 100
    ) -> List[JournalEntry]:
        return self.crud.get_multi_by_user(db, user_id=user.id, skip=skip, limit=limit)


journal_service = JournalService()
