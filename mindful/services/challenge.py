# services/challenge.py
import logging
from datetime import date, datetime, timezone
from typing import List, Optional

from sqlalchemy.orm import Session

from mindful.core.exceptions import ConflictError, NotFoundError, QuotaExceededError
from mindful.models.user import User
from mindful.models.daily_challenge import DailyChallenge
from mindful.crud.daily_challenge import crud_daily_challenge
from mindful.crud.journal_entry import crud_journal_entry
from mindful.crud.wellness_goal import crud_wellness_goal
from mindful.services.llm import llm_client
from mindful.services.subscription import subscription_service
from mindful.services.achievement import achievement_service

logger = logging.getLogger(__name__)

RECENT_ENTRY_COUNT = 5


class ChallengeService:
    """Service layer for AI-generated daily challenges."""

    def __init__(self):
        self.crud = crud_daily_challenge
        self.llm = llm_client

    def get_today(self, db: Session, user: User, today: Optional[date] = None) -> DailyChallenge:
        """
        Return today's challenge, generating one from recent entries and goals.

        Raises:
            QuotaExceededError: Generation needed but the AI allowance is used up
        """
        today = today or datetime.now(timezone.utc).date()

        latest = self.crud.get_latest(db, user_id=user.id)
        if latest is not None and latest.created_at.date() >= today:
            return latest

        if not subscription_service.consume_ai_request(db, user):
            raise QuotaExceededError("Monthly AI request limit reached. Upgrade for unlimited challenges.")

        recent = crud_journal_entry.get_multi_by_user(db, user_id=user.id, limit=RECENT_ENTRY_COUNT)
        goals = crud_wellness_goal.get_multi_by_user(db, user_id=user.id, active_only=True)
        generated = self.llm.generate_challenge(
            [entry.content for entry in recent],
            [goal.title for goal in goals],
        )
        return self.crud.create(db, user_id=user.id, obj_in=generated)

    def get_history(self, db: Session, user: User) -> List[DailyChallenge]:
        return self.crud.get_history(db, user_id=user.id)

    def complete(
        self, db: Session, challenge_id: int, user: User, reflection_note: Optional[str] = None
    ) -> DailyChallenge:
        challenge = self.crud.get_for_user(db, id=challenge_id, user_id=user.id)
        if challenge is None:
            raise NotFoundError("Challenge not found")
        if challenge.completed:
            raise ConflictError("Challenge already completed")

        challenge = self.crud.mark_completed(db, db_obj=challenge, reflection_note=reflection_note)
        achievement_service.evaluate_challenges(db, user.id)
        return challenge


challenge_service = ChallengeService()
