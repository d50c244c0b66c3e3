# services/affirmation.py
import logging
from datetime import date, datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from mindful.models.user import User
from mindful.models.affirmation import Affirmation
from mindful.crud.affirmation import crud_affirmation
from mindful.services.llm import llm_client, FALLBACK_AFFIRMATION
from mindful.services.subscription import subscription_service

logger = logging.getLogger(__name__)


class AffirmationService:
    def __init__(self):
        self.crud = crud_affirmation
        self.llm = llm_client

    def get_today(self, db: Session, user: User, today: Optional[date] = None) -> Affirmation:
        """Return today's affirmation, generating and storing one if needed."""
        today = today or datetime.now(timezone.utc).date()

        latest = self.crud.get_latest(db, user_id=user.id)
        if latest is not None and latest.created_at.date() >= today:
            return latest

        if subscription_service.consume_ai_request(db, user):
            content = self.llm.generate_affirmation()
        else:
            content = FALLBACK_AFFIRMATION

        return self.crud.create(db, user_id=user.id, content=content)


affirmation_service = AffirmationService()
