# mindful/api/routers/challenges.py
from typing import List, Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from mindful.core.config import get_db
from mindful.core.security import get_current_user
from mindful.services.challenge import challenge_service
from mindful.models.user import User
from mindful.schemas.challenge import ChallengeComplete, ChallengeOut

router = APIRouter(prefix="/api/challenges", tags=["Daily Challenges"])


@router.get("/today", response_model=ChallengeOut, summary="Get today's challenge")
def get_today_challenge(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Returns today's challenge, generating one from recent entries and goals.

    Generating uses one AI request (429 when the monthly allowance is used up).
    """
    return challenge_service.get_today(db, current_user)


@router.get("/history", response_model=List[ChallengeOut], summary="Challenge history")
def get_challenge_history(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return challenge_service.get_history(db, current_user)


@router.post("/{challenge_id}/complete", response_model=ChallengeOut, summary="Complete a challenge")
def complete_challenge(
    challenge_id: int,
    payload: Optional[ChallengeComplete] = None,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return challenge_service.complete(
        db, challenge_id, current_user, reflection_note=payload.reflection_note if payload else None
    )
