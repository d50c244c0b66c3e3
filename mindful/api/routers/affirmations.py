# mindful/api/routers/affirmations.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from mindful.core.config import get_db
from mindful.core.security import get_current_user
from mindful.services.affirmation import affirmation_service
from mindful.models.user import User
from mindful.schemas.affirmation import AffirmationOut

router = APIRouter(prefix="/api/affirmations", tags=["Affirmations"])


@router.get("/today", response_model=AffirmationOut, summary="Get today's affirmation")
def get_today_affirmation(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Generated once per day; later calls return the stored affirmation."""
    return affirmation_service.get_today(db, current_user)
