# mindful/api/routers/achievements.py
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from mindful.core.config import get_db
from mindful.core.security import get_current_user
from mindful.services.achievement import achievement_service
from mindful.models.user import User
from mindful.schemas.achievement import AchievementOut, UserAchievementOut, StreakOut

router = APIRouter(prefix="/api", tags=["Achievements"])


@router.get("/achievements", response_model=List[AchievementOut], summary="Achievement catalog")
def list_achievements(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return achievement_service.list_catalog(db)


@router.get(
    "/achievements/unlocked",
    response_model=List[UserAchievementOut],
    summary="My unlocked achievements"
)
def list_unlocked_achievements(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return achievement_service.list_unlocked(db, current_user.id)


@router.get("/streak", response_model=StreakOut, summary="My journaling streak")
def get_streak(current_user: User = Depends(get_current_user)):
    return StreakOut(
        current_streak=current_user.current_streak or 0,
        longest_streak=current_user.longest_streak or 0,
        last_entry_date=current_user.last_entry_date,
    )
