# mindful/api/routers/goals.py
from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from mindful.core.config import get_db
from mindful.core.security import get_current_user
from mindful.services.goal import goal_service
from mindful.models.user import User
from mindful.schemas.goal import GoalCreate, GoalUpdate, GoalOut, ProgressCreate, ProgressOut

router = APIRouter(prefix="/api/goals", tags=["Wellness Goals"])


@router.get("", response_model=List[GoalOut], summary="List my goals")
def list_goals(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return goal_service.list_goals(db, current_user)


@router.post("", response_model=GoalOut, status_code=status.HTTP_201_CREATED, summary="Create a goal")
def create_goal(
    goal_data: GoalCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return goal_service.create_goal(db, goal_data, current_user)


@router.put("/{goal_id}", response_model=GoalOut, summary="Update a goal")
def update_goal(
    goal_id: int,
    goal_data: GoalUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return goal_service.update_goal(db, goal_id, goal_data, current_user)


@router.post(
    "/{goal_id}/progress",
    response_model=ProgressOut,
    status_code=status.HTTP_201_CREATED,
    summary="Record progress"
)
def record_progress(
    goal_id: int,
    progress_data: ProgressCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Adds to the goal's current value and completes it once the target is reached."""
    return goal_service.record_progress(db, goal_id, progress_data, current_user)


@router.get("/{goal_id}/progress", response_model=List[ProgressOut], summary="Progress history")
def list_progress(
    goal_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return goal_service.list_progress(db, goal_id, current_user)
