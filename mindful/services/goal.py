# services/goal.py
from typing import List

from sqlalchemy.orm import Session

from mindful.core.exceptions import NotFoundError
from mindful.models.user import User
from mindful.models.wellness_goal import WellnessGoal, GoalProgress
from mindful.schemas.goal import GoalCreate, GoalUpdate, ProgressCreate
from mindful.crud.wellness_goal import crud_wellness_goal


class GoalService:
    """Service layer for wellness goals."""

    def __init__(self):
        self.crud = crud_wellness_goal

    def _get_owned(self, db: Session, goal_id: int, user: User) -> WellnessGoal:
        goal = self.crud.get_for_user(db, id=goal_id, user_id=user.id)
        if goal is None:
            raise NotFoundError("Goal not found")
        return goal

    def list_goals(self, db: Session, user: User) -> List[WellnessGoal]:
        return self.crud.get_multi_by_user(db, user_id=user.id)

    def create_goal(self, db: Session, goal_data: GoalCreate, user: User) -> WellnessGoal:
        return self.crud.create(db, obj_in=goal_data, user_id=user.id)

    def update_goal(self, db: Session, goal_id: int, goal_data: GoalUpdate, user: User) -> WellnessGoal:
        goal = self._get_owned(db, goal_id, user)
        return self.crud.update(db, db_obj=goal, obj_in=goal_data)

    def record_progress(
        self, db: Session, goal_id: int, progress_data: ProgressCreate, user: User
    ) -> GoalProgress:
        goal = self._get_owned(db, goal_id, user)
        return self.crud.add_progress(db, goal=goal, obj_in=progress_data)

    def list_progress(self, db: Session, goal_id: int, user: User) -> List[GoalProgress]:
        goal = self._get_owned(db, goal_id, user)
        return self.crud.get_progress(db, goal_id=goal.id)


goal_service = GoalService()
