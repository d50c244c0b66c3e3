# crud/wellness_goal.py
from typing import List, Optional
from sqlalchemy.orm import Session
from sqlalchemy import desc

from mindful.models.wellness_goal import WellnessGoal, GoalProgress
from mindful.schemas.goal import GoalCreate, GoalUpdate, ProgressCreate


class WellnessGoalCRUD:
    """CRUD operations for WellnessGoal and GoalProgress models."""

    # =====================================================================
    # GOALS
    # =====================================================================

    def create(self, db: Session, *, obj_in: GoalCreate, user_id: int) -> WellnessGoal:
        db_obj = WellnessGoal(
            user_id=user_id,
            current_value=0,
            is_completed=False,
            **obj_in.model_dump(),
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def get_for_user(self, db: Session, *, id: int, user_id: int) -> Optional[WellnessGoal]:
        return (
            db.query(WellnessGoal)
            .filter(WellnessGoal.id == id, WellnessGoal.user_id == user_id)
            .first()
        )

    def get_multi_by_user(
        self, db: Session, *, user_id: int, active_only: bool = False
    ) -> List[WellnessGoal]:
        query = db.query(WellnessGoal).filter(WellnessGoal.user_id == user_id)
        if active_only:
            query = query.filter(WellnessGoal.is_completed.is_(False))
        return query.order_by(desc(WellnessGoal.created_at), desc(WellnessGoal.id)).all()

    def update(self, db: Session, *, db_obj: WellnessGoal, obj_in: GoalUpdate) -> WellnessGoal:
        update_data = obj_in.model_dump(exclude_unset=True)

        for field, value in update_data.items():
            if value is not None:
                setattr(db_obj, field, value)

        db.commit()
        db.refresh(db_obj)
        return db_obj

    # =====================================================================
    # PROGRESS
    # =====================================================================

    def add_progress(
        self, db: Session, *, goal: WellnessGoal, obj_in: ProgressCreate
    ) -> GoalProgress:
        """Record progress and roll it into the goal's running total."""
        progress = GoalProgress(goal_id=goal.id, value=obj_in.value, note=obj_in.note)
        db.add(progress)

        goal.current_value = (goal.current_value or 0) + obj_in.value
        if goal.current_value >= goal.target_value:
            goal.is_completed = True

        db.commit()
        db.refresh(progress)
        db.refresh(goal)
        return progress

    def get_progress(self, db: Session, *, goal_id: int) -> List[GoalProgress]:
        return (
            db.query(GoalProgress)
            .filter(GoalProgress.goal_id == goal_id)
            .order_by(desc(GoalProgress.created_at), desc(GoalProgress.id))
            .all()
        )


crud_wellness_goal = WellnessGoalCRUD()
