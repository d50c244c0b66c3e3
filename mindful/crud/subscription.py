# crud/subscription.py
from typing import Any, Dict, Iterable, List, Optional
from datetime import datetime
from sqlalchemy.orm import Session
from sqlalchemy import desc

from mindful.models.subscription import SubscriptionPlan, Subscription

# Provider statuses that still entitle the user to the plan
LIVE_STATUSES = ("active", "trialing", "incomplete", "past_due")


class SubscriptionCRUD:
    """CRUD operations for subscription plans and mirrored subscriptions."""

    # =====================================================================
    # PLANS
    # =====================================================================

    def get_plans(self, db: Session) -> List[SubscriptionPlan]:
        return db.query(SubscriptionPlan).order_by(SubscriptionPlan.price, SubscriptionPlan.id).all()

    def get_plan(self, db: Session, id: int) -> Optional[SubscriptionPlan]:
        return db.query(SubscriptionPlan).filter(SubscriptionPlan.id == id).first()

    def get_plan_by_name(self, db: Session, name: str) -> Optional[SubscriptionPlan]:
        return db.query(SubscriptionPlan).filter(SubscriptionPlan.name == name).first()

    def create_missing_plans(self, db: Session, *, definitions: Iterable[Dict[str, Any]]) -> int:
        """Insert plans whose name is not present yet; returns rows inserted."""
        existing = {name for (name,) in db.query(SubscriptionPlan.name).all()}
        created = 0
        for definition in definitions:
            if definition["name"] in existing:
                continue
            db.add(SubscriptionPlan(**definition))
            created += 1

        if created:
            db.commit()
        return created

    # =====================================================================
    # SUBSCRIPTIONS
    # =====================================================================

    def create(
        self,
        db: Session,
        *,
        user_id: int,
        plan_id: int,
        stripe_subscription_id: str,
        status: str,
        start_date: datetime,
        end_date: Optional[datetime] = None,
    ) -> Subscription:
        db_obj = Subscription(
            user_id=user_id,
            plan_id=plan_id,
            stripe_subscription_id=stripe_subscription_id,
            status=status,
            start_date=start_date,
            end_date=end_date,
        )
        db.add(db_obj)
        db.commit()
        db.refresh(db_obj)
        return db_obj

    def get_by_stripe_id(self, db: Session, stripe_subscription_id: str) -> Optional[Subscription]:
        return (
            db.query(Subscription)
            .filter(Subscription.stripe_subscription_id == stripe_subscription_id)
            .first()
        )

    def get_live_for_user(self, db: Session, *, user_id: int) -> Optional[Subscription]:
        """Most recent subscription still in a live provider status."""
        return (
            db.query(Subscription)
            .filter(Subscription.user_id == user_id, Subscription.status.in_(LIVE_STATUSES))
            .order_by(desc(Subscription.created_at), desc(Subscription.id))
            .first()
        )

    def update_fields(self, db: Session, *, db_obj: Subscription, **fields: Any) -> Subscription:
        """Apply provider-mirrored fields; ``None`` values are written as-is."""
        for field, value in fields.items():
            setattr(db_obj, field, value)

        db.commit()
        db.refresh(db_obj)
        return db_obj


crud_subscription = SubscriptionCRUD()
