# services/subscription.py
import logging
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from mindful.core.config import settings
from mindful.core.exceptions import ExternalServiceError, NotFoundError, ValidationError
from mindful.models.user import User, SubscriptionTier
from mindful.models.subscription import SubscriptionPlan, Subscription
from mindful.crud.user import crud_user
from mindful.crud.subscription import crud_subscription
from mindful.crud.support import crud_support
from mindful.schemas.subscription import CheckoutResponse, SubscriptionStatus, SubscriptionOut
from mindful.services.billing import billing_gateway, from_timestamp

logger = logging.getLogger(__name__)


# =====================================================================
# PLAN CATALOG
# =====================================================================

BASIC_AI_REQUESTS_LIMIT = 20
BASIC_GROUP_LIMIT = 2

INITIAL_SUBSCRIPTION_PLANS = [
    {
        "name": SubscriptionTier.basic.value,
        "price": Decimal("0"),
        "price_id": None,
        "features": [
            "Basic journaling",
            "Join up to 2 support groups",
            "Basic mood tracking",
            "Limited AI features (20 requests/month)",
        ],
        "ai_requests_limit": BASIC_AI_REQUESTS_LIMIT,
        "group_limit": BASIC_GROUP_LIMIT,
    },
    {
        "name": SubscriptionTier.premium.value,
        "price": Decimal("14.99"),
        "price_id": settings.STRIPE_PREMIUM_PRICE_ID,
        "features": [
            "Unlimited AI-powered journaling",
            "Advanced sentiment analysis",
            "Unlimited support groups",
            "Focus motivation chat",
            "Advanced analytics",
            "Custom themes",
            "Ad-free experience",
        ],
        "ai_requests_limit": None,
        "group_limit": None,
    },
    {
        "name": SubscriptionTier.professional.value,
        "price": Decimal("29.99"),
        "price_id": settings.STRIPE_PROFESSIONAL_PRICE_ID,
        "features": [
            "All Premium features",
            "Priority support",
            "Group founder privileges",
            "Advanced emotional intelligence",
            "Custom guided meditations",
            "Personal wellness coach",
            "Advanced goal tracking",
            "API access",
        ],
        "ai_requests_limit": None,
        "group_limit": None,
    },
]

# Client-facing price ids -> tier
CHECKOUT_PRICES = {
    "price_basic": SubscriptionTier.basic,
    "price_premium": SubscriptionTier.premium,
    "price_professional": SubscriptionTier.professional,
}

# Provider statuses that grant the plan's tier
ENTITLED_STATUSES = {"active", "trialing"}
# Provider statuses that revoke it
ENDED_STATUSES = {"canceled", "cancelled", "unpaid", "incomplete_expired"}


def first_day_of_next_month(today: date) -> date:
    if today.month == 12:
        return date(today.year + 1, 1, 1)
    return date(today.year, today.month + 1, 1)


class SubscriptionService:
    """Plans, quota gating, and the local mirror of provider subscriptions."""

    def __init__(self):
        self.crud = crud_subscription
        self.gateway = billing_gateway

    # =====================================================================
    # PLANS
    # =====================================================================

    def seed_plans(self, db: Session) -> int:
        created = self.crud.create_missing_plans(db, definitions=INITIAL_SUBSCRIPTION_PLANS)
        if created:
            logger.info(f"Seeded {created} subscription plan(s)")
        return created

    def list_plans(self, db: Session) -> List[SubscriptionPlan]:
        return self.crud.get_plans(db)

    def _plan_for_tier(self, db: Session, tier: SubscriptionTier) -> Optional[SubscriptionPlan]:
        return self.crud.get_plan_by_name(db, tier.value)

    def _limits(self, db: Session, user: User) -> Dict[str, Optional[int]]:
        plan = self._plan_for_tier(db, user.subscription_tier)
        if plan is None:
            # Unseeded database: fall back to the basic allowance for basic users
            if user.subscription_tier == SubscriptionTier.basic:
                return {"ai": BASIC_AI_REQUESTS_LIMIT, "groups": BASIC_GROUP_LIMIT}
            return {"ai": None, "groups": None}
        return {"ai": plan.ai_requests_limit, "groups": plan.group_limit}

    # =====================================================================
    # QUOTA
    # =====================================================================

    def consume_ai_request(self, db: Session, user: User, today: Optional[date] = None) -> bool:
        """
        Count one LLM-backed request against the monthly allowance.

        Returns:
            True if the request is allowed (and has been counted)
        """
        limit = self._limits(db, user)["ai"]
        if limit is None:
            return True

        today = today or datetime.now(timezone.utc).date()
        reset_date = user.ai_requests_reset_date

        # New period (or never used): restart the counter with this request
        if reset_date is None or reset_date <= today:
            crud_user.set_ai_usage(
                db, user=user, count=1, reset_date=first_day_of_next_month(today)
            )
            return True

        used = user.ai_requests_count or 0
        if used >= limit:
            logger.info(f"AI request limit reached for user {user.id} ({used}/{limit})")
            return False

        crud_user.set_ai_usage(db, user=user, count=used + 1)
        return True

    def can_join_group(self, db: Session, user: User) -> bool:
        limit = self._limits(db, user)["groups"]
        if limit is None:
            return True
        return crud_support.count_user_groups(db, user_id=user.id) < limit

    def get_status(self, db: Session, user: User) -> SubscriptionStatus:
        limits = self._limits(db, user)
        live = self.crud.get_live_for_user(db, user_id=user.id)
        return SubscriptionStatus(
            tier=user.subscription_tier,
            ai_requests_used=user.ai_requests_count or 0,
            ai_requests_limit=limits["ai"],
            ai_requests_reset_date=user.ai_requests_reset_date,
            group_count=crud_support.count_user_groups(db, user_id=user.id),
            group_limit=limits["groups"],
            subscription=SubscriptionOut.model_validate(live) if live else None,
        )

    # =====================================================================
    # CHECKOUT & CANCELLATION
    # =====================================================================

    def create_subscription(self, db: Session, user: User, price_id: str) -> CheckoutResponse:
        """
        Start a paid subscription at the provider and mirror it locally.

        Raises:
            ValidationError: Unknown price id or free tier
            ExternalServiceError: Provider not configured or failed
        """
        tier = CHECKOUT_PRICES.get(price_id)
        if tier is None:
            raise ValidationError(f"Invalid price ID: {price_id}")
        if tier == SubscriptionTier.basic:
            raise ValidationError("Cannot create subscription for free tier")

        plan = self._plan_for_tier(db, tier)
        if plan is None:
            raise NotFoundError(f"Plan '{tier.value}' not found")
        if not plan.price_id:
            raise ExternalServiceError(f"No provider price configured for '{tier.value}'")

        if not user.stripe_customer_id:
            customer_id = self.gateway.create_customer(email=user.email, user_id=user.id)
            user = crud_user.set_stripe_customer(db, user=user, customer_id=customer_id)

        result = self.gateway.create_subscription(user.stripe_customer_id, plan.price_id)

        self.crud.create(
            db,
            user_id=user.id,
            plan_id=plan.id,
            stripe_subscription_id=result["subscription_id"],
            status=result["status"],
            start_date=result["period_start"] or datetime.now(timezone.utc),
            end_date=result["period_end"],
        )
        if result["status"] in ENTITLED_STATUSES:
            crud_user.set_subscription_tier(db, user=user, tier=tier)

        logger.info(f"User {user.id} started {tier.value} subscription {result['subscription_id']}")
        return CheckoutResponse(
            subscription_id=result["subscription_id"],
            client_secret=result["client_secret"],
            status=result["status"],
        )

    def cancel_subscription(self, db: Session, user: User) -> Subscription:
        subscription = self.crud.get_live_for_user(db, user_id=user.id)
        if subscription is None:
            raise NotFoundError("No active subscription")

        self.gateway.cancel_subscription(subscription.stripe_subscription_id)
        subscription = self.crud.update_fields(
            db,
            db_obj=subscription,
            status="cancelled",
            cancelled_at=datetime.now(timezone.utc),
        )
        crud_user.set_subscription_tier(db, user=user, tier=SubscriptionTier.basic)
        logger.info(f"User {user.id} cancelled subscription {subscription.stripe_subscription_id}")
        return subscription

    # =====================================================================
    # WEBHOOKS
    # =====================================================================

    def handle_webhook(self, db: Session, payload: bytes, signature: str) -> None:
        event = self.gateway.construct_event(payload, signature)
        self.apply_event(db, event)

    def apply_event(self, db: Session, event: Dict[str, Any]) -> Optional[Subscription]:
        """Mirror a verified provider event into the local subscription record."""
        event_type = event.get("type")
        obj = (event.get("data") or {}).get("object") or {}

        if event_type in ("customer.subscription.updated", "customer.subscription.deleted"):
            subscription = self.crud.get_by_stripe_id(db, obj.get("id"))
            if subscription is None:
                logger.warning(f"Webhook {event_type} for unknown subscription {obj.get('id')}")
                return None
            status = obj.get("status") or ("canceled" if event_type.endswith("deleted") else None)
            subscription = self.crud.update_fields(
                db,
                db_obj=subscription,
                status=status or subscription.status,
                end_date=from_timestamp(obj.get("current_period_end")) or subscription.end_date,
                cancelled_at=from_timestamp(obj.get("canceled_at")),
            )
            self._sync_tier(db, subscription)
            return subscription

        if event_type in ("invoice.payment_succeeded", "invoice.payment_failed"):
            stripe_subscription_id = obj.get("subscription")
            if not stripe_subscription_id:
                return None
            subscription = self.crud.get_by_stripe_id(db, stripe_subscription_id)
            if subscription is None:
                logger.warning(f"Webhook {event_type} for unknown subscription {stripe_subscription_id}")
                return None

            if event_type == "invoice.payment_succeeded":
                subscription = self.crud.update_fields(
                    db,
                    db_obj=subscription,
                    status="active",
                    start_date=from_timestamp(obj.get("period_start")) or subscription.start_date,
                    end_date=from_timestamp(obj.get("period_end")) or subscription.end_date,
                )
            else:
                subscription = self.crud.update_fields(db, db_obj=subscription, status="past_due")
            self._sync_tier(db, subscription)
            return subscription

        logger.debug(f"Ignoring webhook event {event_type}")
        return None

    def _sync_tier(self, db: Session, subscription: Subscription) -> None:
        user = crud_user.get(db, id=subscription.user_id)
        if user is None:
            return
        if subscription.status in ENTITLED_STATUSES:
            crud_user.set_subscription_tier(db, user=user, tier=SubscriptionTier(subscription.plan.name))
        elif subscription.status in ENDED_STATUSES:
            crud_user.set_subscription_tier(db, user=user, tier=SubscriptionTier.basic)


subscription_service = SubscriptionService()
