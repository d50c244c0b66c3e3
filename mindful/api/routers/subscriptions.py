# mindful/api/routers/subscriptions.py
from typing import List
from fastapi import APIRouter, Depends, Header, Request
from sqlalchemy.orm import Session

from mindful.core.config import get_db
from mindful.core.security import get_current_user
from mindful.services.subscription import subscription_service
from mindful.models.user import User
from mindful.schemas.subscription import (
    PlanOut,
    SubscriptionOut,
    SubscriptionStatus,
    CheckoutRequest,
    CheckoutResponse,
    WebhookAck,
)

router = APIRouter(prefix="/api", tags=["Subscriptions"])


@router.get("/subscription/plans", response_model=List[PlanOut], summary="Available plans")
def list_plans(db: Session = Depends(get_db)):
    return subscription_service.list_plans(db)


@router.get("/subscription", response_model=SubscriptionStatus, summary="My plan and usage")
def get_subscription(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return subscription_service.get_status(db, current_user)


@router.post("/subscription", response_model=CheckoutResponse, summary="Start a paid subscription")
def create_subscription(
    checkout: CheckoutRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Create a provider subscription for `price_premium` or `price_professional`.

    Returns the client secret used to confirm payment on the client.
    """
    return subscription_service.create_subscription(db, current_user, checkout.price_id)


@router.post("/subscription/cancel", response_model=SubscriptionOut, summary="Cancel my subscription")
def cancel_subscription(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return subscription_service.cancel_subscription(db, current_user)


@router.post("/webhooks/stripe", response_model=WebhookAck, summary="Payment provider webhook")
async def stripe_webhook(
    request: Request,
    stripe_signature: str = Header(..., alias="stripe-signature"),
    db: Session = Depends(get_db)
):
    payload = await request.body()
    subscription_service.handle_webhook(db, payload, stripe_signature)
    return WebhookAck()
