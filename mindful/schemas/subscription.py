# schemas/subscription.py
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict

from mindful.models.user import SubscriptionTier


class PlanOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    price: Decimal
    features: Optional[List[str]] = None
    ai_requests_limit: Optional[int] = None
    group_limit: Optional[int] = None


class SubscriptionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    plan_id: int
    stripe_subscription_id: Optional[str] = None
    status: str
    start_date: datetime
    end_date: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None


class SubscriptionStatus(BaseModel):
    tier: SubscriptionTier
    ai_requests_used: int
    ai_requests_limit: Optional[int] = None
    ai_requests_reset_date: Optional[date] = None
    group_count: int
    group_limit: Optional[int] = None
    subscription: Optional[SubscriptionOut] = None


class CheckoutRequest(BaseModel):
    price_id: str


class CheckoutResponse(BaseModel):
    subscription_id: str
    client_secret: Optional[str] = None
    status: str


class WebhookAck(BaseModel):
    received: bool = True
