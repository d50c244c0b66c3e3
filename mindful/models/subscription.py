# models/subscription.py

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, Numeric, DateTime, JSON, ForeignKey
from sqlalchemy.orm import relationship
from mindful.core.config import Base


class SubscriptionPlan(Base):
    __tablename__ = "subscription_plans"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)  # matches SubscriptionTier
    price = Column(Numeric(10, 2), nullable=False)
    price_id = Column(String(255), unique=True, nullable=True)  # provider price id
    features = Column(JSON, nullable=True)
    ai_requests_limit = Column(Integer, nullable=True)  # None = unlimited
    group_limit = Column(Integer, nullable=True)  # None = unlimited
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)


class Subscription(Base):
    """Local mirror of a payment-provider subscription."""

    __tablename__ = "subscriptions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    plan_id = Column(Integer, ForeignKey("subscription_plans.id"), nullable=False)
    stripe_subscription_id = Column(String(255), unique=True, nullable=True, index=True)
    status = Column(String(50), nullable=False)

    start_date = Column(DateTime, nullable=False)
    end_date = Column(DateTime, nullable=True)
    cancelled_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc), nullable=False)

    user = relationship("User", back_populates="subscriptions")
    plan = relationship("SubscriptionPlan")
