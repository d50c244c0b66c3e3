# services/billing.py
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import stripe

from mindful.core.config import settings
from mindful.core.exceptions import BadRequestError, ExternalServiceError

logger = logging.getLogger(__name__)


def from_timestamp(value: Optional[int]) -> Optional[datetime]:
    """Provider epoch seconds -> UTC datetime."""
    if value is None:
        return None
    return datetime.fromtimestamp(int(value), tz=timezone.utc)


class BillingGateway:
    """Wrapper around the Stripe SDK; the rest of the app never imports stripe."""

    def __init__(self, api_key: Optional[str], webhook_secret: str, api_version: str):
        self.api_key = api_key
        self.webhook_secret = webhook_secret
        self.api_version = api_version

    def _configure(self) -> None:
        if not self.api_key:
            raise ExternalServiceError("Payment provider is not configured")
        stripe.api_key = self.api_key
        stripe.api_version = self.api_version

    def create_customer(self, email: str, user_id: int) -> str:
        """Create a provider customer and return its id."""
        self._configure()
        try:
            customer = stripe.Customer.create(
                email=email,
                metadata={"userId": str(user_id)},
            )
        except stripe.StripeError as exc:
            logger.error(f"Error creating customer for user {user_id}: {exc}")
            raise ExternalServiceError("Could not create billing customer") from exc
        return customer.id

    def create_subscription(self, customer_id: str, price_id: str) -> Dict[str, Any]:
        """
        Start an incomplete subscription for hosted payment confirmation.

        Returns:
            Dict with subscription_id, status, client_secret, period_start, period_end
        """
        self._configure()
        try:
            subscription = stripe.Subscription.create(
                customer=customer_id,
                items=[{"price": price_id}],
                payment_behavior="default_incomplete",
                payment_settings={"save_default_payment_method": "on_subscription"},
                expand=["latest_invoice.payment_intent"],
            )
        except stripe.StripeError as exc:
            logger.error(f"Error creating subscription: {exc}")
            raise ExternalServiceError("Could not create subscription") from exc

        client_secret = None
        invoice = getattr(subscription, "latest_invoice", None)
        payment_intent = getattr(invoice, "payment_intent", None) if invoice else None
        if payment_intent:
            client_secret = getattr(payment_intent, "client_secret", None)

        return {
            "subscription_id": subscription.id,
            "status": subscription.status,
            "client_secret": client_secret,
            "period_start": from_timestamp(getattr(subscription, "current_period_start", None)),
            "period_end": from_timestamp(getattr(subscription, "current_period_end", None)),
        }

    def cancel_subscription(self, subscription_id: str) -> str:
        """Cancel at the provider; returns the provider status."""
        self._configure()
        try:
            subscription = stripe.Subscription.cancel(subscription_id)
        except stripe.StripeError as exc:
            logger.error(f"Error cancelling subscription {subscription_id}: {exc}")
            raise ExternalServiceError("Could not cancel subscription") from exc
        return subscription.status

    def construct_event(self, payload: bytes, signature: str) -> Dict[str, Any]:
        """Verify a webhook signature and return the event as a plain dict."""
        try:
            stripe.Webhook.construct_event(payload, signature, self.webhook_secret)
        except stripe.SignatureVerificationError as exc:
            raise BadRequestError("Invalid webhook signature") from exc
        except ValueError as exc:
            raise BadRequestError("Invalid webhook payload") from exc
        return json.loads(payload)


billing_gateway = BillingGateway(
    api_key=settings.STRIPE_SECRET_KEY,
    webhook_secret=settings.STRIPE_WEBHOOK_SECRET,
    api_version=settings.STRIPE_API_VERSION,
)
