"""Stripe client for hosted checkout and webhook verification."""

import asyncio
import json
import logging
from typing import Any, Dict, Optional

import stripe

from healthassist.config import PaymentConfig
from healthassist.errors import NotConfigured, SignatureInvalid

logger = logging.getLogger(__name__)


class StripeGateway:
    """Creates checkout sessions and verifies webhook payloads.

    The API key is passed per request rather than assigned to ``stripe.api_key``
    so several configurations can coexist in one process.
    """

    def __init__(self, config: PaymentConfig):
        self.config = config

    @property
    def configured(self) -> bool:
        return self.config.checkout_configured

    async def create_checkout_session(
        self, customer_email: str, metadata: Dict[str, str]
    ) -> Any:
        """Create a single-line-item payment session; raises ``stripe.StripeError``."""
        if not self.configured:
            raise NotConfigured("Stripe is not configured")
        return await asyncio.to_thread(
            stripe.checkout.Session.create,
            api_key=self.config.secret_key,
            mode="payment",
            success_url=self.config.success_url,
            cancel_url=self.config.cancel_url,
            customer_email=customer_email,
            line_items=[
                {
                    "quantity": 1,
                    "price_data": {
                        "currency": self.config.currency,
                        "unit_amount": self.config.price_cents,
                        "product_data": {
                            "name": self.config.product_name,
                            "description": self.config.product_description,
                        },
                    },
                }
            ],
            metadata=metadata,
        )

    def verify_event(self, payload: bytes, signature: Optional[str]) -> Dict[str, Any]:
        """Verify the ``Stripe-Signature`` header and return the parsed event.

        Raises:
            NotConfigured: no webhook secret is set.
            SignatureInvalid: the header is missing, stale, or does not match.
        """
        if not self.config.webhook_secret:
            raise NotConfigured("Webhook secret not configured")
        if not signature:
            raise SignatureInvalid("Missing Stripe-Signature header")
        try:
            stripe.Webhook.construct_event(payload, signature, self.config.webhook_secret)
        except stripe.SignatureVerificationError as e:
            raise SignatureInvalid(f"Invalid webhook signature: {e}") from e
        except ValueError as e:
            raise SignatureInvalid(f"Invalid webhook payload: {e}") from e
        return json.loads(payload)
