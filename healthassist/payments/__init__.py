from healthassist.payments.checkout import PaymentSessionInitiator
from healthassist.payments.dedup import SessionDeduplicator
from healthassist.payments.stripe_gateway import StripeGateway
from healthassist.payments.webhook import WebhookProcessor

__all__ = [
    "PaymentSessionInitiator",
    "SessionDeduplicator",
    "StripeGateway",
    "WebhookProcessor",
]
