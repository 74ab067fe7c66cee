"""
Centralized configuration with environment variable overrides.

Business hours, the booking calendar, payment and mail credentials are all
configurable here. Components receive the relevant sub-config explicitly at
construction; nothing reads these values from module-level state.
"""

import logging
import os
from dataclasses import dataclass, field
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

from healthassist.logging_context import RequestIdFilter

load_dotenv()

logger = logging.getLogger(__name__)

_TRUTHY = {"1", "true", "yes", "on"}


def _safe_int(env_var: str, default: str) -> int:
    """Parse an integer from an env var with a clear error on bad values."""
    raw = os.getenv(env_var, default)
    try:
        return int(raw)
    except (ValueError, TypeError):
        raise ValueError(
            f"Invalid integer for {env_var}: {raw!r}"
        ) from None


def _safe_bool(env_var: str, default: str) -> bool:
    """Parse a boolean flag from an env var."""
    return os.getenv(env_var, default).strip().lower() in _TRUTHY


@dataclass(frozen=True)
class SchedulingConfig:
    """Calendar identity, business hours, and slot policy."""

    calendar_email: str = os.getenv("SCHEDULING_CALENDAR_EMAIL", "")
    service_account_key_path: str = os.getenv("GOOGLE_SERVICE_ACCOUNT_KEY_PATH", "")
    timezone: str = os.getenv("SCHEDULING_TIMEZONE", "America/Los_Angeles")
    business_hours_start: int = _safe_int("SCHEDULING_BUSINESS_HOURS_START", "9")
    business_hours_end: int = _safe_int("SCHEDULING_BUSINESS_HOURS_END", "17")
    slot_duration_minutes: int = _safe_int("SCHEDULING_SLOT_DURATION_MINUTES", "20")
    paid_duration_minutes: int = _safe_int("SCHEDULING_PAID_DURATION_MINUTES", "60")
    days_ahead: int = _safe_int("SCHEDULING_DAYS_AHEAD", "14")
    recheck_before_booking: bool = _safe_bool("SCHEDULING_RECHECK_BEFORE_BOOKING", "false")
    brand_name: str = os.getenv("BRAND_NAME", "Zumanely")

    @property
    def calendar_configured(self) -> bool:
        return bool(self.calendar_email and self.service_account_key_path)


@dataclass(frozen=True)
class PaymentConfig:
    """Stripe credentials and the fixed price of a paid consultation."""

    secret_key: str = os.getenv("STRIPE_SECRET_KEY", "")
    webhook_secret: str = os.getenv("STRIPE_WEBHOOK_SECRET", "")
    price_cents: int = _safe_int("STRIPE_PRICE_CENTS", "1999")
    currency: str = os.getenv("STRIPE_CURRENCY", "usd")
    success_url: str = os.getenv(
        "STRIPE_SUCCESS_URL",
        "http://localhost:5173?payment=success&session_id={CHECKOUT_SESSION_ID}",
    )
    cancel_url: str = os.getenv("STRIPE_CANCEL_URL", "http://localhost:5173?payment=cancelled")
    product_name: str = os.getenv("STRIPE_PRODUCT_NAME", "1-Hour Specialist Consultation")
    product_description: str = os.getenv(
        "STRIPE_PRODUCT_DESCRIPTION", "Full hour session with a healthcare specialist"
    )

    @property
    def checkout_configured(self) -> bool:
        return bool(self.secret_key)


@dataclass(frozen=True)
class WebhookConfig:
    """Retention bounds for the webhook de-duplication set."""

    dedup_ttl_seconds: int = _safe_int("WEBHOOK_DEDUP_TTL_SECONDS", "86400")
    dedup_max_entries: int = _safe_int("WEBHOOK_DEDUP_MAX_ENTRIES", "10000")


@dataclass(frozen=True)
class MailConfig:
    """SMTP transport used for booking confirmations."""

    smtp_host: str = os.getenv("SMTP_HOST", "")
    smtp_port: int = _safe_int("SMTP_PORT", "587")
    username: str = os.getenv("SMTP_USERNAME", "")
    password: str = os.getenv("SMTP_PASSWORD", "")
    use_tls: bool = _safe_bool("SMTP_USE_TLS", "true")
    from_email: str = os.getenv("MAIL_FROM", "")
    cc_email: str = os.getenv("NOTIFICATION_CC_EMAIL", "")
    contact_footer: str = os.getenv("CONTACT_FOOTER", "")

    @property
    def configured(self) -> bool:
        return bool(self.smtp_host and self.from_email)


@dataclass(frozen=True)
class AppConfig:
    """Root configuration aggregating all sub-configs."""

    scheduling: SchedulingConfig = field(default_factory=SchedulingConfig)
    payment: PaymentConfig = field(default_factory=PaymentConfig)
    webhook: WebhookConfig = field(default_factory=WebhookConfig)
    mail: MailConfig = field(default_factory=MailConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")
    app_name: str = os.getenv("APP_NAME", "healthassist-scheduling")
    host: str = os.getenv("HOST", "0.0.0.0")
    port: int = _safe_int("PORT", "8080")


def _validate_config(config: AppConfig) -> None:
    """Validate configuration values are within acceptable ranges."""
    sched = config.scheduling
    if not 0 <= sched.business_hours_start <= 23:
        raise ValueError(
            f"SCHEDULING_BUSINESS_HOURS_START must be between 0 and 23, "
            f"got {sched.business_hours_start}"
        )
    if not 1 <= sched.business_hours_end <= 24:
        raise ValueError(
            f"SCHEDULING_BUSINESS_HOURS_END must be between 1 and 24, "
            f"got {sched.business_hours_end}"
        )
    if sched.business_hours_start >= sched.business_hours_end:
        raise ValueError(
            "SCHEDULING_BUSINESS_HOURS_START must be before SCHEDULING_BUSINESS_HOURS_END, "
            f"got {sched.business_hours_start} >= {sched.business_hours_end}"
        )
    for name, minutes in [
        ("SCHEDULING_SLOT_DURATION_MINUTES", sched.slot_duration_minutes),
        ("SCHEDULING_PAID_DURATION_MINUTES", sched.paid_duration_minutes),
    ]:
        if minutes < 1:
            raise ValueError(f"{name} must be >= 1, got {minutes}")

    business_minutes = (sched.business_hours_end - sched.business_hours_start) * 60
    if sched.slot_duration_minutes > business_minutes:
        raise ValueError(
            "SCHEDULING_SLOT_DURATION_MINUTES must fit inside business hours, "
            f"got {sched.slot_duration_minutes} > {business_minutes}"
        )
    if sched.days_ahead < 1:
        raise ValueError(f"SCHEDULING_DAYS_AHEAD must be >= 1, got {sched.days_ahead}")
    try:
        ZoneInfo(sched.timezone)
    except (ZoneInfoNotFoundError, ValueError):
        raise ValueError(f"SCHEDULING_TIMEZONE is not a known zone: {sched.timezone!r}") from None

    if config.payment.price_cents < 1:
        raise ValueError(f"STRIPE_PRICE_CENTS must be >= 1, got {config.payment.price_cents}")

    if config.webhook.dedup_ttl_seconds < 1:
        raise ValueError(
            f"WEBHOOK_DEDUP_TTL_SECONDS must be >= 1, got {config.webhook.dedup_ttl_seconds}"
        )
    if config.webhook.dedup_max_entries < 1:
        raise ValueError(
            f"WEBHOOK_DEDUP_MAX_ENTRIES must be >= 1, got {config.webhook.dedup_max_entries}"
        )


def load_config() -> AppConfig:
    """Load and validate application configuration."""
    config = AppConfig()
    _validate_config(config)
    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] [%(request_id)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
            handler.addFilter(RequestIdFilter())

    if not config.scheduling.calendar_configured:
        logger.warning("Calendar identity or service account key missing; scheduling disabled")
    if not config.payment.checkout_configured:
        logger.warning("Stripe secret key not configured; payment features disabled")
    if not config.mail.configured:
        logger.warning("SMTP not configured; confirmation emails will be skipped")
    logger.info("Configuration loaded for '%s'", config.app_name)
    return config
