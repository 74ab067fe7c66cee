"""Wires the engine's components from one AppConfig."""

from dataclasses import dataclass
from typing import Any, Optional

from healthassist.clock import ZoneClock
from healthassist.config import AppConfig
from healthassist.notifications.email_notifier import EmailNotifier, SmtpMailer
from healthassist.payments.checkout import PaymentSessionInitiator
from healthassist.payments.dedup import SessionDeduplicator
from healthassist.payments.stripe_gateway import StripeGateway
from healthassist.payments.webhook import WebhookProcessor
from healthassist.scheduling.availability import AvailabilityCalculator, BusyIntervalFetcher
from healthassist.scheduling.booking import BookingExecutor
from healthassist.scheduling.calendar_gateway import GoogleCalendarGateway
from healthassist.scheduling.service import SchedulingService
from healthassist.utils import format_money


@dataclass
class Container:
    config: AppConfig
    calendar: GoogleCalendarGateway
    stripe: StripeGateway
    notifier: EmailNotifier
    scheduling: SchedulingService
    checkout: PaymentSessionInitiator
    webhook: WebhookProcessor


def build_container(
    config: AppConfig,
    calendar_service: Any = None,
    clock: Optional[ZoneClock] = None,
    mailer: Optional[SmtpMailer] = None,
) -> Container:
    """Build every component; ``calendar_service``, ``clock`` and ``mailer`` are test seams."""
    sched = config.scheduling
    calendar = GoogleCalendarGateway(sched, service=calendar_service)
    fetcher = BusyIntervalFetcher(calendar)
    executor = BookingExecutor(sched, calendar, fetcher)
    notifier = EmailNotifier(
        config.mail,
        brand_name=sched.brand_name,
        free_duration_minutes=sched.slot_duration_minutes,
        paid_duration_minutes=sched.paid_duration_minutes,
        paid_amount=format_money(config.payment.price_cents, config.payment.currency),
        mailer=mailer,
    )
    calculator = AvailabilityCalculator(sched, fetcher, clock or ZoneClock(sched.timezone))
    stripe_gateway = StripeGateway(config.payment)
    dedup = SessionDeduplicator(config.webhook.dedup_ttl_seconds, config.webhook.dedup_max_entries)

    return Container(
        config=config,
        calendar=calendar,
        stripe=stripe_gateway,
        notifier=notifier,
        scheduling=SchedulingService(calculator, executor, notifier, sched.slot_duration_minutes),
        checkout=PaymentSessionInitiator(config.payment, stripe_gateway),
        webhook=WebhookProcessor(
            stripe_gateway, executor, notifier, dedup, sched.paid_duration_minutes
        ),
    )
