"""
Booking confirmation emails.

Notification is best-effort: by the time it runs the calendar event already
exists, so a mail failure is logged and reported as ``False`` but never
raised.
"""

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from enum import Enum
from html import escape
from typing import Optional

from healthassist.config import MailConfig

logger = logging.getLogger(__name__)


class NotificationKind(str, Enum):
    FREE = "free"
    PAID = "paid"


class SmtpMailer:
    """Sends one multipart (plain + HTML) message over SMTP."""

    def __init__(self, config: MailConfig):
        self.config = config

    @property
    def configured(self) -> bool:
        return self.config.configured

    def send(
        self,
        to: str,
        subject: str,
        text_body: str,
        html_body: Optional[str] = None,
        cc: Optional[str] = None,
    ) -> None:
        msg = EmailMessage()
        msg["Subject"] = subject
        msg["From"] = self.config.from_email
        msg["To"] = to
        if cc:
            msg["Cc"] = cc
        msg.set_content(text_body)
        if html_body:
            msg.add_alternative(html_body, subtype="html")

        with smtplib.SMTP(self.config.smtp_host, self.config.smtp_port, timeout=30) as smtp:
            if self.config.use_tls:
                smtp.starttls()
            if self.config.username and self.config.password:
                smtp.login(self.config.username, self.config.password)
            smtp.send_message(msg)


_HTML_TEMPLATE = """\
<div style="font-family: 'Segoe UI', sans-serif; max-width: 600px; margin: 0 auto;">
  <div style="background: {accent}; padding: 32px; border-radius: 16px 16px 0 0;">
    <h1 style="color: white; margin: 0; font-size: 24px;">{heading}</h1>
    <p style="color: rgba(255,255,255,0.8); margin: 8px 0 0;">{brand}</p>
  </div>
  <div style="background: white; padding: 32px; border: 1px solid #e2e8f0; border-top: 0;">
    <p>Hi {name},</p>
    <p>{intro}</p>
    <p style="font-weight: 600;">{when}</p>
    <p>Service: {service}</p>
    <p>{closing}</p>
    <p style="color: #94a3b8; font-size: 13px;">{footer}</p>
  </div>
</div>
"""


class EmailNotifier:
    """Sends free or paid booking confirmations to the client, copying the clinic."""

    def __init__(
        self,
        config: MailConfig,
        brand_name: str,
        free_duration_minutes: int = 20,
        paid_duration_minutes: int = 60,
        paid_amount: str = "",
        mailer: Optional[SmtpMailer] = None,
    ):
        self.config = config
        self.brand_name = brand_name
        self.free_duration_minutes = free_duration_minutes
        self.paid_duration_minutes = paid_duration_minutes
        self.paid_amount = paid_amount
        self.mailer = mailer or SmtpMailer(config)

    def compose(
        self,
        kind: NotificationKind,
        client_name: str,
        display_date_time: str,
        service: Optional[str],
    ) -> tuple[str, str, str]:
        """Return ``(subject, text_body, html_body)`` for a confirmation."""
        service_label = service or "General Consultation"
        if kind == NotificationKind.PAID:
            subject = f"{self.brand_name} 1-Hour Consultation Confirmed - {display_date_time}"
            heading = "Paid Consultation Confirmed!"
            intro = (
                f"Your {self.paid_duration_minutes}-minute specialist consultation "
                "has been scheduled:"
            )
            paid = f"Payment of {self.paid_amount} has been received. " if self.paid_amount else ""
            closing = f"{paid}You'll receive a calendar invite shortly."
            accent = "linear-gradient(135deg, #F9A826, #E8941A)"
        else:
            subject = f"{self.brand_name} Consultation Confirmed - {display_date_time}"
            heading = "Consultation Confirmed!"
            intro = f"Your {self.free_duration_minutes}-minute consultation has been scheduled:"
            closing = (
                "You'll receive a calendar invite shortly. "
                "If you need to reschedule, please contact us."
            )
            accent = "linear-gradient(135deg, #1B3A5C, #2AA89A)"

        text_body = "\n\n".join(
            part
            for part in (
                f"Hi {client_name},",
                f"{intro}\n{display_date_time}\nService: {service_label}",
                closing,
                self.config.contact_footer,
            )
            if part
        )
        html_body = _HTML_TEMPLATE.format(
            accent=accent,
            heading=heading,
            brand=escape(self.brand_name),
            name=escape(client_name),
            intro=escape(intro),
            when=escape(display_date_time),
            service=escape(service_label),
            closing=escape(closing),
            footer=escape(self.config.contact_footer),
        )
        return subject, text_body, html_body

    async def notify(
        self,
        kind: NotificationKind,
        recipient: str,
        client_name: str,
        display_date_time: str,
        service: Optional[str] = None,
    ) -> bool:
        """Send a confirmation; returns whether it was handed to the SMTP server."""
        if not self.mailer.configured:
            logger.warning("SMTP not configured; skipping %s confirmation to %s", kind.value, recipient)
            return False

        subject, text_body, html_body = self.compose(kind, client_name, display_date_time, service)
        try:
            await asyncio.to_thread(
                self.mailer.send,
                recipient,
                subject,
                text_body,
                html_body,
                self.config.cc_email or None,
            )
        except Exception as e:
            logger.warning("Failed to send %s confirmation to %s: %s", kind.value, recipient, e)
            return False

        logger.info("%s booking confirmation sent to: %s", kind.value.capitalize(), recipient)
        return True
