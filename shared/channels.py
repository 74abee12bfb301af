"""
Mail transports.

A transport hands one Notification to a mail service and reports the outcome.
Two are provided:
- SMTPMailTransport: real delivery through an SMTP account (Gmail by default)
- ConsoleMailTransport: logs each email and keeps it for inspection; used for
  local runs and as the test double

Design decisions:
- send() never raises for delivery problems; it returns a DeliveryResult and
  the dispatcher decides what a failure means for the request
- Blocking smtplib calls run in a worker thread so the event loop keeps
  serving other requests
- One transport instance is created at startup and shared by all requests;
  it holds configuration only, no per-request state
"""

import asyncio
import logging
import random
import smtplib
import ssl
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.message import EmailMessage
from typing import Iterable, Optional

from shared.config import Settings
from shared.models import Notification

logger = logging.getLogger("notifications")


@dataclass
class DeliveryResult:
    """
    Result of one send attempt.

    Captures success/failure and the message for debugging and testing.
    """
    success: bool
    recipient: str
    subject: str
    body: str
    cc: Optional[str] = None
    reply_to: Optional[str] = None
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    error: Optional[str] = None

    @classmethod
    def for_notification(
        cls, notification: Notification, error: Optional[str] = None
    ) -> "DeliveryResult":
        return cls(
            success=error is None,
            recipient=notification.recipient,
            subject=notification.subject,
            body=notification.body,
            cc=notification.cc,
            reply_to=notification.reply_to,
            error=error,
        )

    def __str__(self) -> str:
        status = "✓" if self.success else "✗"
        return f"{status} EMAIL to {self.recipient}: {self.subject}"


class MailTransport:
    """Interface for anything that can deliver a Notification."""

    async def send(self, notification: Notification) -> DeliveryResult:
        raise NotImplementedError


class ConsoleMailTransport(MailTransport):
    """
    Logging mail transport.

    Logs sends to console and tracks them for test assertions.
    Can simulate failures for testing error handling.
    """

    def __init__(
        self,
        fail_rate: float = 0.0,
        failing_recipients: Optional[Iterable[str]] = None,
        delay: float = 0.0,
    ):
        """
        Initialize the transport.

        Args:
            fail_rate: Probability of send failure (0.0 to 1.0), for testing.
            failing_recipients: Addresses whose sends always fail.
            delay: Seconds each send waits before completing.
        """
        self.fail_rate = fail_rate
        self.failing_recipients = set(failing_recipients or ())
        self.delay = delay
        self.sent_messages: list[DeliveryResult] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def send(self, notification: Notification) -> DeliveryResult:
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
        finally:
            self.in_flight -= 1

        failed = (
            notification.recipient in self.failing_recipients
            or random.random() < self.fail_rate
        )
        if failed:
            result = DeliveryResult.for_notification(
                notification, error="Simulated email delivery failure"
            )
            logger.error(
                f"[EMAIL FAILED] To: {notification.recipient} | "
                f"Subject: {notification.subject} | Error: {result.error}"
            )
        else:
            result = DeliveryResult.for_notification(notification)
            logger.info(f"[EMAIL] To: {notification.recipient} | Subject: {notification.subject}")
            logger.debug(f"[EMAIL BODY] {notification.body}")

        self.sent_messages.append(result)
        return result

    def get_sent_count(self) -> int:
        """Get the number of send attempts (for testing)."""
        return len(self.sent_messages)

    def get_successful_sends(self) -> list[DeliveryResult]:
        """Get all successful sends."""
        return [m for m in self.sent_messages if m.success]

    def clear_history(self):
        """Clear sent message history (useful between tests)."""
        self.sent_messages.clear()

    def find_message_to(self, recipient: str) -> Optional[DeliveryResult]:
        """Find a message sent to a specific recipient."""
        for msg in self.sent_messages:
            if msg.recipient == recipient:
                return msg
        return None


class SMTPMailTransport(MailTransport):
    """
    SMTP mail transport.

    Opens one connection per email. No retry: a failed send is reported once.
    """

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        sender: str,
        use_ssl: bool = True,
        timeout: Optional[float] = None,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.sender = sender
        self.use_ssl = use_ssl
        self.timeout = timeout

    def build_message(self, notification: Notification) -> EmailMessage:
        """Convert a Notification into a MIME message."""
        message = EmailMessage()
        message["From"] = self.sender
        message["To"] = notification.recipient
        if notification.cc:
            message["Cc"] = notification.cc
        if notification.reply_to:
            message["Reply-To"] = notification.reply_to
        message["Subject"] = notification.subject
        message.set_content(notification.body, subtype=notification.subtype)
        return message

    async def send(self, notification: Notification) -> DeliveryResult:
        try:
            message = self.build_message(notification)
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError, ValueError) as exc:
            logger.error(f"[EMAIL FAILED] To: {notification.recipient} | Error: {exc}")
            return DeliveryResult.for_notification(notification, error=str(exc))

        logger.info(f"[EMAIL] To: {notification.recipient} | Subject: {notification.subject}")
        return DeliveryResult.for_notification(notification)

    def _connect(self) -> smtplib.SMTP:
        kwargs = {} if self.timeout is None else {"timeout": self.timeout}
        if self.use_ssl:
            return smtplib.SMTP_SSL(
                self.host, self.port, context=ssl.create_default_context(), **kwargs
            )
        return smtplib.SMTP(self.host, self.port, **kwargs)

    def _deliver(self, message: EmailMessage) -> None:
        with self._connect() as smtp:
            if not self.use_ssl:
                smtp.starttls(context=ssl.create_default_context())
            if self.username:
                smtp.login(self.username, self.password)
            smtp.send_message(message)


def build_mail_transport(settings: Settings) -> MailTransport:
    """Create the process-wide transport selected by settings.mail_backend."""
    if settings.mail_backend == "console":
        return ConsoleMailTransport()
    return SMTPMailTransport(
        host=settings.smtp_host,
        port=settings.smtp_port,
        username=settings.email_user,
        password=settings.email_pass,
        sender=settings.sender_address,
        use_ssl=settings.smtp_use_ssl,
        timeout=settings.smtp_timeout_seconds,
    )
