"""
Shared infrastructure for the relay.

This package contains code used by the pipeline and the HTTP layer:
- Configuration (Settings)
- Error taxonomy (RelayError and subclasses)
- Request records and the Notification model
- Service catalog
- Email templates
- Mail transports (SMTP, console)
"""

from shared.config import Settings, get_settings
from shared.errors import RelayError
from shared.models import (
    ServiceRequest,
    AbandonedPaymentRequest,
    MatchRequest,
    AbandonedMatchRequest,
    ContactMessage,
    Notification,
)
from shared.catalog import ServiceCode, resolve
from shared.channels import MailTransport, ConsoleMailTransport, SMTPMailTransport, DeliveryResult

__all__ = [
    "Settings",
    "get_settings",
    "RelayError",
    "ServiceRequest",
    "AbandonedPaymentRequest",
    "MatchRequest",
    "AbandonedMatchRequest",
    "ContactMessage",
    "Notification",
    "ServiceCode",
    "resolve",
    "MailTransport",
    "ConsoleMailTransport",
    "SMTPMailTransport",
    "DeliveryResult",
]
