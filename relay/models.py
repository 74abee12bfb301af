"""
Response models for the relay routes.

These Pydantic models define the success envelopes returned to the frontend.
Errors use the envelope built by RelayError.to_response().

Design decisions:
- camelCase keys on the wire, snake_case attributes in Python
- Every envelope carries success=True and a human-readable message
- Only derived identifiers are echoed back, never the submitted details
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class RelayResponse(BaseModel):
    """Base success envelope."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: bool = True
    message: str


class OrderResponse(RelayResponse):
    """A created gateway order plus the public key the checkout widget needs."""
    order: dict[str, Any]
    key: str


class VerificationResponse(RelayResponse):
    order_id: str
    payment_id: str


class EmailsSent(BaseModel):
    """Addresses a request's notifications went to."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    admin_email: str
    customer_email: Optional[str] = None
    cc_emails: Optional[list[str]] = None


class AstroEmailResponse(RelayResponse):
    service_type: str
    request_id: str
    emails_sent: EmailsSent


class CriticalAlertResponse(RelayResponse):
    request_id: str


class LeadResponse(RelayResponse):
    """Acknowledges an abandoned-payment alert."""
    lead_id: str
    customer_name: str
    customer_email: str
    follow_up_required: bool = True


class MatchLeadResponse(RelayResponse):
    """Acknowledges an abandoned-match alert."""
    lead_id: str
    partner1: str
    partner2: str
    follow_up_required: bool = True


class MatchResponse(RelayResponse):
    service_type: str
    request_id: str
    partner1: str
    partner2: str
    contact_provided: bool = Field(..., description="Customer left an email or phone")
    emails_sent: Optional[EmailsSent] = Field(
        default=None,
        description="Only reported for paid requests",
    )
