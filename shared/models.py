"""
Data records for the relay.

Every record lives only for the duration of one request; nothing is stored.

Design decisions:
- Using Pydantic for validation and serialization
- JSON keys are camelCase (the frontend's convention); attributes are snake_case
- Blank optional values are dropped before validation so field defaults apply.
  This is the one place display placeholders ("Not provided") are filled in,
  so composers and templates always see a fully populated record.
"""

from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


NOT_PROVIDED = "Not provided"
NOT_SPECIFIED = "Not specified"
DEFAULT_LANGUAGE = "English"


def is_blank(value: Any) -> bool:
    """True for None and for strings that are empty after trimming."""
    if value is None:
        return True
    return isinstance(value, str) and not value.strip()


class RelayModel(BaseModel):
    """Base for inbound records: camelCase aliases, blanks fall back to defaults."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
        frozen=True,
    )

    @model_validator(mode="before")
    @classmethod
    def _drop_blank_fields(cls, data: Any) -> Any:
        if isinstance(data, dict):
            return {
                key: value.strip() if isinstance(value, str) else value
                for key, value in data.items()
                if not is_blank(value)
            }
        return data


# =============================================================================
# Nested details
# =============================================================================

class BirthDetails(RelayModel):
    """Birth data used to prepare a reading."""
    date_of_birth: str = NOT_PROVIDED
    time_of_birth: str = NOT_PROVIDED
    place_of_birth: str = NOT_PROVIDED
    gender: str = NOT_SPECIFIED


class PaymentDetails(RelayModel):
    """
    Payment data echoed by the frontend.

    Display only: it is never re-verified against the gateway here.
    """
    status: Optional[str] = None
    amount: Optional[str] = None
    payment_id: Optional[str] = None
    order_id: Optional[str] = None

    @property
    def is_paid(self) -> bool:
        return self.status == "paid"


class SessionData(RelayModel):
    """Frontend engagement metrics sent with abandonment alerts."""
    time_on_page: Optional[str] = None
    has_user_interacted: bool = False
    completion_level: str = "0"


class PartnerDetails(RelayModel):
    """One half of a horoscope-matching request."""
    name: Optional[str] = None
    date_of_birth: str = NOT_PROVIDED
    time_of_birth: str = NOT_PROVIDED
    place_of_birth: str = NOT_PROVIDED
    gender: str = NOT_SPECIFIED

    @property
    def display_name(self) -> str:
        return self.name or NOT_PROVIDED


class MatchFormData(RelayModel):
    partner1: PartnerDetails = Field(default_factory=PartnerDetails)
    partner2: PartnerDetails = Field(default_factory=PartnerDetails)
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None


# =============================================================================
# Route requests
# =============================================================================

class ServiceRequest(RelayModel):
    """
    A customer's request for an astrology service.

    Used by the confirmation and pending-payment routes. name, email and
    phone are checked for presence before this model is built.
    """
    name: str
    email: str
    phone: str
    service: Optional[str] = None
    language: str = DEFAULT_LANGUAGE
    birth_details: BirthDetails = Field(default_factory=BirthDetails)
    payment_details: Optional[PaymentDetails] = None
    report_type: str = NOT_SPECIFIED
    additional_info: str = "No additional information provided by the customer."
    special_requests: str = "No specific questions were asked."

    @field_validator("report_type")
    @classmethod
    def capitalize_report_type(cls, v: str) -> str:
        return v[:1].upper() + v[1:]


class AbandonedPaymentRequest(ServiceRequest):
    """A paid-service lead that left the payment gateway without paying."""
    abandonment_reason: str = "User cancelled/closed payment gateway"
    session_data: SessionData = Field(default_factory=SessionData)


class MatchRequest(RelayModel):
    """A horoscope-matching submission (free or paid)."""
    form_data: MatchFormData
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None
    language: str = DEFAULT_LANGUAGE
    payment_details: Optional[PaymentDetails] = None

    @property
    def is_paid(self) -> bool:
        return self.payment_details is not None and self.payment_details.is_paid


class AbandonedMatchRequest(RelayModel):
    """A free matching lead that left before submitting."""
    form_data: MatchFormData
    abandonment_reason: str = "User navigated away without completion"
    session_data: SessionData = Field(default_factory=SessionData)


class ContactMessage(RelayModel):
    """A generic contact-form submission."""
    message: str
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    subject: Optional[str] = None
    domain: Optional[str] = None
    product_name: Optional[str] = None


class OrderRequest(RelayModel):
    """Order options forwarded to the payment gateway."""
    amount: Decimal = Field(..., gt=0)
    currency: Optional[str] = None
    receipt: Optional[str] = None
    notes: dict[str, Any] = Field(default_factory=dict)

    @field_validator("amount", mode="before")
    @classmethod
    def float_amount_via_str(cls, v: Any) -> Any:
        # Decimal(0.1) would carry binary noise into the minor-unit amount
        if isinstance(v, float):
            return str(v)
        return v


class PaymentVerification(RelayModel):
    """
    The gateway's payment callback, forwarded by the frontend.

    Values are kept exactly as supplied: the signature covers the raw ids.
    """
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str

    @model_validator(mode="before")
    @classmethod
    def _drop_blank_fields(cls, data: Any) -> Any:
        return data


# =============================================================================
# Outgoing
# =============================================================================

class Notification(BaseModel):
    """
    One outgoing email.

    Built fresh per send; recipient and subject must be non-empty.
    """
    model_config = ConfigDict(frozen=True)

    recipient: str
    subject: str
    body: str
    subtype: str = "html"
    cc: Optional[str] = None
    reply_to: Optional[str] = None

    @field_validator("recipient", "subject")
    @classmethod
    def must_not_be_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("must not be empty")
        return v

    @field_validator("subtype")
    @classmethod
    def known_subtype(cls, v: str) -> str:
        if v not in {"html", "plain"}:
            raise ValueError(f"unsupported subtype: {v}")
        return v
