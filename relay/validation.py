"""
Request validation.

Each route names the fields it cannot work without. Presence is checked on
the raw JSON first (nested paths such as formData.partner1.name are checked
exactly like top-level ones), then the payload is parsed into its model,
which fills every display default.

Design decisions:
- Presence checks run before model parsing so the client gets the route's own
  message ("Name, email, and phone are required fields") rather than a
  generic schema error
- A field is missing when absent, null, or blank after trimming
- No side effects: validation never logs customer data or sends anything
"""

import logging
from typing import Any, Mapping, Optional, Sequence, TypeVar

import pydantic

from shared.errors import ValidationError
from shared.models import (
    AbandonedMatchRequest,
    AbandonedPaymentRequest,
    ContactMessage,
    MatchRequest,
    OrderRequest,
    PaymentVerification,
    RelayModel,
    ServiceRequest,
    is_blank,
)

logger = logging.getLogger("relay.validation")

ModelT = TypeVar("ModelT", bound=RelayModel)


CONTACT_FIELDS = ("name", "email", "phone")
CONTACT_FIELDS_MESSAGE = "Name, email, and phone are required fields"

PARTNER_FIELDS = tuple(
    f"formData.{partner}.{field}"
    for partner in ("partner1", "partner2")
    for field in ("name", "dateOfBirth", "timeOfBirth", "placeOfBirth")
)
PARTNER_FIELDS_MESSAGE = "All mandatory partner fields are required"

VERIFICATION_FIELDS = ("razorpay_order_id", "razorpay_payment_id", "razorpay_signature")


def lookup(payload: Mapping[str, Any], path: str) -> Any:
    """Follow a dotted path through nested objects; None if any step is missing."""
    current: Any = payload
    for part in path.split("."):
        if not isinstance(current, Mapping):
            return None
        current = current.get(part)
    return current


def first_missing(payload: Mapping[str, Any], paths: Sequence[str]) -> Optional[str]:
    """Return the first path whose value is missing, or None."""
    for path in paths:
        if is_blank(lookup(payload, path)):
            return path
    return None


def require_fields(payload: Mapping[str, Any], paths: Sequence[str], message: str) -> None:
    """
    Raise ValidationError naming the first missing field.

    Args:
        payload: Decoded JSON body
        paths: Dotted field paths, checked in order
        message: Client-facing message for this route
    """
    missing = first_missing(payload, paths)
    if missing is not None:
        logger.info(f"Rejected request: missing {missing}")
        raise ValidationError(message, field=missing)


def parse_model(model: type[ModelT], payload: Mapping[str, Any]) -> ModelT:
    """Parse payload into model, converting schema errors to ValidationError."""
    try:
        return model.model_validate(dict(payload))
    except pydantic.ValidationError as exc:
        first = exc.errors()[0]
        field = ".".join(str(part) for part in first["loc"])
        raise ValidationError(
            "Invalid request data",
            field=field or None,
            error=f"{field}: {first['msg']}" if field else first["msg"],
        ) from exc


# =============================================================================
# Per-route validators
# =============================================================================

def validate_contact_message(payload: Mapping[str, Any]) -> ContactMessage:
    require_fields(payload, ("message",), "Message is required")
    return parse_model(ContactMessage, payload)


def validate_order_request(payload: Mapping[str, Any]) -> OrderRequest:
    require_fields(payload, ("amount",), "Amount is required")
    return parse_model(OrderRequest, payload)


def validate_payment_verification(payload: Mapping[str, Any]) -> PaymentVerification:
    require_fields(
        payload,
        VERIFICATION_FIELDS,
        "Order id, payment id, and signature are required",
    )
    return parse_model(PaymentVerification, payload)


def validate_service_request(payload: Mapping[str, Any]) -> ServiceRequest:
    require_fields(payload, CONTACT_FIELDS, CONTACT_FIELDS_MESSAGE)
    return parse_model(ServiceRequest, payload)


def validate_abandoned_payment(payload: Mapping[str, Any]) -> AbandonedPaymentRequest:
    require_fields(payload, CONTACT_FIELDS, CONTACT_FIELDS_MESSAGE)
    return parse_model(AbandonedPaymentRequest, payload)


def validate_match_request(payload: Mapping[str, Any]) -> MatchRequest:
    require_fields(payload, PARTNER_FIELDS, PARTNER_FIELDS_MESSAGE)
    return parse_model(MatchRequest, payload)


def validate_abandoned_match(payload: Mapping[str, Any]) -> AbandonedMatchRequest:
    require_fields(payload, ("formData",), "Form data is required")
    return parse_model(AbandonedMatchRequest, payload)
