"""
Error taxonomy for the relay.

Every failure a route can report is a RelayError. The route boundary turns
it into the JSON envelope {success: false, message, error?} with the error's
HTTP status; nothing below the boundary builds responses itself.

Design decisions:
- One base class so a single FastAPI handler covers every domain failure
- Client errors (400) are never retried; upstream errors (500) are surfaced once
"""

from typing import Any, Optional


class RelayError(Exception):
    """Base class for failures that map to an error envelope."""

    http_status: int = 500
    code: str = "RELAY_ERROR"

    def __init__(self, message: str, error: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.error = error

    def to_response(self) -> dict[str, Any]:
        body: dict[str, Any] = {"success": False, "message": self.message}
        if self.error is not None:
            body["error"] = self.error
        return body


class ValidationError(RelayError):
    """A required field is absent, or a field cannot be used as given."""

    http_status = 400
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None, error: Optional[str] = None):
        super().__init__(message, error=error)
        self.field = field


class MalformedInput(RelayError):
    """The request body is not a JSON object."""

    http_status = 400
    code = "MALFORMED_INPUT"


class SignatureMismatch(RelayError):
    """The payment signature does not match the recomputed HMAC."""

    http_status = 400
    code = "SIGNATURE_MISMATCH"


class UpstreamFailure(RelayError):
    """The payment gateway or mail transport rejected a call."""

    http_status = 500
    code = "UPSTREAM_FAILURE"


class CompositionError(RelayError):
    """A notification would have been sent without a recipient or subject."""

    http_status = 500
    code = "COMPOSITION_ERROR"


class ConfigurationError(RelayError):
    """A value the route needs was not configured at startup."""

    http_status = 500
    code = "CONFIGURATION_ERROR"
