"""
Payment gateway operations: order creation and signature verification.

Verification is a pure function over the order id, payment id, signature and
the shared secret. Order creation forwards to the gateway's REST API through
one shared httpx client created at startup.

Design decisions:
- verify() compares with hmac.compare_digest; the outcome is the same as an
  exact string comparison
- Amounts are converted to minor units with Decimal arithmetic so 599.99
  becomes exactly 59999
- Gateway failures become UpstreamFailure and are not retried
"""

import hashlib
import hmac
import logging
import time
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, Optional

import httpx

from shared.errors import UpstreamFailure
from shared.models import OrderRequest

logger = logging.getLogger("relay.payments")

MINOR_UNITS_PER_MAJOR = 100


# =============================================================================
# Signature verification
# =============================================================================

def sign(order_id: str, payment_id: str, secret: str) -> str:
    """Hex HMAC-SHA256 of "order_id|payment_id" keyed with secret."""
    message = f"{order_id}|{payment_id}".encode("utf-8")
    return hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def verify(order_id: str, payment_id: str, signature: str, secret: str) -> bool:
    """True only when signature equals the HMAC the gateway would have produced."""
    expected = sign(order_id, payment_id, secret)
    return hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))


# =============================================================================
# Order creation
# =============================================================================

def to_minor_units(amount: Decimal) -> int:
    """Convert a major-unit amount (rupees) to the gateway's minor unit (paise)."""
    scaled = Decimal(amount) * MINOR_UNITS_PER_MAJOR
    return int(scaled.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def default_receipt(clock: Callable[[], float] = time.time) -> str:
    return f"receipt_{int(clock() * 1000)}"


class GatewayError(RuntimeError):
    """The gateway answered with an error or could not be reached."""


class PaymentGateway:
    """Interface for the payment gateway client."""

    async def create_order(self, options: dict[str, Any]) -> dict[str, Any]:
        raise NotImplementedError

    async def aclose(self) -> None:
        return None


class RazorpayGateway(PaymentGateway):
    """
    Razorpay Orders API client.

    Uses HTTP basic auth with the key id and secret. Timeouts are httpx's
    defaults.
    """

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        base_url: str = "https://api.razorpay.com/v1",
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.key_id = key_id
        self._client = client or httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            auth=(key_id, key_secret),
        )

    async def create_order(self, options: dict[str, Any]) -> dict[str, Any]:
        try:
            response = await self._client.post("/orders", json=options)
        except httpx.HTTPError as exc:
            raise GatewayError(f"Payment gateway unreachable: {exc}") from exc

        if response.is_error:
            raise GatewayError(_error_description(response))
        return response.json()

    async def aclose(self) -> None:
        await self._client.aclose()


def _error_description(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return f"Payment gateway returned HTTP {response.status_code}"
    error = data.get("error") if isinstance(data, dict) else None
    if isinstance(error, dict) and error.get("description"):
        return str(error["description"])
    return f"Payment gateway returned HTTP {response.status_code}"


def build_order_options(
    request: OrderRequest,
    default_currency: str,
    clock: Callable[[], float] = time.time,
) -> dict[str, Any]:
    """Gateway order options with currency, receipt and notes defaulted."""
    return {
        "amount": to_minor_units(request.amount),
        "currency": request.currency or default_currency,
        "receipt": request.receipt or default_receipt(clock),
        "notes": dict(request.notes),
    }


async def create_order(
    gateway: PaymentGateway,
    request: OrderRequest,
    default_currency: str,
    clock: Callable[[], float] = time.time,
) -> dict[str, Any]:
    """
    Create a gateway order.

    Raises:
        UpstreamFailure: If the gateway call fails for any reason
    """
    options = build_order_options(request, default_currency, clock)
    try:
        order = await gateway.create_order(options)
    except UpstreamFailure:
        raise
    except Exception as exc:
        logger.error(f"Order creation failed: {exc}")
        raise UpstreamFailure("Failed to create order", error=str(exc)) from exc

    logger.info(
        f"Order created: id={order.get('id')} amount={options['amount']} "
        f"currency={options['currency']}"
    )
    return order
