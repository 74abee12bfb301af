"""
Shared pytest fixtures for the relay tests.

These fixtures build the relay with test doubles: settings that never read
the environment, a recording mail transport, a fake payment gateway, and a
fixed clock.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Optional

import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from relay.composer import NotificationComposer
from relay.payments import PaymentGateway
from relay.service import RelayService
from shared.channels import ConsoleMailTransport
from shared.config import Settings

IST = timezone(timedelta(hours=5, minutes=30))
FIXED_NOW = datetime(2026, 10, 18, 15, 7, 0, tzinfo=IST)

ADMIN_EMAIL = "admin@example.com"
CONTACT_CC_EMAIL = "care@example.com"
GATEWAY_SECRET = "test_secret"
GATEWAY_KEY_ID = "rzp_test_key"


class FakePaymentGateway(PaymentGateway):
    """Records order options instead of calling the gateway."""

    def __init__(self):
        self.orders: list[dict[str, Any]] = []
        self.fail_with: Optional[Exception] = None
        self.closed = False

    async def create_order(self, options: dict[str, Any]) -> dict[str, Any]:
        if self.fail_with is not None:
            raise self.fail_with
        self.orders.append(options)
        return {"id": f"order_test{len(self.orders)}", "entity": "order", "status": "created", **options}

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def settings() -> Settings:
    """Settings with test addresses and a known gateway secret."""
    return Settings(
        _env_file=None,
        razorpay_key_id=GATEWAY_KEY_ID,
        razorpay_key_secret=GATEWAY_SECRET,
        email_user="relay@example.com",
        mail_backend="console",
        admin_email=ADMIN_EMAIL,
        contact_cc_email=CONTACT_CC_EMAIL,
        support_phones=["+91 90000 00001", "+91 90000 00002"],
        brand_name="SriAstroVeda",
    )


@pytest.fixture
def clock():
    return lambda: FIXED_NOW


@pytest.fixture
def transport() -> ConsoleMailTransport:
    """Fresh recording mail transport for each test."""
    return ConsoleMailTransport(fail_rate=0.0)


@pytest.fixture
def gateway() -> FakePaymentGateway:
    return FakePaymentGateway()


@pytest.fixture
def composer(settings, clock) -> NotificationComposer:
    return NotificationComposer(settings, clock=clock)


@pytest.fixture
def service(settings, transport, gateway, clock) -> RelayService:
    return RelayService(settings, transport, gateway, clock=clock, receipt_clock=lambda: 1700000000.5)


@pytest.fixture
def client(settings, transport, gateway, clock):
    """TestClient bound to an app built with the test doubles."""
    app = create_app(
        settings=settings,
        mail_transport=transport,
        payment_gateway=gateway,
        clock=clock,
    )
    with TestClient(app) as test_client:
        yield test_client


# =============================================================================
# Payload Fixtures
# =============================================================================

@pytest.fixture
def astro_payload() -> dict[str, Any]:
    """A complete paid service request as the frontend sends it."""
    return {
        "name": "Asha Rao",
        "email": "asha@example.com",
        "phone": "9876543210",
        "service": "numerology",
        "language": "Telugu",
        "reportType": "detailed",
        "birthDetails": {
            "dateOfBirth": "1990-04-12",
            "timeOfBirth": "06:45",
            "placeOfBirth": "Hyderabad",
            "gender": "female",
        },
        "paymentDetails": {
            "status": "paid",
            "amount": 599,
            "paymentId": "pay_123",
            "orderId": "order_123",
        },
    }


@pytest.fixture
def match_payload() -> dict[str, Any]:
    """A complete free horoscope-matching submission."""
    return {
        "formData": {
            "partner1": {
                "name": "Ravi",
                "gender": "male",
                "dateOfBirth": "1992-01-01",
                "timeOfBirth": "10:00",
                "placeOfBirth": "Chennai",
            },
            "partner2": {
                "name": "Meera",
                "gender": "female",
                "dateOfBirth": "1994-02-02",
                "timeOfBirth": "11:30",
                "placeOfBirth": "Pune",
            },
        },
        "customerEmail": "ravi@example.com",
        "customerPhone": "9000000000",
    }
