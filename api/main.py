"""
FastAPI application for the astrology-services relay.

This application provides:
1. Payment endpoints (/create-order, /verify-payment)
2. Notification endpoints, one per frontend event (/send-email,
   /send-astro-email, /pending-payment-email, /abandoned-payment-email,
   /abandoned-match-email, /send-match-horoscope)
3. A health check (/health)

Run with:
    uv run uvicorn api.main:app --reload

Then visit http://localhost:8000/docs for interactive API documentation.

Design decisions:
- create_app() builds the mail transport and payment gateway once and shares
  them across requests; tests pass doubles instead
- Bodies are decoded by one dependency so malformed JSON is rejected before
  any route logic runs
- Routes stay thin: each one hands the body to RelayService
"""

import json
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Callable, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from api.error_handlers import register_error_handlers
from relay.models import (
    AstroEmailResponse,
    CriticalAlertResponse,
    LeadResponse,
    MatchLeadResponse,
    MatchResponse,
    OrderResponse,
    RelayResponse,
    VerificationResponse,
)
from relay.payments import PaymentGateway, RazorpayGateway
from relay.service import RelayService
from shared.channels import MailTransport, build_mail_transport
from shared.config import Settings, get_settings
from shared.errors import MalformedInput

logger = logging.getLogger("api")

LOG_FORMAT = "%(asctime)s | %(name)-24s | %(levelname)-5s | %(message)s"


def configure_logging(level: str) -> None:
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT, datefmt="%H:%M:%S")


# =============================================================================
# Dependencies
# =============================================================================

async def json_body(request: Request) -> dict[str, Any]:
    """Decode the request body as a JSON object; an empty body is {}."""
    raw = await request.body()
    if not raw.strip():
        return {}
    try:
        payload = json.loads(raw)
    except ValueError as exc:
        raise MalformedInput("Invalid JSON format in request body", error=str(exc)) from exc
    if not isinstance(payload, dict):
        raise MalformedInput(
            "Invalid JSON format in request body",
            error="Request body must be a JSON object",
        )
    return payload


def get_service(request: Request) -> RelayService:
    return request.app.state.service


# =============================================================================
# Application factory
# =============================================================================

def create_app(
    settings: Optional[Settings] = None,
    mail_transport: Optional[MailTransport] = None,
    payment_gateway: Optional[PaymentGateway] = None,
    clock: Optional[Callable[[], datetime]] = None,
) -> FastAPI:
    """
    Build the relay application.

    Args:
        settings: Configuration; read from the environment when omitted
        mail_transport: Shared transport; built from settings when omitted
        payment_gateway: Shared gateway client; a Razorpay client when omitted
        clock: Current-time source for composed emails and request ids
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    transport = mail_transport or build_mail_transport(settings)
    gateway = payment_gateway or RazorpayGateway(
        key_id=settings.razorpay_key_id,
        key_secret=settings.razorpay_key_secret,
        base_url=settings.razorpay_api_url,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application startup and shutdown."""
        logger.info(f"Starting {settings.brand_name} relay ({settings.mail_backend} mail)")
        if not settings.razorpay_key_secret:
            logger.warning("RAZORPAY_KEY_SECRET is not set; /verify-payment will fail")
        yield
        await gateway.aclose()
        logger.info("Shutting down")

    app = FastAPI(
        title="Astro Relay",
        description="Relays astrology-service requests from the frontend to email and the payment gateway.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.service = RelayService(settings, transport, gateway, clock=clock)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info(f"{request.method} {request.url.path}")
        return await call_next(request)

    register_error_handlers(app)
    _register_routes(app)
    return app


def _register_routes(app: FastAPI) -> None:

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get("/health", tags=["Health"])
    def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "astro-relay"}

    # =========================================================================
    # Payments
    # =========================================================================

    @app.post("/create-order", response_model=OrderResponse, tags=["Payments"])
    async def create_order(
        payload: dict[str, Any] = Depends(json_body),
        service: RelayService = Depends(get_service),
    ):
        """Create a gateway order for the checkout widget."""
        return await service.create_order(payload)

    @app.post("/verify-payment", response_model=VerificationResponse, tags=["Payments"])
    async def verify_payment(
        payload: dict[str, Any] = Depends(json_body),
        service: RelayService = Depends(get_service),
    ):
        """Check the signature the checkout widget returned."""
        return service.verify_payment(payload)

    # =========================================================================
    # Notifications
    # =========================================================================

    @app.post("/send-email", response_model=RelayResponse, tags=["Notifications"])
    async def send_email(
        payload: dict[str, Any] = Depends(json_body),
        service: RelayService = Depends(get_service),
    ):
        """Relay a contact-form message to the support inbox."""
        return await service.send_contact_email(payload)

    @app.post(
        "/send-astro-email",
        response_model=AstroEmailResponse,
        response_model_exclude_none=True,
        tags=["Notifications"],
    )
    async def send_astro_email(
        payload: dict[str, Any] = Depends(json_body),
        service: RelayService = Depends(get_service),
    ):
        """
        Confirm a service request.

        Emails the admin and the customer (with the admin in CC).
        """
        return await service.send_astro_email(payload)

    @app.post("/pending-payment-email", response_model=CriticalAlertResponse, tags=["Notifications"])
    async def pending_payment_email(
        payload: dict[str, Any] = Depends(json_body),
        service: RelayService = Depends(get_service),
    ):
        """Alert the admin that a payment succeeded but processing failed."""
        return await service.send_pending_payment_email(payload)

    @app.post("/abandoned-payment-email", response_model=LeadResponse, tags=["Leads"])
    async def abandoned_payment_email(
        payload: dict[str, Any] = Depends(json_body),
        service: RelayService = Depends(get_service),
    ):
        """Alert the admin that a customer left the payment gateway."""
        return await service.send_abandoned_payment_email(payload)

    @app.post("/abandoned-match-email", response_model=MatchLeadResponse, tags=["Leads"])
    async def abandoned_match_email(
        payload: dict[str, Any] = Depends(json_body),
        service: RelayService = Depends(get_service),
    ):
        """Alert the admin that a compatibility form was left unfinished."""
        return await service.send_abandoned_match_email(payload)

    @app.post(
        "/send-match-horoscope",
        response_model=MatchResponse,
        response_model_exclude_none=True,
        tags=["Notifications"],
    )
    async def send_match_horoscope(
        payload: dict[str, Any] = Depends(json_body),
        service: RelayService = Depends(get_service),
    ):
        """
        Submit a horoscope-matching request.

        Paid only when paymentDetails.status is "paid".
        """
        return await service.send_match_horoscope(payload)



_app: Optional[FastAPI] = None


def __getattr__(name: str) -> Any:
    # `api.main:app` is built on first access, so importing create_app
    # alone never reads the environment or opens a gateway client.
    global _app
    if name == "app":
        if _app is None:
            _app = create_app()
        return _app
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
