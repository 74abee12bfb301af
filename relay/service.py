"""
The relay pipeline, one method per route.

Each method takes the decoded JSON body and runs the same steps:
validate -> (verify) -> resolve the service -> compose -> dispatch.
Every failure leaves as a RelayError; the HTTP layer only maps it to a
response. The service holds no per-request state, so one instance serves
every request.
"""

import logging
import time
from datetime import datetime
from typing import Any, Callable, Mapping, Optional

from relay.composer import NotificationComposer
from relay.dispatch import DispatchCoordinator
from relay.models import (
    AstroEmailResponse,
    CriticalAlertResponse,
    EmailsSent,
    LeadResponse,
    MatchLeadResponse,
    MatchResponse,
    OrderResponse,
    RelayResponse,
    VerificationResponse,
)
from relay.payments import PaymentGateway, create_order, verify
from relay.validation import (
    validate_abandoned_match,
    validate_abandoned_payment,
    validate_contact_message,
    validate_match_request,
    validate_order_request,
    validate_payment_verification,
    validate_service_request,
)
from shared.catalog import BIRTH_CHART, GENERAL_CONSULTATION, resolve
from shared.channels import MailTransport
from shared.config import Settings
from shared.errors import ConfigurationError, SignatureMismatch

logger = logging.getLogger("relay.service")

Payload = Mapping[str, Any]


class RelayService:
    """
    Request pipeline shared by all routes.

    Example:
        service = RelayService(settings, transport, gateway)
        response = await service.send_astro_email({"name": "A", ...})
    """

    def __init__(
        self,
        settings: Settings,
        transport: MailTransport,
        gateway: PaymentGateway,
        clock: Optional[Callable[[], datetime]] = None,
        receipt_clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            settings: Process configuration
            transport: Shared mail transport
            gateway: Shared payment gateway client
            clock: Current-time source for composed emails and request ids
            receipt_clock: Epoch-seconds source for default order receipts
        """
        self.settings = settings
        self.transport = transport
        self.gateway = gateway
        self.composer = NotificationComposer(settings, clock=clock)
        self.dispatcher = DispatchCoordinator(transport)
        self.receipt_clock = receipt_clock

    # =========================================================================
    # Payments
    # =========================================================================

    async def create_order(self, payload: Payload) -> OrderResponse:
        request = validate_order_request(payload)
        order = await create_order(
            self.gateway,
            request,
            default_currency=self.settings.default_currency,
            clock=self.receipt_clock,
        )
        return OrderResponse(
            message="Order created successfully",
            order=order,
            key=self.settings.razorpay_key_id,
        )

    def verify_payment(self, payload: Payload) -> VerificationResponse:
        verification = validate_payment_verification(payload)
        secret = self.settings.razorpay_key_secret
        if not secret:
            raise ConfigurationError(
                "Internal server error during verification",
                error="Payment gateway secret is not configured",
            )

        if not verify(
            verification.razorpay_order_id,
            verification.razorpay_payment_id,
            verification.razorpay_signature,
            secret,
        ):
            logger.warning(
                f"Signature mismatch for order {verification.razorpay_order_id}"
            )
            raise SignatureMismatch("Payment verification failed")

        logger.info(f"Payment verified: order={verification.razorpay_order_id}")
        return VerificationResponse(
            message="Payment verification successful",
            order_id=verification.razorpay_order_id,
            payment_id=verification.razorpay_payment_id,
        )

    # =========================================================================
    # Notifications
    # =========================================================================

    async def send_contact_email(self, payload: Payload) -> RelayResponse:
        message = validate_contact_message(payload)
        notifications = self.composer.compose_contact(message)
        await self.dispatcher.dispatch(notifications, failure_message="Email sending failed!")
        return RelayResponse(message="Email sent successfully!")

    async def send_astro_email(self, payload: Payload) -> AstroEmailResponse:
        request = validate_service_request(payload)
        service = resolve(request.service, default=GENERAL_CONSULTATION)
        request_id = self.composer.reference_for(request.payment_details)

        notifications = self.composer.compose_astro_confirmation(request, service, request_id)
        await self.dispatcher.dispatch(
            notifications,
            failure_message="Failed to process astrology service request!",
        )

        logger.info(f"Service confirmation sent for request {request_id}")
        return AstroEmailResponse(
            message="Astrology service request submitted successfully!",
            service_type=service.display_name,
            request_id=request_id,
            emails_sent=EmailsSent(
                admin_email=self.settings.admin_email,
                customer_email=request.email,
            ),
        )

    async def send_pending_payment_email(self, payload: Payload) -> CriticalAlertResponse:
        request = validate_service_request(payload)
        service = resolve(request.service, default=BIRTH_CHART)
        request_id = self.composer.reference_for(request.payment_details)

        notifications = self.composer.compose_pending_payment(request, service, request_id)
        await self.dispatcher.dispatch(
            notifications,
            failure_message="Failed to send critical failure notification!",
        )

        logger.info(f"Critical processing failure alert sent for request {request_id}")
        return CriticalAlertResponse(
            message="Critical processing failure notification sent successfully!",
            request_id=request_id,
        )

    async def send_abandoned_payment_email(self, payload: Payload) -> LeadResponse:
        request = validate_abandoned_payment(payload)
        service = resolve(request.service, default=GENERAL_CONSULTATION)
        lead_id = self.composer.new_request_id()

        notifications = self.composer.compose_abandoned_payment(request, service, lead_id)
        await self.dispatcher.dispatch(
            notifications,
            failure_message="Failed to send abandoned payment notification!",
        )

        logger.info(f"Abandoned payment alert sent for lead {lead_id}")
        return LeadResponse(
            message="Abandoned payment notification sent successfully!",
            lead_id=lead_id,
            customer_name=request.name,
            customer_email=request.email,
        )

    async def send_abandoned_match_email(self, payload: Payload) -> MatchLeadResponse:
        request = validate_abandoned_match(payload)
        lead_id = self.composer.new_request_id()

        notifications = self.composer.compose_abandoned_match(request, lead_id)
        await self.dispatcher.dispatch(
            notifications,
            failure_message="Failed to send abandoned match notification!",
        )

        form = request.form_data
        logger.info(f"Abandoned match alert sent for lead {lead_id}")
        return MatchLeadResponse(
            message="Abandoned match notification sent successfully!",
            lead_id=lead_id,
            partner1=form.partner1.name or "Unknown",
            partner2=form.partner2.name or "Unknown",
        )

    async def send_match_horoscope(self, payload: Payload) -> MatchResponse:
        request = validate_match_request(payload)
        request_id = self.composer.reference_for(request.payment_details)
        paid = request.is_paid

        notifications = self.composer.compose_match_request(request, request_id)
        await self.dispatcher.dispatch(
            notifications,
            failure_message="Failed to process match-horoscope request",
        )

        emails_sent = None
        if paid:
            emails_sent = EmailsSent(
                admin_email=self.settings.admin_email,
                customer_email=request.customer_email,
                cc_emails=[self.settings.admin_email],
            )

        logger.info(f"Match request {request_id} processed (paid={paid})")
        return MatchResponse(
            message=(
                "Paid horoscope matching request processed successfully!"
                if paid
                else "Match-horoscope request received successfully"
            ),
            service_type="Paid Horoscope Matching" if paid else "Free Horoscope Matching",
            request_id=request_id,
            partner1=request.form_data.partner1.display_name,
            partner2=request.form_data.partner2.display_name,
            contact_provided=bool(request.customer_email or request.customer_phone),
            emails_sent=emails_sent,
        )
