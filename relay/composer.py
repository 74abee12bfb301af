"""
Notification composer.

Turns a validated request into the emails it should produce:
- admin-only routes (critical failure, abandoned payment, abandoned match,
  contact form): one email to the admin address, reply-to the customer
- dual routes (service confirmation, match submission): one email to the
  admin and, when the customer left an address, one to the customer with the
  admin in CC

Template choice depends only on the route and on the payment details; every
other field only fills placeholders. Output is deterministic for a given
input and clock reading.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Optional
from zoneinfo import ZoneInfo

import pydantic

from shared.catalog import ResolvedService
from shared.config import Settings
from shared.errors import CompositionError
from shared.models import (
    NOT_PROVIDED,
    AbandonedMatchRequest,
    AbandonedPaymentRequest,
    ContactMessage,
    MatchRequest,
    Notification,
    PartnerDetails,
    PaymentDetails,
    ServiceRequest,
)
from shared.templates import TemplateKey, render_notification

logger = logging.getLogger("relay.composer")


class Route(str, Enum):
    """Notification-producing routes."""
    CONTACT = "contact"
    ASTRO_CONFIRMATION = "astro_confirmation"
    PENDING_PAYMENT = "pending_payment"
    ABANDONED_PAYMENT = "abandoned_payment"
    ABANDONED_MATCH = "abandoned_match"
    MATCH_REQUEST = "match_request"

    @property
    def is_dual(self) -> bool:
        return self in (Route.ASTRO_CONFIRMATION, Route.MATCH_REQUEST)


@dataclass(frozen=True)
class TemplateSelection:
    admin: TemplateKey
    customer: Optional[TemplateKey] = None


def is_paid_service(route: Route, payment_details: Optional[PaymentDetails]) -> bool:
    """
    Whether the paid template variant applies.

    Match submissions are paid only when the gateway status is "paid"; the
    confirmation route is paid whenever payment details are present.
    """
    if payment_details is None:
        return False
    if route is Route.MATCH_REQUEST:
        return payment_details.is_paid
    return True


def select_templates(
    route: Route, payment_details: Optional[PaymentDetails] = None
) -> TemplateSelection:
    """Pick the admin (and customer) template for a route."""
    paid = is_paid_service(route, payment_details)
    if route is Route.ASTRO_CONFIRMATION:
        if paid:
            return TemplateSelection(TemplateKey.ASTRO_ADMIN_PAID, TemplateKey.ASTRO_CUSTOMER_PAID)
        return TemplateSelection(TemplateKey.ASTRO_ADMIN_UNPAID, TemplateKey.ASTRO_CUSTOMER_UNPAID)
    if route is Route.MATCH_REQUEST:
        if paid:
            return TemplateSelection(TemplateKey.MATCH_ADMIN_PAID, TemplateKey.MATCH_CUSTOMER_PAID)
        return TemplateSelection(TemplateKey.MATCH_ADMIN_FREE, TemplateKey.MATCH_CUSTOMER_FREE)
    admin_only = {
        Route.CONTACT: TemplateKey.CONTACT_FORM,
        Route.PENDING_PAYMENT: TemplateKey.PENDING_PAYMENT_ADMIN,
        Route.ABANDONED_PAYMENT: TemplateKey.ABANDONED_PAYMENT_ADMIN,
        Route.ABANDONED_MATCH: TemplateKey.ABANDONED_MATCH_ADMIN,
    }
    return TemplateSelection(admin_only[route])


def format_timestamp(now: datetime) -> str:
    """Render a timestamp the way Indian-locale readers expect, e.g. 18/10/2026, 03:07:00 pm."""
    return now.strftime("%d/%m/%Y, %I:%M:%S ") + now.strftime("%p").lower()


def generate_request_id(now: datetime) -> str:
    """SAV followed by the last 8 digits of the epoch-millisecond clock."""
    millis = str(int(now.timestamp() * 1000))
    return f"SAV{millis[-8:]}"


class NotificationComposer:
    """
    Builds Notification objects from validated requests.

    Example:
        composer = NotificationComposer(settings)
        request_id = composer.reference_for(request.payment_details)
        notifications = composer.compose_astro_confirmation(request, service, request_id)
    """

    def __init__(self, settings: Settings, clock: Optional[Callable[[], datetime]] = None):
        """
        Args:
            settings: Admin address, brand, support phones and defaults
            clock: Returns the current time; defaults to now in settings.timezone
        """
        self.settings = settings
        zone = ZoneInfo(settings.timezone)
        self.clock = clock or (lambda: datetime.now(zone))

    # -------------------------------------------------------------------------
    # Identifiers
    # -------------------------------------------------------------------------

    def new_request_id(self) -> str:
        return generate_request_id(self.clock())

    def reference_for(self, payment_details: Optional[PaymentDetails]) -> str:
        """The gateway order id when known, otherwise a fresh request id."""
        if payment_details is not None and payment_details.order_id:
            return payment_details.order_id
        return self.new_request_id()

    # -------------------------------------------------------------------------
    # Routes
    # -------------------------------------------------------------------------

    def compose_contact(self, message: ContactMessage) -> list[Notification]:
        source = message.domain or message.product_name or self.settings.brand_name
        if message.subject and source in message.subject:
            subject = message.subject
        else:
            subject = f"{message.subject or 'Contact Form Submission'} - {source}"

        context = {
            "subject": subject,
            "source": source,
            "name": message.name or NOT_PROVIDED,
            "email": message.email or NOT_PROVIDED,
            "phone": message.phone or NOT_PROVIDED,
            "message": message.message,
        }
        selection = select_templates(Route.CONTACT)
        return [
            self._build(
                selection.admin,
                context,
                recipient=self.settings.admin_email,
                cc=self.settings.contact_cc_email or None,
                reply_to=message.email,
            )
        ]

    def compose_astro_confirmation(
        self, request: ServiceRequest, service: ResolvedService, request_id: str
    ) -> list[Notification]:
        selection = select_templates(Route.ASTRO_CONFIRMATION, request.payment_details)
        context = self._service_context(request, service, request_id)
        return self._admin_and_customer(selection, context, request.email)

    def compose_pending_payment(
        self, request: ServiceRequest, service: ResolvedService, request_id: str
    ) -> list[Notification]:
        selection = select_templates(Route.PENDING_PAYMENT, request.payment_details)
        context = self._service_context(request, service, request_id)
        return [
            self._build(
                selection.admin, context,
                recipient=self.settings.admin_email, reply_to=request.email,
            )
        ]

    def compose_abandoned_payment(
        self, request: AbandonedPaymentRequest, service: ResolvedService, request_id: str
    ) -> list[Notification]:
        selection = select_templates(Route.ABANDONED_PAYMENT, request.payment_details)
        context = self._service_context(request, service, request_id)
        context.update(
            abandonment_reason=request.abandonment_reason,
            time_on_page=request.session_data.time_on_page or "Data not available",
        )
        return [
            self._build(
                selection.admin, context,
                recipient=self.settings.admin_email, reply_to=request.email,
            )
        ]

    def compose_abandoned_match(
        self, request: AbandonedMatchRequest, request_id: str
    ) -> list[Notification]:
        form = request.form_data
        session = request.session_data
        selection = select_templates(Route.ABANDONED_MATCH)

        context = self._base_context(request_id)
        context.update(self._partner_context("partner1", form.partner1))
        context.update(self._partner_context("partner2", form.partner2))
        context.update(
            partner1_subject=form.partner1.name or "Partner 1",
            partner2_subject=form.partner2.name or "Partner 2",
            customer_email=form.customer_email or NOT_PROVIDED,
            customer_phone=form.customer_phone or NOT_PROVIDED,
            abandonment_reason=request.abandonment_reason,
            time_on_page=session.time_on_page or "Not tracked",
            engagement="Active Engagement" if session.has_user_interacted else "Limited Interaction",
            completion_level=session.completion_level,
        )
        return [
            self._build(
                selection.admin, context,
                recipient=self.settings.admin_email, reply_to=form.customer_email,
            )
        ]

    def compose_match_request(self, request: MatchRequest, request_id: str) -> list[Notification]:
        selection = select_templates(Route.MATCH_REQUEST, request.payment_details)

        context = self._base_context(request_id)
        context.update(self._payment_context(request.payment_details))
        context.update(self._partner_context("partner1", request.form_data.partner1))
        context.update(self._partner_context("partner2", request.form_data.partner2))
        context.update(
            customer_email=request.customer_email or NOT_PROVIDED,
            customer_phone=request.customer_phone or NOT_PROVIDED,
            language=request.language,
        )
        return self._admin_and_customer(selection, context, request.customer_email)

    # -------------------------------------------------------------------------
    # Context helpers
    # -------------------------------------------------------------------------

    def _base_context(self, request_id: str) -> dict[str, Any]:
        return {
            "brand": self.settings.brand_name,
            "timestamp": format_timestamp(self.clock()),
            "request_id": request_id,
            "admin_email": self.settings.admin_email,
            "support_phones": " / ".join(self.settings.support_phones),
        }

    def _payment_context(self, payment: Optional[PaymentDetails]) -> dict[str, Any]:
        payment = payment or PaymentDetails()
        return {
            "payment_status": (payment.status or "COMPLETED").upper(),
            "amount": payment.amount or self.settings.default_amount,
            "payment_id": payment.payment_id or "N/A",
            "order_id": payment.order_id or "N/A",
        }

    def _service_context(
        self, request: ServiceRequest, service: ResolvedService, request_id: str
    ) -> dict[str, Any]:
        birth = request.birth_details
        context = self._base_context(request_id)
        context.update(self._payment_context(request.payment_details))
        context.update(
            name=request.name,
            email=request.email,
            phone=request.phone,
            language=request.language,
            service_name=service.display_name,
            report_type=request.report_type,
            date_of_birth=birth.date_of_birth,
            time_of_birth=birth.time_of_birth,
            place_of_birth=birth.place_of_birth,
            gender=birth.gender,
            additional_info=request.additional_info,
            special_requests=request.special_requests,
        )
        return context

    @staticmethod
    def _partner_context(prefix: str, partner: PartnerDetails) -> dict[str, str]:
        return {
            f"{prefix}_name": partner.display_name,
            f"{prefix}_gender": partner.gender,
            f"{prefix}_date_of_birth": partner.date_of_birth,
            f"{prefix}_time_of_birth": partner.time_of_birth,
            f"{prefix}_place_of_birth": partner.place_of_birth,
        }

    # -------------------------------------------------------------------------
    # Building
    # -------------------------------------------------------------------------

    def _admin_and_customer(
        self,
        selection: TemplateSelection,
        context: dict[str, Any],
        customer_email: Optional[str],
    ) -> list[Notification]:
        notifications = [
            self._build(
                selection.admin, context,
                recipient=self.settings.admin_email, reply_to=customer_email,
            )
        ]
        if customer_email and selection.customer is not None:
            notifications.append(
                self._build(
                    selection.customer, context,
                    recipient=customer_email, cc=self.settings.admin_email,
                )
            )
        return notifications

    def _build(
        self,
        key: TemplateKey,
        context: dict[str, Any],
        recipient: str,
        cc: Optional[str] = None,
        reply_to: Optional[str] = None,
    ) -> Notification:
        subject, body, subtype = render_notification(key, **context)
        try:
            return Notification(
                recipient=recipient or "",
                subject=subject,
                body=body,
                subtype=subtype,
                cc=cc,
                reply_to=reply_to,
            )
        except pydantic.ValidationError as exc:
            logger.error(f"Refusing to compose {key.value}: {exc.errors()[0]['msg']}")
            raise CompositionError(
                "Notification could not be composed",
                error=f"{key.value}: recipient and subject must be non-empty",
            ) from exc
