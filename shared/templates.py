"""
Email templates.

Templates are plain data: a subject line and a body with {variable}
placeholders, filled with str.format. HTML bodies are rendered with every
value passed through html.escape, so customer-supplied text can never inject
markup into the email.

Design decisions:
- One template per (route, audience, paid/free) combination; the composer
  picks the key, the template never branches on its own
- Layout helpers build the HTML once at import time
- Subjects and plain-text bodies are not escaped (they are not HTML)
- Line breaks in a rendered subject collapse to one space, since a mail
  header cannot carry them
"""

import re
from dataclasses import dataclass
from enum import Enum
from html import escape
from typing import Any, Optional

_LINE_BREAKS = re.compile(r"[\r\n]+")


class TemplateKey(str, Enum):
    """Every email the relay knows how to send."""
    CONTACT_FORM = "contact_form"

    ASTRO_ADMIN_PAID = "astro_admin_paid"
    ASTRO_ADMIN_UNPAID = "astro_admin_unpaid"
    ASTRO_CUSTOMER_PAID = "astro_customer_paid"
    ASTRO_CUSTOMER_UNPAID = "astro_customer_unpaid"

    PENDING_PAYMENT_ADMIN = "pending_payment_admin"
    ABANDONED_PAYMENT_ADMIN = "abandoned_payment_admin"
    ABANDONED_MATCH_ADMIN = "abandoned_match_admin"

    MATCH_ADMIN_PAID = "match_admin_paid"
    MATCH_ADMIN_FREE = "match_admin_free"
    MATCH_CUSTOMER_PAID = "match_customer_paid"
    MATCH_CUSTOMER_FREE = "match_customer_free"


@dataclass(frozen=True)
class EmailTemplate:
    """
    A subject/body pair with {variable} placeholders.

    subtype is "html" or "plain" and decides whether values are escaped.
    """
    key: TemplateKey
    subject: str
    body: str
    subtype: str = "html"

    def render(self, **context: Any) -> tuple[str, str]:
        """
        Render the template with provided variables.

        Returns:
            Tuple of (subject, body)

        Raises:
            KeyError: If a placeholder has no value in context
        """
        subject = _LINE_BREAKS.sub(" ", self.subject.format(**context))
        if self.subtype == "html":
            body = self.body.format(**{k: escape(str(v)) for k, v in context.items()})
        else:
            body = self.body.format(**context)
        return subject, body


# =============================================================================
# Layout helpers
# =============================================================================

_FONT = "'Segoe UI', Tahoma, Geneva, Verdana, sans-serif"


def _rows(rows: list[tuple[str, str]]) -> str:
    return "".join(
        '<tr>'
        '<td style="padding: 10px 0; font-weight: 600; color: #37474f; width: 180px; '
        f'border-bottom: 1px solid #e0e0e0;">{label}</td>'
        '<td style="padding: 10px 0; color: #424242; border-bottom: 1px solid #e0e0e0;">'
        f'{value}</td>'
        '</tr>'
        for label, value in rows
    )


def _section(title: str, accent: str, rows: list[tuple[str, str]]) -> str:
    return (
        f'<div style="background-color: #f5f7fa; border-left: 6px solid {accent}; '
        'padding: 20px 25px; margin-bottom: 25px; border-radius: 0 8px 8px 0;">'
        f'<h2 style="color: {accent}; margin-top: 0; font-size: 18px; font-weight: 600; '
        f'text-transform: uppercase; letter-spacing: 0.5px;">{title}</h2>'
        f'<table style="width: 100%; border-collapse: collapse;">{_rows(rows)}</table>'
        '</div>'
    )


def _note(title: str, accent: str, text: str) -> str:
    return (
        f'<div style="border: 2px solid {accent}; border-radius: 8px; padding: 20px; '
        'margin-bottom: 25px;">'
        f'<h3 style="color: {accent}; margin: 0 0 10px 0; font-size: 16px;">{title}</h3>'
        f'<p style="margin: 0; color: #424242;">{text}</p>'
        '</div>'
    )


def _page(
    title: str,
    colors: tuple[str, str],
    heading: str,
    tagline: str,
    banner: str,
    content: list[str],
    footer: str,
) -> str:
    start, end = colors
    return (
        '<!DOCTYPE html>'
        '<html><head><meta charset="utf-8">'
        '<meta name="viewport" content="width=device-width, initial-scale=1.0">'
        f'<title>{title}</title></head>'
        f'<body style="margin: 0; padding: 0; font-family: {_FONT}; '
        'background-color: #f8f9fa; line-height: 1.6;">'
        '<div style="max-width: 800px; margin: 0 auto; background-color: white; '
        'box-shadow: 0 4px 12px rgba(0,0,0,0.1);">'
        f'<div style="background: linear-gradient(135deg, {start} 0%, {end} 100%); '
        'padding: 40px 30px; text-align: center;">'
        '<h1 style="color: white; margin: 0; font-size: 28px; font-weight: 700; '
        f'letter-spacing: 1px;">{heading}</h1>'
        '<p style="color: #f5f5f5; margin: 15px 0 0 0; font-size: 16px;">'
        f'{tagline}</p></div>'
        f'<div style="background-color: {start}; color: white; padding: 16px; '
        f'text-align: center; font-weight: 600; font-size: 15px;">{banner}</div>'
        f'<div style="padding: 35px 30px;">{"".join(content)}</div>'
        '<div style="background-color: #37474f; color: white; padding: 25px; text-align: center;">'
        '<h4 style="margin: 0 0 8px 0; font-size: 18px;">{brand}</h4>'
        f'<p style="margin: 0; font-size: 14px; opacity: 0.8;">{footer}</p>'
        '<p style="margin: 8px 0 0 0; font-size: 12px; opacity: 0.7;">'
        'Reference: {request_id} | Support: {admin_email}</p>'
        '</div></div></body></html>'
    )


_CUSTOMER_ROWS = [
    ("Full Name:", "{name}"),
    ("Email Address:", "{email}"),
    ("Phone Number:", "{phone}"),
    ("Language:", "{language}"),
]

_BIRTH_ROWS = [
    ("Date of Birth:", "{date_of_birth}"),
    ("Time of Birth:", "{time_of_birth}"),
    ("Place of Birth:", "{place_of_birth}"),
    ("Gender:", "{gender}"),
]

_SERVICE_ROWS = [
    ("Service:", "{service_name}"),
    ("Report Type:", "{report_type}"),
    ("Request ID:", "{request_id}"),
    ("Submitted At:", "{timestamp}"),
]

_PAYMENT_ROWS = [
    ("Payment Status:", "{payment_status}"),
    ("Amount Paid:", "&#8377;{amount}"),
    ("Payment ID:", "{payment_id}"),
    ("Order ID:", "{order_id}"),
]

_MATCH_CONTACT_ROWS = [
    ("Customer Email:", "{customer_email}"),
    ("Customer Phone:", "{customer_phone}"),
    ("Language:", "{language}"),
    ("Submitted At:", "{timestamp}"),
]


def _partner_rows(prefix: str) -> list[tuple[str, str]]:
    return [
        ("Name:", "{%s_name}" % prefix),
        ("Gender:", "{%s_gender}" % prefix),
        ("Date of Birth:", "{%s_date_of_birth}" % prefix),
        ("Time of Birth:", "{%s_time_of_birth}" % prefix),
        ("Place of Birth:", "{%s_place_of_birth}" % prefix),
    ]


_CUSTOMER_EXTRAS = [
    _note("Additional Information", "#6a1b9a", "{additional_info}"),
    _note("Specific Questions", "#6a1b9a", "{special_requests}"),
]

_SUPPORT_NOTE = _note(
    "Need Help?",
    "#1565c0",
    "Reply to this email or call us at {support_phones}. "
    "Please quote your reference {request_id}.",
)


# =============================================================================
# Template Definitions
# =============================================================================

TEMPLATES: dict[TemplateKey, EmailTemplate] = {

    # -------------------------------------------------------------------------
    # Contact form relay (plain text)
    # -------------------------------------------------------------------------

    TemplateKey.CONTACT_FORM: EmailTemplate(
        key=TemplateKey.CONTACT_FORM,
        subject="{subject}",
        body="""Contact Form Submission from: {source}

Name: {name}
Email: {email}
Phone: {phone}
Source Domain/Product: {source}

Message:
{message}
""",
        subtype="plain",
    ),

    # -------------------------------------------------------------------------
    # Astrology service confirmation
    # -------------------------------------------------------------------------

    TemplateKey.ASTRO_ADMIN_PAID: EmailTemplate(
        key=TemplateKey.ASTRO_ADMIN_PAID,
        subject="PAID {service_name} Request - {name} - ₹{amount} - {brand}",
        body=_page(
            "New Astrology Service Request",
            ("#1a237e", "#3949ab"),
            "NEW PAID ASTROLOGY SERVICE REQUEST",
            "{brand} - Premium Service Request",
            "HIGH PRIORITY - PAID SERVICE - PROCESS WITHIN 24 HOURS",
            [
                _section("Client Information", "#1565c0", _CUSTOMER_ROWS),
                _section("Service Details", "#2e7d32", _SERVICE_ROWS),
                _section("Birth Details", "#ef6c00", _BIRTH_ROWS),
                _section("Payment Information", "#2e7d32", _PAYMENT_ROWS),
                *_CUSTOMER_EXTRAS,
            ],
            "Paid request. Deliver the report by email within 24 hours.",
        ),
    ),

    TemplateKey.ASTRO_ADMIN_UNPAID: EmailTemplate(
        key=TemplateKey.ASTRO_ADMIN_UNPAID,
        subject="{service_name} Request - {name} - {brand}",
        body=_page(
            "New Astrology Service Request",
            ("#1a237e", "#3949ab"),
            "NEW ASTROLOGY SERVICE REQUEST",
            "{brand} - Service Request",
            "NO PAYMENT DETAILS SUPPLIED - CONFIRM PAYMENT BEFORE PROCESSING",
            [
                _section("Client Information", "#1565c0", _CUSTOMER_ROWS),
                _section("Service Details", "#2e7d32", _SERVICE_ROWS),
                _section("Birth Details", "#ef6c00", _BIRTH_ROWS),
                *_CUSTOMER_EXTRAS,
            ],
            "Check the payment gateway dashboard before starting this report.",
        ),
    ),

    TemplateKey.ASTRO_CUSTOMER_PAID: EmailTemplate(
        key=TemplateKey.ASTRO_CUSTOMER_PAID,
        subject="Order Confirmation - {service_name} - {brand} ({order_id})",
        body=_page(
            "Order Confirmation",
            ("#4a148c", "#7b1fa2"),
            "ORDER CONFIRMED",
            "Thank you, {name}. Your {service_name} is being prepared.",
            "YOUR REPORT WILL BE DELIVERED BY EMAIL WITHIN 24-48 HOURS",
            [
                _section("Order Summary", "#6a1b9a", _SERVICE_ROWS),
                _section("Payment Information", "#2e7d32", _PAYMENT_ROWS),
                _section("Birth Details Received", "#ef6c00", _BIRTH_ROWS),
                _SUPPORT_NOTE,
            ],
            "Professional Astrology Services",
        ),
    ),

    TemplateKey.ASTRO_CUSTOMER_UNPAID: EmailTemplate(
        key=TemplateKey.ASTRO_CUSTOMER_UNPAID,
        subject="Request Received - {service_name} - {brand}",
        body=_page(
            "Request Received",
            ("#4a148c", "#7b1fa2"),
            "REQUEST RECEIVED",
            "Thank you, {name}. We have received your {service_name} request.",
            "OUR TEAM WILL CONTACT YOU SHORTLY",
            [
                _section("Request Summary", "#6a1b9a", _SERVICE_ROWS),
                _section("Birth Details Received", "#ef6c00", _BIRTH_ROWS),
                _SUPPORT_NOTE,
            ],
            "Professional Astrology Services",
        ),
    ),

    # -------------------------------------------------------------------------
    # Admin-only alerts
    # -------------------------------------------------------------------------

    TemplateKey.PENDING_PAYMENT_ADMIN: EmailTemplate(
        key=TemplateKey.PENDING_PAYMENT_ADMIN,
        subject=(
            "CRITICAL ALERT - Payment Successful, Processing Failed - {name} - "
            "Order: {order_id}"
        ),
        body=_page(
            "CRITICAL - Payment Processing Failure",
            ("#b71c1c", "#d32f2f"),
            "CRITICAL SYSTEM ALERT",
            "Payment Successful - Automated Processing Failed",
            "STATUS: CRITICAL | PRIORITY: IMMEDIATE | ACTION: MANUAL PROCESSING",
            [
                _note(
                    "Manual Intervention Required",
                    "#b71c1c",
                    "The customer has paid but the automated flow did not complete. "
                    "Process this order manually and contact the customer.",
                ),
                _section("Customer Information", "#b71c1c", _CUSTOMER_ROWS),
                _section("Payment Information", "#2e7d32", _PAYMENT_ROWS),
                _section("Service Details", "#1565c0", _SERVICE_ROWS),
                _section("Birth Details", "#ef6c00", _BIRTH_ROWS),
            ],
            "Critical failure notification",
        ),
    ),

    TemplateKey.ABANDONED_PAYMENT_ADMIN: EmailTemplate(
        key=TemplateKey.ABANDONED_PAYMENT_ADMIN,
        subject=(
            "PAYMENT ABANDONMENT ALERT - {name} - ₹{amount} - "
            "High Priority Lead Recovery Required"
        ),
        body=_page(
            "Payment Abandonment Alert - High Priority Lead",
            ("#e65100", "#ff8f00"),
            "PAYMENT ABANDONMENT ALERT",
            "High-intent lead left the payment gateway",
            "LEAD RECOVERY - FOLLOW UP WITHIN 2 HOURS",
            [
                _section("Lead Information", "#e65100", _CUSTOMER_ROWS),
                _section(
                    "Abandonment Details",
                    "#bf360c",
                    [
                        ("Service:", "{service_name}"),
                        ("Reason:", "{abandonment_reason}"),
                        ("Time on Page:", "{time_on_page}"),
                        ("Lead ID:", "{request_id}"),
                        ("Recorded At:", "{timestamp}"),
                    ],
                ),
                _section("Birth Details", "#ef6c00", _BIRTH_ROWS),
                _note(
                    "Suggested Follow-up",
                    "#e65100",
                    "Call or email the customer, resolve any payment issue and "
                    "offer to complete the {service_name} order.",
                ),
            ],
            "Customer Recovery & Lead Management",
        ),
    ),

    TemplateKey.ABANDONED_MATCH_ADMIN: EmailTemplate(
        key=TemplateKey.ABANDONED_MATCH_ADMIN,
        subject=(
            "MATCH HOROSCOPE ABANDONMENT - {partner1_subject} & {partner2_subject} - "
            "Lead Development Opportunity"
        ),
        body=_page(
            "Match Horoscope Abandonment Alert",
            ("#673ab7", "#9c27b0"),
            "MATCH HOROSCOPE ABANDONMENT",
            "Compatibility Analysis - Potential Lead Identified",
            "FREE SERVICE ABANDONMENT - LEAD OPPORTUNITY",
            [
                _section(
                    "Customer Contact",
                    "#6a1b9a",
                    [
                        ("Customer Email:", "{customer_email}"),
                        ("Customer Phone:", "{customer_phone}"),
                    ],
                ),
                _section("Partner 1 Details", "#ad1457", _partner_rows("partner1")),
                _section("Partner 2 Details", "#1565c0", _partner_rows("partner2")),
                _section(
                    "Session Analytics",
                    "#4a148c",
                    [
                        ("Reason:", "{abandonment_reason}"),
                        ("Time on Page:", "{time_on_page}"),
                        ("Engagement:", "{engagement}"),
                        ("Form Completion:", "{completion_level}%"),
                        ("Lead ID:", "{request_id}"),
                        ("Recorded At:", "{timestamp}"),
                    ],
                ),
            ],
            "Lead Development & Customer Journey Optimization",
        ),
    ),

    # -------------------------------------------------------------------------
    # Horoscope matching
    # -------------------------------------------------------------------------

    TemplateKey.MATCH_ADMIN_PAID: EmailTemplate(
        key=TemplateKey.MATCH_ADMIN_PAID,
        subject=(
            "PAID Horoscope Matching - {partner1_name} & {partner2_name} - "
            "₹{amount} - {brand}"
        ),
        body=_page(
            "Paid Horoscope Matching Request",
            ("#1b5e20", "#4caf50"),
            "PAID HOROSCOPE MATCHING",
            "Premium Service Request - High Priority",
            "HIGH PRIORITY - PAID SERVICE - PROCESS WITHIN 24 HOURS",
            [
                _section("Customer Information", "#1565c0", _MATCH_CONTACT_ROWS),
                _section("Partner 1 Details", "#ad1457", _partner_rows("partner1")),
                _section("Partner 2 Details", "#1565c0", _partner_rows("partner2")),
                _section("Payment Information", "#2e7d32", _PAYMENT_ROWS),
                _note(
                    "Action Items",
                    "#d32f2f",
                    "Prepare the comprehensive compatibility report within 24-48 hours "
                    "and follow up with the customer after delivery.",
                ),
            ],
            "Professional Astrology Services",
        ),
    ),

    TemplateKey.MATCH_ADMIN_FREE: EmailTemplate(
        key=TemplateKey.MATCH_ADMIN_FREE,
        subject="FREE Match-Horoscope Request - {partner1_name} & {partner2_name}",
        body=_page(
            "Free Horoscope Matching Request",
            ("#e91e63", "#f06292"),
            "FREE HOROSCOPE MATCHING",
            "Compatibility Analysis Request",
            "FREE SERVICE - LEAD CONVERSION OPPORTUNITY",
            [
                _section("Customer Information", "#1565c0", _MATCH_CONTACT_ROWS),
                _section("Partner 1 Details", "#ad1457", _partner_rows("partner1")),
                _section("Partner 2 Details", "#1565c0", _partner_rows("partner2")),
                _note(
                    "Action Items",
                    "#ff9800",
                    "Send the compatibility analysis within 12 hours. Follow up if "
                    "contact details were provided and present premium services.",
                ),
            ],
            "Professional Astrology Services",
        ),
    ),

    TemplateKey.MATCH_CUSTOMER_PAID: EmailTemplate(
        key=TemplateKey.MATCH_CUSTOMER_PAID,
        subject="Order Confirmed - Horoscope Matching Analysis - {brand} (Order: {order_id})",
        body=_page(
            "Order Confirmed",
            ("#1b5e20", "#4caf50"),
            "ORDER CONFIRMED",
            "Your comprehensive premium compatibility analysis is being prepared.",
            "DELIVERY WITHIN 24-48 HOURS",
            [
                _section("Partner 1", "#ad1457", _partner_rows("partner1")),
                _section("Partner 2", "#1565c0", _partner_rows("partner2")),
                _section("Payment Information", "#2e7d32", _PAYMENT_ROWS),
                _SUPPORT_NOTE,
            ],
            "Thank you for choosing {brand} for your premium horoscope matching analysis.",
        ),
    ),

    TemplateKey.MATCH_CUSTOMER_FREE: EmailTemplate(
        key=TemplateKey.MATCH_CUSTOMER_FREE,
        subject="Compatibility Analysis Request Received - {brand}",
        body=_page(
            "Request Received",
            ("#e91e63", "#f06292"),
            "REQUEST RECEIVED",
            "Your detailed compatibility analysis is being prepared.",
            "DELIVERY WITHIN 12 HOURS",
            [
                _section("Partner 1", "#ad1457", _partner_rows("partner1")),
                _section("Partner 2", "#1565c0", _partner_rows("partner2")),
                _note(
                    "Explore More",
                    "#e65100",
                    "For comprehensive birth chart analysis and personalized guidance, "
                    "explore our premium astrology services.",
                ),
                _SUPPORT_NOTE,
            ],
            "Thank you for trusting {brand} for your compatibility analysis.",
        ),
    ),
}


# =============================================================================
# Template Access Functions
# =============================================================================

def get_template(key: TemplateKey) -> Optional[EmailTemplate]:
    """Get a template by key."""
    return TEMPLATES.get(key)


def render_notification(key: TemplateKey, **context: Any) -> tuple[str, str, str]:
    """
    Render a template.

    Returns:
        Tuple of (subject, body, subtype)

    Raises:
        ValueError: If no template is registered for key
    """
    template = get_template(key)
    if not template:
        raise ValueError(f"No template found for key: {key}")
    subject, body = template.render(**context)
    return subject, body, template.subtype
