"""
Tests for mail transports.

These tests verify that the console transport records and fails sends as
configured, and that the SMTP transport builds the right MIME message and
reports delivery errors without raising.
"""

import smtplib

import pytest

from shared.channels import (
    ConsoleMailTransport,
    DeliveryResult,
    SMTPMailTransport,
    build_mail_transport,
)
from relay.validation import validate_service_request
from shared.catalog import resolve
from shared.models import Notification


def make_notification(recipient: str = "test@example.com", **kwargs) -> Notification:
    values = {"subject": "Test Subject", "body": "<p>Test body</p>"}
    values.update(kwargs)
    return Notification(recipient=recipient, **values)


class TestConsoleMailTransport:
    """Tests for the recording console transport."""

    @pytest.mark.asyncio
    async def test_send_success(self, transport: ConsoleMailTransport):
        """Test successful send."""
        result = await transport.send(make_notification(cc="admin@example.com"))

        assert result.success is True
        assert result.recipient == "test@example.com"
        assert result.subject == "Test Subject"
        assert result.cc == "admin@example.com"
        assert result.error is None

    @pytest.mark.asyncio
    async def test_tracks_sent_messages(self, transport: ConsoleMailTransport):
        """Test that the transport tracks sent messages."""
        await transport.send(make_notification("a@example.com"))
        await transport.send(make_notification("b@example.com"))

        assert transport.get_sent_count() == 2
        assert transport.sent_messages[0].recipient == "a@example.com"
        assert transport.sent_messages[1].recipient == "b@example.com"

    @pytest.mark.asyncio
    async def test_find_message_to(self, transport: ConsoleMailTransport):
        await transport.send(make_notification("target@example.com", subject="Hello"))
        await transport.send(make_notification("other@example.com"))

        found = transport.find_message_to("target@example.com")

        assert found is not None
        assert found.subject == "Hello"
        assert transport.find_message_to("nobody@example.com") is None

    @pytest.mark.asyncio
    async def test_clear_history(self, transport: ConsoleMailTransport):
        await transport.send(make_notification())
        transport.clear_history()

        assert transport.get_sent_count() == 0

    @pytest.mark.asyncio
    async def test_fail_rate_one_always_fails(self):
        transport = ConsoleMailTransport(fail_rate=1.0)

        result = await transport.send(make_notification())

        assert result.success is False
        assert result.error == "Simulated email delivery failure"
        assert transport.get_successful_sends() == []

    @pytest.mark.asyncio
    async def test_failing_recipients(self):
        transport = ConsoleMailTransport(failing_recipients=["bad@example.com"])

        bad = await transport.send(make_notification("bad@example.com"))
        good = await transport.send(make_notification("good@example.com"))

        assert bad.success is False
        assert good.success is True


class TestDeliveryResult:

    def test_str_shows_status(self):
        ok = DeliveryResult.for_notification(make_notification())
        failed = DeliveryResult.for_notification(make_notification(), error="boom")

        assert str(ok).startswith("✓ EMAIL to test@example.com")
        assert str(failed).startswith("✗")
        assert failed.success is False


class FakeSMTP:
    """Stands in for smtplib.SMTP and SMTP_SSL and records what was sent."""

    instances: list["FakeSMTP"] = []
    fail_with = None
    starttls_fails_with = None

    def __init__(self, host, port, **kwargs):
        self.host = host
        self.port = port
        self.logged_in = None
        self.sent = []
        self.started_tls = False
        self.closed = False
        FakeSMTP.instances.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True
        return False

    def starttls(self, context=None):
        if FakeSMTP.starttls_fails_with is not None:
            raise FakeSMTP.starttls_fails_with
        self.started_tls = True

    def login(self, username, password):
        self.logged_in = (username, password)

    def send_message(self, message):
        if FakeSMTP.fail_with is not None:
            raise FakeSMTP.fail_with
        self.sent.append(message)


@pytest.fixture
def fake_smtp(monkeypatch):
    FakeSMTP.instances = []
    FakeSMTP.fail_with = None
    FakeSMTP.starttls_fails_with = None
    monkeypatch.setattr(smtplib, "SMTP_SSL", FakeSMTP)
    monkeypatch.setattr(smtplib, "SMTP", FakeSMTP)
    return FakeSMTP


@pytest.fixture
def smtp_transport() -> SMTPMailTransport:
    return SMTPMailTransport(
        host="smtp.example.com",
        port=465,
        username="relay@example.com",
        password="app-password",
        sender="relay@example.com",
    )


class TestSMTPMailTransport:
    """Tests for the SMTP transport with smtplib replaced."""

    def test_build_message_headers(self, smtp_transport):
        message = smtp_transport.build_message(
            make_notification(cc="admin@example.com", reply_to="customer@example.com")
        )

        assert message["From"] == "relay@example.com"
        assert message["To"] == "test@example.com"
        assert message["Cc"] == "admin@example.com"
        assert message["Reply-To"] == "customer@example.com"
        assert message["Subject"] == "Test Subject"
        assert message.get_content_subtype() == "html"

    def test_plain_text_message(self, smtp_transport):
        message = smtp_transport.build_message(make_notification(subtype="plain", body="Hello"))

        assert message.get_content_subtype() == "plain"
        assert message["Cc"] is None

    @pytest.mark.asyncio
    async def test_send_delivers_through_smtp(self, smtp_transport, fake_smtp):
        result = await smtp_transport.send(make_notification())

        assert result.success is True
        connection = fake_smtp.instances[0]
        assert (connection.host, connection.port) == ("smtp.example.com", 465)
        assert connection.logged_in == ("relay@example.com", "app-password")
        assert connection.sent[0]["To"] == "test@example.com"

    @pytest.mark.asyncio
    async def test_smtp_error_becomes_failed_result(self, smtp_transport, fake_smtp):
        """Delivery problems are reported, not raised."""
        fake_smtp.fail_with = smtplib.SMTPRecipientsRefused({"test@example.com": (550, b"no such user")})

        result = await smtp_transport.send(make_notification())

        assert result.success is False
        assert result.error

    @pytest.mark.asyncio
    async def test_multiline_name_is_delivered(self, smtp_transport, fake_smtp, composer, astro_payload):
        """A line break inside a customer name does not break the Subject header."""
        astro_payload["name"] = "Asha\nRao"
        request = validate_service_request(astro_payload)
        admin, _ = composer.compose_astro_confirmation(request, resolve(request.service), "order_123")

        result = await smtp_transport.send(admin)

        assert result.success is True
        assert fake_smtp.instances[0].sent[0]["Subject"] == (
            "PAID Numerology Reading Request - Asha Rao - ₹599 - SriAstroVeda"
        )

    @pytest.mark.asyncio
    async def test_unbuildable_message_becomes_failed_result(self, smtp_transport, fake_smtp):
        result = await smtp_transport.send(make_notification(subject="Line one\nLine two"))

        assert result.success is False
        assert fake_smtp.instances == []

    @pytest.mark.asyncio
    async def test_starttls_connection(self, fake_smtp):
        transport = SMTPMailTransport(
            host="smtp.example.com",
            port=587,
            username="relay@example.com",
            password="app-password",
            sender="relay@example.com",
            use_ssl=False,
        )

        result = await transport.send(make_notification())

        assert result.success is True
        assert fake_smtp.instances[0].started_tls is True

    @pytest.mark.asyncio
    async def test_starttls_failure_closes_connection(self, fake_smtp):
        fake_smtp.starttls_fails_with = smtplib.SMTPNotSupportedError("STARTTLS extension not supported")
        transport = SMTPMailTransport(
            host="smtp.example.com",
            port=587,
            username="relay@example.com",
            password="app-password",
            sender="relay@example.com",
            use_ssl=False,
        )

        result = await transport.send(make_notification())

        assert result.success is False
        assert fake_smtp.instances[0].closed is True
        assert fake_smtp.instances[0].sent == []


class TestBuildMailTransport:

    def test_console_backend(self, settings):
        assert isinstance(build_mail_transport(settings), ConsoleMailTransport)

    def test_smtp_backend_uses_account(self, settings):
        smtp_settings = settings.model_copy(update={"mail_backend": "smtp"})

        transport = build_mail_transport(smtp_settings)

        assert isinstance(transport, SMTPMailTransport)
        assert transport.sender == "relay@example.com"
        assert transport.host == "smtp.gmail.com"
