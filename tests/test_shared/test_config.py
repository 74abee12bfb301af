"""
Tests for environment-driven settings.
"""

import pydantic
import pytest

from shared.config import Settings


class TestSettings:

    def test_defaults(self, monkeypatch):
        """Defaults match the production deployment."""
        for name in ("ADMIN_EMAIL", "MAIL_BACKEND", "PORT", "DEFAULT_CURRENCY"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings(_env_file=None)

        assert settings.admin_email == "israelitesshopping171@gmail.com"
        assert settings.port == 5000
        assert settings.default_currency == "INR"
        assert settings.mail_backend == "smtp"
        assert "https://sriastroveda.com" in settings.cors_origins

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("RAZORPAY_KEY_ID", "rzp_live_abc")
        monkeypatch.setenv("PORT", "8080")
        monkeypatch.setenv("MAIL_BACKEND", "Console")

        settings = Settings(_env_file=None)

        assert settings.razorpay_key_id == "rzp_live_abc"
        assert settings.port == 8080
        assert settings.mail_backend == "console"

    def test_rejects_unknown_mail_backend(self):
        with pytest.raises(pydantic.ValidationError):
            Settings(_env_file=None, mail_backend="pigeon")

    def test_sender_falls_back_to_admin(self):
        settings = Settings(_env_file=None, email_user="", admin_email="admin@example.com")
        assert settings.sender_address == "admin@example.com"
