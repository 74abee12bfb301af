"""
Environment-driven configuration for the relay.

Every value here is injected at process start and read-only afterwards:
gateway credentials, mail account, the fixed admin address, support phone
numbers, and the CORS allow-list.

Design decisions:
- pydantic-settings reads environment variables (and an optional .env file)
- get_settings() is cached so the process shares one instance
- Tests build Settings(...) directly and never touch the environment
"""

from functools import lru_cache
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Relay settings from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=False, extra="ignore")

    # Payment gateway
    razorpay_key_id: str = ""
    razorpay_key_secret: str = ""
    razorpay_api_url: str = "https://api.razorpay.com/v1"

    # Mail account
    email_user: str = ""
    email_pass: str = ""
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 465
    smtp_use_ssl: bool = True
    smtp_timeout_seconds: Optional[float] = None
    mail_backend: str = "smtp"  # "smtp" or "console"

    # Server
    port: int = 5000

    # Business constants
    admin_email: str = "israelitesshopping171@gmail.com"
    contact_cc_email: str = "customercareproductcenter@gmail.com"
    support_phones: list[str] = ["+91 93922 77389", "+91 95739 99254"]
    brand_name: str = "SriAstroVeda"
    default_amount: str = "599"
    default_currency: str = "INR"
    timezone: str = "Asia/Kolkata"

    # API
    cors_origins: list[str] = [
        "https://astro-snowy-five.vercel.app",
        "https://sriastroveda.com",
        "https://www.sriastroveda.com",
        "http://localhost:3000",
        "http://localhost:3001",
    ]

    # Observability
    log_level: str = "INFO"

    @field_validator("mail_backend")
    @classmethod
    def check_mail_backend(cls, v: str) -> str:
        normalized = v.strip().lower()
        if normalized not in {"smtp", "console"}:
            raise ValueError(f"Unknown mail backend: {v!r}")
        return normalized

    @property
    def sender_address(self) -> str:
        """The From address on outgoing mail."""
        return self.email_user or self.admin_email


@lru_cache
def get_settings() -> Settings:
    return Settings()
