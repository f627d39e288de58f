from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class StorefrontSettings(BaseSettings):
    """Application configuration using Pydantic BaseSettings.

    Loads configuration from environment variables and .env file (if present).
    Fields are type-checked and validated. Defaults are provided where appropriate.
    """

    # Application
    app_env: str = "local"
    log_level: str = "INFO"
    data_dir: str = "data"
    base_url: str = "http://localhost:3000"
    currency: str = "NGN"

    # Risk scoring
    risk_high_amount_threshold: int = 1_500_000
    risk_review_threshold: int = 45

    # Card payments (Paystack)
    paystack_secret_key: Optional[str] = None
    paystack_base_url: str = "https://api.paystack.co"
    paystack_timeout_seconds: float = 15.0

    # Email notifications
    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = None
    smtp_from_address: Optional[str] = None
    smtp_use_tls: bool = True
    admin_notification_emails: str = ""
    store_whatsapp_number: str = "2348091747685"
    notification_workers: int = 2

    # Admin access
    admin_password: Optional[str] = None
    admin_token_secret: str = "storefront-admin-secret"
    admin_token_ttl_seconds: int = 12 * 60 * 60

    # Checkout throttling
    checkout_rate_limit: int = 10
    checkout_rate_window_seconds: int = 60

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    @property
    def smtp_configured(self) -> bool:
        return bool(
            self.smtp_host and self.smtp_port and self.smtp_user
            and self.smtp_password and self.sender_address
        )

    @property
    def sender_address(self) -> Optional[str]:
        return self.smtp_from_address or self.smtp_user

    @property
    def admin_recipients(self) -> list[str]:
        return [
            email.strip().lower()
            for email in self.admin_notification_emails.split(",")
            if email.strip()
        ]


_config: Optional[StorefrontSettings] = None


def get_config() -> StorefrontSettings:
    """Return the StorefrontSettings instance (singleton pattern)."""
    global _config
    if _config is None:
        _config = StorefrontSettings()
    return _config


def set_config_for_test(**kwargs) -> StorefrontSettings:
    """For testing only: override the StorefrontSettings instance with new values."""
    global _config
    _config = StorefrontSettings(**kwargs)
    return _config
