"""Application configuration using Pydantic Settings."""
from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="TIMEBILL_",
    )

    # API
    app_name: str = "Time Billing API"
    debug: bool = False
    log_level: str = "INFO"

    # Initial billing settings (mutable at runtime via /billing/settings)
    default_hourly_rate: Decimal = Decimal("85.00")
    tax_rate: Decimal = Decimal("0")
    auto_billing_threshold: Decimal = Decimal("0.00")
    invoice_terms_days: int = 30

    # CORS
    cors_origins: str = "http://localhost:3000,http://localhost:8000"

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.cors_origins.split(",")]


settings = Settings()
