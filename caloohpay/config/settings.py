"""
Configuration management for CalOohPay.
"""

from decimal import Decimal
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from caloohpay.calculators.payment_calculator import (
    WEEKDAY_RATE,
    WEEKEND_RATE,
    PaymentRates,
)


class CalOohPayConfig(BaseSettings):
    """Configuration settings for CalOohPay."""

    # PagerDuty API Configuration
    api_token: Optional[str] = Field(default=None, alias="API_TOKEN")
    pagerduty_api_url: str = Field(
        default="https://api.pagerduty.com", alias="PAGERDUTY_API_URL"
    )
    request_timeout: float = Field(default=30.0, gt=0, alias="REQUEST_TIMEOUT")

    # Payment Configuration
    weekday_rate: Decimal = Field(default=WEEKDAY_RATE, ge=0, alias="WEEKDAY_RATE")
    weekend_rate: Decimal = Field(default=WEEKEND_RATE, ge=0, alias="WEEKEND_RATE")

    # Application Configuration
    environment: str = Field(default="development", alias="ENVIRONMENT")
    debug: bool = Field(default=False, alias="DEBUG")
    log_level: str = Field(default="WARNING", alias="LOG_LEVEL")

    # Processing Configuration
    max_retries: int = Field(default=3, ge=0, alias="MAX_RETRIES")
    retry_delay: float = Field(default=1.0, ge=0, alias="RETRY_DELAY")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",
    )

    @field_validator("api_token")
    @classmethod
    def validate_api_token(cls, v):
        """Treat a blank token as missing."""
        if v is not None and not v.strip():
            return None
        return v.strip() if v else v

    @field_validator("pagerduty_api_url")
    @classmethod
    def validate_api_url(cls, v):
        """Ensure the API URL is absolute and has no trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("PagerDuty API URL must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is valid."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Ensure environment is valid."""
        valid_envs = ["development", "testing", "production"]
        if v.lower() not in valid_envs:
            raise ValueError(f"Environment must be one of: {valid_envs}")
        return v.lower()

    def get_payment_rates(self) -> PaymentRates:
        """Get the configured payment rates."""
        return PaymentRates(
            weekday_rate=self.weekday_rate, weekend_rate=self.weekend_rate
        )


def load_config(env_file: Optional[str] = None) -> CalOohPayConfig:
    """Load configuration from environment variables and .env file."""
    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    return CalOohPayConfig()


# Global configuration instance
_config: Optional[CalOohPayConfig] = None


def get_config() -> CalOohPayConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config(env_file: Optional[str] = None) -> CalOohPayConfig:
    """Reload configuration (useful for testing)."""
    global _config
    _config = load_config(env_file)
    return _config
