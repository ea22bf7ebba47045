# tractorhire/core/config.py
import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    CANCELLATION_FEE_RATE,
    COMMISSION_RATE,
    DEFAULT_AVERAGE_SPEED_KPH,
    MIN_BOOKING_MINUTES,
    MINIMUM_CHARGE_MINUTES,
)


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).resolve().parents[2] / ".env"
    logger.debug(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    environment: str = Field(default="development", description="Deployment environment name")
    is_testing: bool = Field(default_factory=is_running_tests, description="Set by the test harness")
    log_level: str = Field(default="INFO", description="Root log level")
    structured_logs: bool = Field(default=False, description="Emit JSON log lines")

    database_url: str = Field(
        default="sqlite+pysqlite:///./tractorhire.db",
        description="SQLAlchemy URL for the booking store",
    )
    redis_url: Optional[str] = Field(
        default=None,
        description="Redis URL for cross-process unit locks and reset codes (optional)",
    )
    lock_namespace: str = Field(default="tractorhire", description="Prefix for Redis lock keys")
    unit_lock_ttl_s: int = Field(default=30, ge=1, description="Redis lock expiry in seconds")
    unit_lock_timeout_s: float = Field(
        default=5.0, gt=0, description="Seconds to wait for a unit lock before giving up"
    )

    # Billing
    minimum_charge_minutes: int = Field(default=MINIMUM_CHARGE_MINUTES, ge=1)
    minimum_booking_minutes: int = Field(default=MIN_BOOKING_MINUTES, ge=1)
    commission_rate: float = Field(default=COMMISSION_RATE, ge=0, le=1)
    cancellation_fee_rate: float = Field(default=CANCELLATION_FEE_RATE, ge=0, le=1)

    # Admission control: False queues PENDING requests and defers the hard check to approval
    gate_capacity_at_request: bool = False

    # Dispatch
    dispatch_average_speed_kph: float = Field(default=DEFAULT_AVERAGE_SPEED_KPH, gt=0)
    default_latitude: float = 27.7172
    default_longitude: float = 85.3240
    default_location: str = "Kathmandu, Nepal"

    # Background sweeps
    reminder_lookahead_minutes: int = Field(default=30, ge=1)
    reset_code_ttl_minutes: int = Field(default=10, ge=1)

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        normalized = (value or "INFO").strip().upper()
        if not isinstance(logging.getLevelName(normalized), int):
            raise ValueError(f"Unknown log level: {value}")
        return normalized

    @field_validator("redis_url")
    @classmethod
    def _blank_redis_url_is_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None or not value.strip():
            return None
        return value.strip()


settings = Settings()
