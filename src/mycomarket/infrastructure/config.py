"""Application settings, read from ``MYCOMARKET_*`` environment variables
or a ``.env`` file in the working directory."""

from __future__ import annotations

from decimal import Decimal
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):

    # Database
    database_url: str = Field(default="sqlite:///mycomarket.db")
    sql_echo: bool = Field(default=False)

    # Logging
    log_level: str = Field(default="INFO")

    # Ledger
    platform_fee_percentage: Decimal = Field(default=Decimal("10"), ge=0, le=100)
    finalized_order_status: Literal["DELIVERED", "CONFIRMED"] = Field(default="DELIVERED")

    # Expiry sweep
    sweep_interval_seconds: int = Field(default=60, gt=0)
    sweep_batch_size: int = Field(default=100, gt=0)

    # Concurrency
    conflict_retry_attempts: int = Field(default=3, ge=1)

    model_config = SettingsConfigDict(
        env_prefix="MYCOMARKET_", env_file=".env", extra="ignore"
    )


@lru_cache
def get_settings() -> Settings:
    return Settings()
