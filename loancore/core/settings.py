from decimal import Decimal
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    environment: str = Field(default="development", alias="ENVIRONMENT")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Penalty defaults used when a caller does not supply a rule
    late_penalty_rate_percent: Decimal = Field(default=Decimal("0.2"), ge=0, alias="LATE_PENALTY_RATE_PERCENT")
    late_penalty_cap_percent: Decimal | None = Field(default=Decimal("100"), ge=0, alias="LATE_PENALTY_CAP_PERCENT")
    after_maturity_penalty_rate_percent: Decimal = Field(
        default=Decimal("0.3"), ge=0, alias="AFTER_MATURITY_PENALTY_RATE_PERCENT"
    )

    # Operational status derivation
    overdue_grace_days: int = Field(default=14, ge=0, alias="OVERDUE_GRACE_DAYS")
    default_after_months: int = Field(default=6, ge=0, alias="DEFAULT_AFTER_MONTHS")
    fully_paid_tolerance: Decimal = Field(default=Decimal("0.01"), ge=0, alias="FULLY_PAID_TOLERANCE")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()


settings = get_settings()
