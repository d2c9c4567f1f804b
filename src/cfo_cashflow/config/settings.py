"""Configuration settings for the CFO cash and payroll module."""

from decimal import Decimal
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

AGING_BUCKETS = ("current", "30", "60", "90")


class RecoveryCurve(BaseModel):
    """Fraction of each AR aging bucket expected to be collected in the window.

    Parsed from the ``CFO_RECOVERY_CURVE`` JSON blob; keys left out of the
    blob keep their defaults.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    current: float = Field(default=0.70, ge=0)
    days_30: float = Field(default=0.25, ge=0, alias="30")
    days_60: float = Field(default=0.10, ge=0, alias="60")
    days_90: float = Field(default=0.05, ge=0, alias="90")

    def weight(self, bucket: str) -> Decimal:
        """Return the recovery weight for a bucket label as a Decimal."""
        return Decimal(str(self.as_dict()[bucket]))

    def as_dict(self) -> dict[str, float]:
        return {
            "current": self.current,
            "30": self.days_30,
            "60": self.days_60,
            "90": self.days_90,
        }


class BlendWeights(BaseModel):
    """Trust split between the invoice/aging base and historical velocity."""

    model_config = ConfigDict(frozen=True)

    invoices_or_aging: float = Field(default=0.70, ge=0)
    history: float = Field(default=0.30, ge=0)

    def as_dict(self) -> dict[str, float]:
        return {"invoices_or_aging": self.invoices_or_aging, "history": self.history}


class Settings(BaseSettings):
    """Flat settings read from the environment (or a .env file)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Supabase REST
    supabase_url: str = Field(..., validation_alias="SUPABASE_URL")
    supabase_service_role_key: SecretStr = Field(
        ..., validation_alias="SUPABASE_SERVICE_ROLE_KEY"
    )
    supabase_timeout_ms: int = Field(
        default=30_000, gt=0, validation_alias="SUPABASE_TIMEOUT_MS"
    )

    # Forecasting assumptions
    recovery_curve: RecoveryCurve = Field(
        default_factory=RecoveryCurve, validation_alias="CFO_RECOVERY_CURVE"
    )
    blend_weights: BlendWeights = Field(
        default_factory=BlendWeights, validation_alias="CFO_BLEND_WEIGHTS"
    )
    timezone: str = Field(default="America/New_York", validation_alias="CFO_TIMEZONE")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", validation_alias="LOG_LEVEL"
    )
    log_format: Literal["json", "console"] = Field(
        default="console", validation_alias="LOG_FORMAT"
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
