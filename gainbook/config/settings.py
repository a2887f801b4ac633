"""Library configuration and environment helpers."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_PRICE_FIELD = "close"
DEFAULT_COLLECTION = "transactions"


class GainbookSettings(BaseSettings):
    """Configuration options for the gainbook engine and its adapters."""

    app_name: str = Field(default="gainbook")

    price_service_url: str | None = Field(
        default=None,
        description="Quote endpoint; called as GET <url>?symbol=<SYMBOL>.",
    )
    price_service_token: str | None = Field(
        default=None,
        description="Optional bearer token sent to the quote endpoint.",
    )
    price_field: str = Field(
        default=DEFAULT_PRICE_FIELD,
        description="JSON field of the quote payload holding the current price.",
    )
    price_service_timeout_seconds: float = Field(default=15.0, gt=0)
    price_max_concurrency: int = Field(
        default=0,
        ge=0,
        description="Upper bound on in-flight price lookups; 0 means unbounded.",
    )

    sell_action_keywords: list[str] = Field(
        default_factory=lambda: ["SOLD"],
        description="Broker action substrings that mark a row as a sale.",
    )

    transactions_collection: str = Field(default=DEFAULT_COLLECTION)
    store_path: str = Field(default="gainbook.json")

    log_level: str = Field(default="INFO")

    telemetry_enabled: bool = Field(default=False)
    telemetry_service_name: str = Field(default="gainbook")
    telemetry_otlp_endpoint: str | None = Field(default=None)
    telemetry_otlp_insecure: bool = Field(default=True)
    telemetry_sample_ratio: float = Field(default=1.0, ge=0.0, le=1.0)

    model_config = SettingsConfigDict(
        env_prefix="GAINBOOK_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    def dict_for_logging(self) -> dict[str, Any]:
        """Return a sanitized dict for logging purposes."""

        hidden = {"price_service_token"}
        return {k: ("***" if k in hidden and v else v) for k, v in self.model_dump().items()}


@lru_cache(maxsize=1)
def get_settings(**overrides: Any) -> GainbookSettings:
    """Return cached settings with optional overrides."""

    if overrides:
        return GainbookSettings(**overrides)
    return GainbookSettings()


__all__ = [
    "DEFAULT_COLLECTION",
    "DEFAULT_PRICE_FIELD",
    "GainbookSettings",
    "get_settings",
]
