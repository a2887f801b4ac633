"""Market data providers."""

from .price_service import (
    PriceServiceClient,
    PriceServiceError,
    PriceSource,
    StaticPriceSource,
    extract_price,
)

__all__ = [
    "PriceServiceClient",
    "PriceServiceError",
    "PriceSource",
    "StaticPriceSource",
    "extract_price",
]
