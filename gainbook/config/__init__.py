"""Configuration package for gainbook."""

from .settings import DEFAULT_COLLECTION, DEFAULT_PRICE_FIELD, GainbookSettings, get_settings

__all__ = ["DEFAULT_COLLECTION", "DEFAULT_PRICE_FIELD", "GainbookSettings", "get_settings"]
