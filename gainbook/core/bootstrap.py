"""Process-wide logging and telemetry setup."""

from __future__ import annotations

import logging

from gainbook.config import GainbookSettings, get_settings

from .logging import setup_logging
from .telemetry import setup_telemetry

logger = logging.getLogger(__name__)


def configure(settings: GainbookSettings | None = None) -> GainbookSettings:
    """Install logging and, when enabled, tracing for the host application."""

    settings = settings or get_settings()
    setup_logging(settings.log_level)
    setup_telemetry(settings)
    logger.info("gainbook configuration: %s", settings.dict_for_logging())
    return settings


__all__ = ["configure"]
