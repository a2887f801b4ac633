"""Logging and telemetry helpers for host applications."""

from .bootstrap import configure
from .logging import setup_logging
from .telemetry import setup_telemetry

__all__ = ["configure", "setup_logging", "setup_telemetry"]
