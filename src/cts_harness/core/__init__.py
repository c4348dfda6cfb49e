# src/cts_harness/core/__init__.py
"""Core infrastructure: Configuration, Logging, Universe loading."""

from cts_harness.core.config import HarnessSettings, LoggingSettings, load_settings
from cts_harness.core.logging import configure_logging
from cts_harness.core.universe import load_universe, parse_universe

__all__ = [
    "HarnessSettings",
    "LoggingSettings",
    "configure_logging",
    "load_settings",
    "load_universe",
    "parse_universe",
]
