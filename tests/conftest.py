# tests/conftest.py
"""Shared test fixtures.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/

Plugin tests run inner pytest sessions through ``pytester``; the harness
plugin itself is loaded here as well so the outer session behaves the same
whether or not the package's entry point is installed.
"""

import logging
import os
from collections.abc import Iterator

import pytest
import structlog
from hypothesis import Phase, Verbosity, settings

from cts_harness.core.logging import HARNESS_LOGGER
from cts_harness.registry import HarnessContext

pytest_plugins = ["pytester", "cts_harness.plugin"]


@pytest.fixture
def context() -> HarnessContext:
    """A fresh, isolated HarnessContext."""
    return HarnessContext()


@pytest.fixture
def math_context(context: HarnessContext) -> HarnessContext:
    """Context with a two-function universe and one covering case."""
    context.set_universe(["MATH_ADD:v1.0", "MATH_DIV:v1.0"])
    context.declare_case("tests/test_math.py::TestBasic", "test_addition", "MATH_ADD", "v1.0")
    return context


@pytest.fixture
def restore_logging() -> Iterator[None]:
    """Put structlog and the harness logger back the way the session had them."""
    saved_config = structlog.get_config()
    harness_logger = logging.getLogger(HARNESS_LOGGER)
    saved_handlers = list(harness_logger.handlers)
    saved_level = harness_logger.level
    yield
    structlog.configure(**saved_config)
    harness_logger.handlers = saved_handlers
    harness_logger.setLevel(saved_level)


# =============================================================================
# Hypothesis Configuration
# =============================================================================

# CI profile: Fast tests for continuous integration
settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

# Nightly profile: Thorough testing for scheduled runs
settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Debug profile: Minimal examples with verbose output for debugging
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Load profile from environment, default to "ci"
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))
