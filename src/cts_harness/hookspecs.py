# src/cts_harness/hookspecs.py
"""pluggy hook specifications the harness adds to pytest.

They are registered with pytest's own plugin manager (pytest is built on
pluggy) from ``pytest_addhooks``, so conftest.py files and other plugins
implement them like any pytest hook.

Usage (in a conftest.py):
    def pytest_cts_universe(config):
        return ["MATH_ADD:v1.0", ("MATH_DIV", "v1.0")]

    def pytest_cts_report(report, config):
        publish(report.to_dict())

Note: @hookspec defines the hook interface (done here).
      Implementations are plain functions named after the hook.
"""

from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

import pluggy

if TYPE_CHECKING:
    import pytest

    from cts_harness.contracts import CoverageReport

# pytest's project name: these specs extend pytest's hook namespace
PROJECT_NAME = "pytest"

hookspec = pluggy.HookspecMarker(PROJECT_NAME)


@hookspec
def pytest_cts_universe(config: "pytest.Config") -> Iterable[Any] | None:
    """Contribute tags to the function universe.

    Called once after collection, before any test runs. Results of all
    implementations are merged with the universe file (if any).

    Returns:
        FunctionTags, ``(id, version)`` pairs or ``"id:version"`` strings,
        or None to contribute nothing
    """


@hookspec
def pytest_cts_report(report: "CoverageReport", config: "pytest.Config") -> None:
    """Receive the final coverage report at session finish.

    Called after the report is computed and before the terminal summary
    is printed. Must not raise.
    """
