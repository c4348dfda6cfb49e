"""
CTS Harness: conformance-test coverage and deadlines for pytest.

Binds each test to a versioned required-function tag, diffs the registered
tags against an externally supplied universe, and runs guarded test bodies
under a best-effort wall-clock deadline.
"""

__version__ = "0.2.0"

from cts_harness.contracts import CheckContext, FunctionTag, TestIdentity  # noqa: E402
from cts_harness.coverage.engine import CoverageEngine  # noqa: E402
from cts_harness.declare import cts_case  # noqa: E402
from cts_harness.engine import CheckDispatcher, ExecutionHarness  # noqa: E402
from cts_harness.registry import HarnessContext, ResultStore  # noqa: E402

__all__ = [
    "CheckContext",
    "CheckDispatcher",
    "CoverageEngine",
    "ExecutionHarness",
    "FunctionTag",
    "HarnessContext",
    "ResultStore",
    "TestIdentity",
    "__version__",
    "cts_case",
]
