"""Test-time machinery: deadline-bounded execution and check dispatch."""

from cts_harness.engine.dispatcher import CheckDispatcher
from cts_harness.engine.harness import ExecutionHarness

__all__ = [
    "CheckDispatcher",
    "ExecutionHarness",
]
