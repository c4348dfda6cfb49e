# src/cts_harness/contracts/results.py
"""Outcome records for deadline-guarded execution."""

from __future__ import annotations

from dataclasses import dataclass

from cts_harness.contracts.enums import ExecutionOutcome


@dataclass(frozen=True, slots=True)
class ExceptionResult:
    """Exception captured inside a worker thread.

    Never re-raised across the worker boundary by the worker itself; the
    caller decides whether to surface it (strict mode) or only report it.
    """

    exception: BaseException
    traceback: str


@dataclass(frozen=True, slots=True)
class ExecutionResult:
    """Result of one ExecutionHarness invocation.

    Fields:
        outcome: PASSED, FAILED or TIMED_OUT
        timeout_ms: Deadline that applied to this invocation
        elapsed_ms: Wall-clock time the caller spent waiting
        error: Message of the captured failure, empty on success/timeout
        error_type: Exception class name, empty when unknown
        captured: The worker's captured exception, if any
    """

    outcome: ExecutionOutcome
    timeout_ms: int
    elapsed_ms: float
    error: str = ""
    error_type: str = ""
    captured: ExceptionResult | None = None

    @property
    def passed(self) -> bool:
        return self.outcome is ExecutionOutcome.PASSED

    @property
    def timed_out(self) -> bool:
        return self.outcome is ExecutionOutcome.TIMED_OUT

    def describe(self) -> str:
        """One-line human description, used as the pytest failure message."""
        if self.outcome is ExecutionOutcome.PASSED:
            return f"Test passed in {self.elapsed_ms:.0f} ms (limit {self.timeout_ms} ms)"
        if self.outcome is ExecutionOutcome.TIMED_OUT:
            return f"Test timed out after {self.timeout_ms} ms (thread detached)"
        if self.error_type:
            return f"Test failed with exception: {self.error_type}: {self.error}"
        return "Test failed with unknown exception"
