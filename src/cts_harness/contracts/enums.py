"""Status codes and phases shared across harness boundaries."""

from enum import StrEnum


class ExecutionOutcome(StrEnum):
    """Terminal state of one deadline-guarded invocation.

    PASSED and FAILED both mean the worker finished before the deadline.
    TIMED_OUT means the caller stopped waiting; the worker may still be
    running and its eventual result is never observed.
    """

    PASSED = "passed"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


class HarnessState(StrEnum):
    """Lifecycle of a guarded invocation.

    IDLE -> RUNNING -> {COMPLETED_PASS | COMPLETED_FAIL | TIMED_OUT}
    """

    IDLE = "idle"
    RUNNING = "running"
    COMPLETED_PASS = "completed_pass"
    COMPLETED_FAIL = "completed_fail"
    TIMED_OUT = "timed_out"


class CheckPhase(StrEnum):
    """Which verification hook a check result belongs to."""

    PRE = "PreCheck"
    POST = "PostCheck"


class ReportFormat(StrEnum):
    """Rendering of the end-of-run coverage report."""

    TEXT = "text"
    JSON = "json"
    NONE = "none"
