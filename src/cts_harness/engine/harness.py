# src/cts_harness/engine/harness.py
"""ExecutionHarness: run a test body under a best-effort wall-clock deadline.

Architecture:
    caller ──start──> worker thread ──body()──> ExceptionResult | None
      │                    │
      └──Event.wait(timeout)◄──done.set()

The body runs on its own daemon thread. The caller blocks on a
threading.Event for at most ``timeout_ms``:

- Event set in time: the worker is joined and its outcome propagated
  (PASSED, or FAILED with the captured error logged).
- Deadline first: the caller stops waiting and returns TIMED_OUT. The
  worker is NOT joined and NOT stopped.

Limitation (part of the contract):
    Python cannot preempt a thread. A timed-out body keeps running, and
    keeps whatever resources it holds, until it returns on its own. Its
    side effects after the deadline are unknown to the caller. Only process
    isolation gives a hard kill; this harness does not provide it. Abandoned
    workers are daemon threads so they never block interpreter exit, and
    they are counted so the end-of-run report can warn about them.
"""

from __future__ import annotations

import threading
import time
import traceback
from collections.abc import Callable
from itertools import count

import structlog

from cts_harness.contracts import ExceptionResult, ExecutionOutcome, ExecutionResult, HarnessState

logger = structlog.get_logger(__name__)

_worker_ids = count(1)


def _describe_exception(exc: BaseException) -> tuple[str, str]:
    """Return (message, type name), or ("", "") if the exception can't be described."""
    try:
        return str(exc) or type(exc).__name__, type(exc).__name__
    except Exception:
        return "", ""


class ExecutionHarness:
    """Deadline-bounded execution of test bodies.

    One harness is shared by a pytest session; each execute() call is an
    independent invocation with its own worker.

    Usage:
        harness = ExecutionHarness()
        ok = harness.execute_with_deadline(lambda: slow_operation(), timeout_ms=500)

        result = harness.execute(body, timeout_ms=500)
        if result.timed_out:
            ...
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._abandoned_count = 0
        # Only workers that may still be running; finished ones are pruned
        self._abandoned: list[threading.Thread] = []
        self._state = HarnessState.IDLE

    @property
    def state(self) -> HarnessState:
        """State of the most recent invocation."""
        return self._state

    @property
    def abandoned_workers(self) -> int:
        """Number of workers ever abandoned on timeout."""
        with self._lock:
            return self._abandoned_count

    def live_abandoned_workers(self) -> list[str]:
        """Names of abandoned workers that are still running."""
        with self._lock:
            self._abandoned = [t for t in self._abandoned if t.is_alive()]
            return [t.name for t in self._abandoned]

    def execute_with_deadline(self, body: Callable[[], object], timeout_ms: int) -> bool:
        """Run ``body`` under ``timeout_ms``; True only if it returned before the deadline."""
        return self.execute(body, timeout_ms).passed

    def execute(
        self,
        body: Callable[[], object],
        timeout_ms: int,
        *,
        reraise: bool = False,
        label: str = "",
    ) -> ExecutionResult:
        """Run ``body`` on a worker thread and wait at most ``timeout_ms``.

        Args:
            body: Zero-argument callable; its return value is ignored
            timeout_ms: Deadline in milliseconds (must be positive)
            reraise: Strict mode. If the body raised and the worker was
                joined, re-raise the original exception in the caller
                instead of returning a FAILED result. Never applies to
                timeouts.
            label: Included in the worker thread name and log events

        Returns:
            ExecutionResult with outcome PASSED, FAILED or TIMED_OUT

        Raises:
            ValueError: If timeout_ms is not positive.
            BaseException: The body's own exception, only when reraise=True.
        """
        if timeout_ms <= 0:
            raise ValueError(f"timeout_ms must be positive, got {timeout_ms}")

        done = threading.Event()
        outcome: list[ExceptionResult] = []

        def _run() -> None:
            try:
                body()
            except BaseException as exc:  # nothing may escape the worker
                outcome.append(ExceptionResult(exception=exc, traceback=traceback.format_exc()))
            finally:
                done.set()

        worker = threading.Thread(
            target=_run,
            name=f"cts-worker-{next(_worker_ids)}" + (f"-{label}" if label else ""),
            daemon=True,
        )

        started = time.monotonic()
        self._state = HarnessState.RUNNING
        worker.start()

        if not done.wait(timeout=timeout_ms / 1000.0):
            elapsed_ms = (time.monotonic() - started) * 1000.0
            with self._lock:
                self._abandoned_count += 1
                self._abandoned = [t for t in self._abandoned if t.is_alive()]
                self._abandoned.append(worker)
            self._state = HarnessState.TIMED_OUT
            logger.warning(
                f"Test timed out after {timeout_ms} ms (thread detached)",
                test=label,
                timeout_ms=timeout_ms,
                worker=worker.name,
            )
            return ExecutionResult(
                outcome=ExecutionOutcome.TIMED_OUT,
                timeout_ms=timeout_ms,
                elapsed_ms=elapsed_ms,
            )

        worker.join()
        elapsed_ms = (time.monotonic() - started) * 1000.0

        if not outcome:
            self._state = HarnessState.COMPLETED_PASS
            logger.debug("Guarded test body completed", test=label, elapsed_ms=round(elapsed_ms, 1))
            return ExecutionResult(
                outcome=ExecutionOutcome.PASSED,
                timeout_ms=timeout_ms,
                elapsed_ms=elapsed_ms,
            )

        captured = outcome[0]
        error, error_type = _describe_exception(captured.exception)
        self._state = HarnessState.COMPLETED_FAIL
        if error_type:
            logger.error(
                f"Test failed with exception: {error}",
                test=label,
                error_type=error_type,
                elapsed_ms=round(elapsed_ms, 1),
            )
        else:
            logger.error("Test failed with unknown exception", test=label, elapsed_ms=round(elapsed_ms, 1))

        if reraise:
            raise captured.exception

        return ExecutionResult(
            outcome=ExecutionOutcome.FAILED,
            timeout_ms=timeout_ms,
            elapsed_ms=elapsed_ms,
            error=error,
            error_type=error_type,
            captured=captured,
        )
