# tests/unit/engine/test_harness.py
"""Tests for ExecutionHarness deadline handling.

Timed-out bodies are abandoned, not stopped, so every slow body here
sleeps only a little longer than its deadline and the daemon worker
finishes on its own shortly after the test.
"""

import threading
import time

import pytest
from structlog.testing import capture_logs

from cts_harness.contracts import ExecutionOutcome, HarnessState
from cts_harness.engine import ExecutionHarness


class TestExecuteWithDeadline:
    """The boolean convenience API."""

    def test_fast_body_returns_true(self) -> None:
        harness = ExecutionHarness()
        assert harness.execute_with_deadline(lambda: None, timeout_ms=1000) is True
        assert harness.state is HarnessState.COMPLETED_PASS

    def test_slow_body_times_out(self) -> None:
        """1000 ms body under a 500 ms deadline returns False near 500 ms."""
        harness = ExecutionHarness()

        with capture_logs() as logs:
            started = time.monotonic()
            ok = harness.execute_with_deadline(lambda: time.sleep(1.0), timeout_ms=500)
            waited = time.monotonic() - started

        assert ok is False
        assert 0.45 <= waited < 0.95
        assert harness.state is HarnessState.TIMED_OUT
        assert harness.abandoned_workers == 1
        assert any("timed out after 500 ms" in entry["event"] for entry in logs)
        assert any(entry["log_level"] == "warning" for entry in logs)

    def test_raising_body_returns_false_and_logs(self) -> None:
        harness = ExecutionHarness()

        def body() -> None:
            raise RuntimeError("Intentional failure")

        with capture_logs() as logs:
            ok = harness.execute_with_deadline(body, timeout_ms=1000)

        assert ok is False
        assert harness.state is HarnessState.COMPLETED_FAIL
        errors = [entry for entry in logs if entry["log_level"] == "error"]
        assert errors
        assert "Intentional failure" in errors[0]["event"]
        assert errors[0]["error_type"] == "RuntimeError"

    @pytest.mark.parametrize("timeout_ms", [0, -5])
    def test_non_positive_timeout_rejected(self, timeout_ms: int) -> None:
        with pytest.raises(ValueError, match="timeout_ms must be positive"):
            ExecutionHarness().execute_with_deadline(lambda: None, timeout_ms=timeout_ms)


class TestExecute:
    """The detailed ExecutionResult API."""

    def test_passed_result(self) -> None:
        result = ExecutionHarness().execute(lambda: 42, timeout_ms=1000)

        assert result.outcome is ExecutionOutcome.PASSED
        assert result.timeout_ms == 1000
        assert result.captured is None
        assert result.elapsed_ms < 1000

    def test_failed_result_captures_exception(self) -> None:
        def body() -> None:
            raise KeyError("missing")

        result = ExecutionHarness().execute(body, timeout_ms=1000)

        assert result.outcome is ExecutionOutcome.FAILED
        assert result.error_type == "KeyError"
        assert result.captured is not None
        assert isinstance(result.captured.exception, KeyError)
        assert "KeyError" in result.captured.traceback

    def test_base_exception_in_body_is_captured(self) -> None:
        """SystemExit in a worker must not escape into the thread machinery."""

        def body() -> None:
            raise SystemExit(3)

        result = ExecutionHarness().execute(body, timeout_ms=1000)

        assert result.outcome is ExecutionOutcome.FAILED
        assert result.error_type == "SystemExit"

    def test_unprintable_exception_is_unknown(self) -> None:
        class Unprintable(Exception):
            def __str__(self) -> str:
                raise RuntimeError("no str")

        def body() -> None:
            raise Unprintable

        with capture_logs() as logs:
            result = ExecutionHarness().execute(body, timeout_ms=1000)

        assert result.error_type == ""
        assert result.describe() == "Test failed with unknown exception"
        assert any(entry["event"] == "Test failed with unknown exception" for entry in logs)

    def test_strict_mode_reraises_original(self) -> None:
        def body() -> None:
            raise ValueError("strict")

        with pytest.raises(ValueError, match="strict"):
            ExecutionHarness().execute(body, timeout_ms=1000, reraise=True)

    def test_strict_mode_does_not_apply_to_timeouts(self) -> None:
        result = ExecutionHarness().execute(lambda: time.sleep(0.3), timeout_ms=50, reraise=True)
        assert result.timed_out

    def test_worker_is_named_daemon(self) -> None:
        seen: list[threading.Thread] = []

        ExecutionHarness().execute(lambda: seen.append(threading.current_thread()), timeout_ms=1000, label="MathSuite.test_add")

        (worker,) = seen
        assert worker.daemon
        assert worker.name.startswith("cts-worker-")
        assert worker.name.endswith("-MathSuite.test_add")

    def test_abandoned_worker_keeps_running_until_done(self) -> None:
        harness = ExecutionHarness()
        release = threading.Event()
        finished = threading.Event()

        def body() -> None:
            release.wait(5)
            finished.set()

        result = harness.execute(body, timeout_ms=50, label="held")

        assert result.timed_out
        assert len(harness.live_abandoned_workers()) == 1
        release.set()
        assert finished.wait(5)
        deadline = time.monotonic() + 5
        while harness.live_abandoned_workers() and time.monotonic() < deadline:
            time.sleep(0.01)
        assert harness.live_abandoned_workers() == []
        assert harness.abandoned_workers == 1

    def test_finished_abandoned_workers_are_not_retained(self) -> None:
        harness = ExecutionHarness()
        release = threading.Event()

        for _ in range(5):
            assert harness.execute(lambda: release.wait(5), timeout_ms=20).timed_out
        release.set()

        deadline = time.monotonic() + 5
        while harness.live_abandoned_workers() and time.monotonic() < deadline:
            time.sleep(0.01)

        assert harness.abandoned_workers == 5
        assert harness._abandoned == []

    def test_invocations_are_independent(self) -> None:
        harness = ExecutionHarness()

        assert harness.execute(lambda: time.sleep(0.3), timeout_ms=50).timed_out
        assert harness.execute(lambda: None, timeout_ms=1000).passed
        assert harness.state is HarnessState.COMPLETED_PASS
