# src/cts_harness/engine/dispatcher.py
"""CheckDispatcher: run a test's registered pre/post-check hooks.

Lifecycle (wired by the pytest plugin):
    setup start  -> run_pre_check(identity)
    body
    teardown end -> run_post_check(identity)   # always, even after failures

Failure isolation:
    A hook that raises never propagates. The error is logged with the test
    identity and tag, and returned as a CheckResult so the caller can record
    it as an extra failure on the test. Missing registrations and missing
    hooks are no-ops. pytest outcomes (``pytest.skip``, ``pytest.fail``)
    are BaseExceptions and pass through untouched, so a pre-check can still
    skip a test whose environment is not ready.

Locking:
    The registration is looked up under the context lock; the hook itself
    runs with the lock released, so hooks may use the ResultStore freely.
"""

from __future__ import annotations

import structlog

from cts_harness.contracts import CheckContext, CheckPhase, CheckResult, TestIdentity
from cts_harness.registry.context import HarnessContext

logger = structlog.get_logger(__name__)


class CheckDispatcher:
    """Resolves a test identity to its hooks and invokes them."""

    def __init__(self, context: HarnessContext) -> None:
        self._context = context

    def run_pre_check(self, identity: TestIdentity) -> CheckResult | None:
        return self._run(CheckPhase.PRE, identity)

    def run_post_check(self, identity: TestIdentity) -> CheckResult | None:
        return self._run(CheckPhase.POST, identity)

    def _run(self, phase: CheckPhase, identity: TestIdentity) -> CheckResult | None:
        registration = self._context.registry.lookup(identity)
        if registration is None:
            return None
        hook = registration.hook_for(phase)
        if hook is None:
            return None

        logger.info(
            f"Executing {phase} for {registration.tag}",
            test=str(identity),
            tag=str(registration.tag),
        )
        check_context = CheckContext(identity=identity, tag=registration.tag, results=self._context.results)
        try:
            hook(check_context)
        except Exception as e:
            try:
                error, error_type = str(e) or type(e).__name__, type(e).__name__
            except Exception:
                error, error_type = "", ""
            result = CheckResult(
                phase=phase,
                identity=identity,
                tag=registration.tag,
                error=error,
                error_type=error_type,
            )
            logger.error(
                result.message,
                test=str(identity),
                tag=str(registration.tag),
                error_type=error_type,
            )
            return result
        return None
