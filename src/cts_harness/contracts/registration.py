# src/cts_harness/contracts/registration.py
"""Registration records and verification-hook contracts.

A CaseRegistration is the single answer to "what did this test claim to
exercise, and how is it verified?". Registrations are immutable; changing a
test's tag or hooks means registering again (last write wins).
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from cts_harness.contracts.enums import CheckPhase
from cts_harness.contracts.identity import FunctionTag, TestIdentity

if TYPE_CHECKING:
    from cts_harness.registry.results import ResultStore


@dataclass(frozen=True, slots=True)
class CheckContext:
    """What a pre/post-check hook gets to see.

    ``results`` is the shared ResultStore, so a post-check can read values
    the test body stored with ``results.set(...)``.
    """

    identity: TestIdentity
    tag: FunctionTag
    results: ResultStore


CheckHook = Callable[[CheckContext], None]


@dataclass(frozen=True, slots=True)
class CaseRegistration:
    """Binding of one test identity to its tag, hooks and deadline."""

    identity: TestIdentity
    tag: FunctionTag
    pre_check: CheckHook | None = None
    post_check: CheckHook | None = None
    timeout_ms: int | None = None

    def hook_for(self, phase: CheckPhase) -> CheckHook | None:
        if phase is CheckPhase.PRE:
            return self.pre_check
        return self.post_check


@dataclass(frozen=True, slots=True)
class CheckResult:
    """A verification hook that raised.

    Produced by CheckDispatcher; the pytest plugin turns it into an extra
    failure on the owning test.
    """

    phase: CheckPhase
    identity: TestIdentity
    tag: FunctionTag
    error: str
    error_type: str

    @property
    def message(self) -> str:
        if self.error_type:
            return f"{self.phase} failed with exception: {self.error}"
        return f"{self.phase} failed with unknown exception"
