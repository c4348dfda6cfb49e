# src/cts_harness/registry/cases.py
"""CaseRegistry: the single source of truth for "what was actually tested".

Registrations are keyed by TestIdentity. Registering an identity that is
already present silently replaces its tag, hooks and deadline (last write
wins); it is never a duplicate. Duplicates are distinct identities that
share one FunctionTag, and only CoverageEngine reports them.
"""

from __future__ import annotations

import threading

import structlog

from cts_harness.contracts import CaseRegistration, CheckHook, FunctionTag, TestIdentity

logger = structlog.get_logger(__name__)


class CaseRegistry:
    """Thread-safe ``TestIdentity -> CaseRegistration`` map.

    Registration normally happens once per test during pytest collection,
    but the lock makes concurrent registration safe anyway. The lock is held
    only for the dict operation itself.
    """

    def __init__(self, lock: threading.Lock | None = None) -> None:
        self._lock = lock if lock is not None else threading.Lock()
        self._entries: dict[TestIdentity, CaseRegistration] = {}

    def register(self, registration: CaseRegistration) -> None:
        """Insert or overwrite the registration for ``registration.identity``."""
        with self._lock:
            previous = self._entries.get(registration.identity)
            self._entries[registration.identity] = registration

        if previous is not None and previous.tag != registration.tag:
            logger.debug(
                "Registration overwritten",
                identity=str(registration.identity),
                previous_tag=str(previous.tag),
                tag=str(registration.tag),
            )

    def register_case(
        self,
        identity: TestIdentity,
        tag: FunctionTag,
        pre_check: CheckHook | None = None,
        post_check: CheckHook | None = None,
        timeout_ms: int | None = None,
    ) -> CaseRegistration:
        registration = CaseRegistration(
            identity=identity,
            tag=tag,
            pre_check=pre_check,
            post_check=post_check,
            timeout_ms=timeout_ms,
        )
        self.register(registration)
        return registration

    def lookup(self, identity: TestIdentity) -> CaseRegistration | None:
        with self._lock:
            return self._entries.get(identity)

    def entries(self) -> tuple[CaseRegistration, ...]:
        """Snapshot of all registrations in first-insertion order."""
        with self._lock:
            return tuple(self._entries.values())

    def _entries_unlocked(self) -> tuple[CaseRegistration, ...]:
        # Caller must already hold the shared lock.
        return tuple(self._entries.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, identity: object) -> bool:
        with self._lock:
            return identity in self._entries
