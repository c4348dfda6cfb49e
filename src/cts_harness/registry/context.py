# src/cts_harness/registry/context.py
"""HarnessContext: explicit owner of all shared harness state.

One context is created per pytest session (in ``pytest_configure``) and
dropped in ``pytest_unconfigure``. Everything that needs the registry,
universe or result store receives the context instead of reaching for
module-level globals, so tests can build as many isolated contexts as
they like.

Thread Safety:
    CaseRegistry, FunctionUniverse and ResultStore share ONE coarse lock.
    It is held for a single map operation at a time (or one consistent
    snapshot), never across a hook call or a deadline wait.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from cts_harness.contracts import CaseRegistration, CheckHook, FunctionTag, TestIdentity
from cts_harness.registry.cases import CaseRegistry
from cts_harness.registry.results import ResultStore
from cts_harness.registry.universe import FunctionUniverse


@dataclass(frozen=True, slots=True)
class RegistrySnapshot:
    """Registrations and universe read under one lock acquisition."""

    registrations: tuple[CaseRegistration, ...]
    universe: tuple[FunctionTag, ...]


class HarnessContext:
    """Registry, universe and result store behind one lock.

    Usage:
        context = HarnessContext()
        context.set_universe(["MATH_ADD:v1.0", "MATH_DIV:v1.0"])
        context.declare_case("tests/test_math.py", "test_add", "MATH_ADD", "v1.0")
        report = CoverageEngine(context).compute_report()
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.registry = CaseRegistry(self._lock)
        self.universe = FunctionUniverse(self._lock)
        self.results = ResultStore(self._lock)

    def declare_case(
        self,
        suite: str,
        name: str,
        function_id: str,
        function_version: str,
        *,
        pre_check: CheckHook | None = None,
        post_check: CheckHook | None = None,
        timeout_ms: int | None = None,
    ) -> CaseRegistration:
        """Register a case by its raw suite/name and tag fields."""
        return self.registry.register_case(
            TestIdentity(suite, name),
            FunctionTag(function_id, function_version),
            pre_check=pre_check,
            post_check=post_check,
            timeout_ms=timeout_ms,
        )

    def set_universe(self, tags: Iterable[Any]) -> None:
        self.universe.set_universe(tags)

    def snapshot(self) -> RegistrySnapshot:
        with self._lock:
            return RegistrySnapshot(
                registrations=self.registry._entries_unlocked(),
                universe=self.universe._tags_unlocked(),
            )

