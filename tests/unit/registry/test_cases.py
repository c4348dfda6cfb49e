# tests/unit/registry/test_cases.py
"""Tests for CaseRegistry and HarnessContext registration."""

import threading

from cts_harness.contracts import FunctionTag, TestIdentity
from cts_harness.registry import CaseRegistry, HarnessContext


class TestCaseRegistry:
    """Identity-keyed map semantics."""

    def test_register_and_lookup(self) -> None:
        registry = CaseRegistry()
        identity = TestIdentity("MathSuite", "test_add")
        registration = registry.register_case(identity, FunctionTag("MATH_ADD", "v1.0"))

        assert registry.lookup(identity) is registration
        assert identity in registry
        assert len(registry) == 1

    def test_lookup_unknown_identity_is_none(self) -> None:
        assert CaseRegistry().lookup(TestIdentity("s", "missing")) is None

    def test_reregistering_identity_overwrites(self) -> None:
        """Last write wins; the identity is counted once."""
        registry = CaseRegistry()
        identity = TestIdentity("MathSuite", "test_add")
        registry.register_case(identity, FunctionTag("MATH_ADD", "v1.0"))
        registry.register_case(identity, FunctionTag("MATH_ADD", "v2.0"), timeout_ms=100)

        assert len(registry) == 1
        current = registry.lookup(identity)
        assert current is not None
        assert current.tag == FunctionTag("MATH_ADD", "v2.0")
        assert current.timeout_ms == 100

    def test_entries_keep_first_insertion_order(self) -> None:
        registry = CaseRegistry()
        for name in ("c", "a", "b"):
            registry.register_case(TestIdentity("s", name), FunctionTag("F", "v1"))
        registry.register_case(TestIdentity("s", "c"), FunctionTag("G", "v1"))

        assert [r.identity.name for r in registry.entries()] == ["c", "a", "b"]

    def test_concurrent_registration_loses_nothing(self) -> None:
        registry = CaseRegistry()
        barrier = threading.Barrier(8)

        def register_many(worker: int) -> None:
            barrier.wait()
            for i in range(200):
                registry.register_case(TestIdentity(f"suite{worker}", f"test_{i}"), FunctionTag("F", "v1"))

        threads = [threading.Thread(target=register_many, args=(w,)) for w in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(registry) == 8 * 200


class TestHarnessContext:
    """Context wiring of registry, universe and results."""

    def test_declare_case_builds_identity_and_tag(self, context: HarnessContext) -> None:
        registration = context.declare_case("NetworkSuite", "test_good", "NETWORK_GOOD", "v2.0", timeout_ms=50)

        assert registration.identity == TestIdentity("NetworkSuite", "test_good")
        assert registration.tag == FunctionTag("NETWORK_GOOD", "v2.0")
        assert context.registry.lookup(registration.identity) is registration

    def test_snapshot_is_consistent_copy(self, math_context: HarnessContext) -> None:
        snapshot = math_context.snapshot()
        math_context.declare_case("s", "later", "MATH_DIV", "v1.0")

        assert len(snapshot.registrations) == 1
        assert snapshot.universe == (FunctionTag("MATH_ADD", "v1.0"), FunctionTag("MATH_DIV", "v1.0"))

    def test_components_share_one_lock(self, context: HarnessContext) -> None:
        assert context.registry._lock is context.universe._lock is context.results._lock
