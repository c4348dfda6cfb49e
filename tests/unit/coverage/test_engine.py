# tests/unit/coverage/test_engine.py
"""Tests for CoverageEngine and compute_coverage."""

import pytest

from cts_harness.contracts import FunctionTag
from cts_harness.coverage import CoverageEngine
from cts_harness.registry import HarnessContext

ADD = FunctionTag("MATH_ADD", "v1.0")
MUL = FunctionTag("MATH_MULTIPLY", "v1.0")
DIV = FunctionTag("MATH_DIV", "v1.0")


class TestCoverageScenarios:
    """End-to-end coverage computations over a context."""

    def test_partial_coverage(self, math_context: HarnessContext) -> None:
        """Universe {ADD, DIV}, one case for ADD: 50%, DIV uncovered."""
        report = CoverageEngine(math_context).compute_report()

        assert report.universe_size == 2
        assert report.registered_case_count == 1
        assert report.covered_count == 1
        assert report.uncovered == (DIV,)
        assert report.duplicates == {ADD: 1}
        assert report.warnings == {}
        assert report.percentage == pytest.approx(50.0)

    def test_duplicate_registration_warns_but_covers(self, context: HarnessContext) -> None:
        """Two identities on one tag: counted twice, covered once."""
        context.set_universe([ADD, MUL])
        context.declare_case("MathSuite", "test_add_a", "MATH_ADD", "v1.0")
        context.declare_case("MathSuite", "test_add_b", "MATH_ADD", "v1.0")
        context.declare_case("MathSuite", "test_mul", "MATH_MULTIPLY", "v1.0")

        report = CoverageEngine(context).compute_report()

        assert report.warnings == {ADD: 2}
        assert report.uncovered == ()
        assert report.fully_covered
        assert report.registered_case_count == 3
        assert report.percentage == pytest.approx(100.0)

    def test_same_identity_twice_is_not_a_duplicate(self, context: HarnessContext) -> None:
        context.set_universe([ADD])
        context.declare_case("MathSuite", "test_add", "MATH_ADD", "v1.0")
        context.declare_case("MathSuite", "test_add", "MATH_ADD", "v1.0")

        report = CoverageEngine(context).compute_report()

        assert report.duplicates == {ADD: 1}
        assert report.registered_case_count == 1

    def test_empty_universe_is_zero_percent(self, context: HarnessContext) -> None:
        context.declare_case("MathSuite", "test_add", "MATH_ADD", "v1.0")

        report = CoverageEngine(context).compute_report()

        assert report.universe_size == 0
        assert report.percentage == 0.0
        assert report.extraneous == (ADD,)

    def test_nothing_registered(self, context: HarnessContext) -> None:
        context.set_universe([ADD, DIV])

        report = CoverageEngine(context).compute_report()

        assert report.uncovered == (ADD, DIV)
        assert report.percentage == 0.0
        assert report.registered == ()

    def test_extraneous_tags_do_not_count(self, math_context: HarnessContext) -> None:
        math_context.declare_case("Legacy", "test_old", "MATH_ADD", "v0.9")

        report = CoverageEngine(math_context).compute_report()

        assert report.extraneous == (FunctionTag("MATH_ADD", "v0.9"),)
        assert report.covered_count == 1
        assert report.percentage == pytest.approx(50.0)

    def test_uncovered_follows_universe_order(self, context: HarnessContext) -> None:
        context.set_universe([DIV, MUL, ADD])
        context.declare_case("MathSuite", "test_mul", "MATH_MULTIPLY", "v1.0")

        assert CoverageEngine(context).compute_report().uncovered == (DIV, ADD)

    def test_report_reflects_replaced_universe(self, math_context: HarnessContext) -> None:
        engine = CoverageEngine(math_context)
        assert engine.get_coverage_percentage() == pytest.approx(50.0)

        math_context.set_universe([ADD])

        assert engine.get_coverage_percentage() == pytest.approx(100.0)

    def test_compute_report_does_not_mutate(self, math_context: HarnessContext) -> None:
        before = math_context.snapshot()
        CoverageEngine(math_context).compute_report()

        assert math_context.snapshot() == before
