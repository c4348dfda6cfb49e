# src/cts_harness/coverage/engine.py
"""CoverageEngine: diff registered tags against the function universe.

Algorithm (one consistent snapshot, no mutation):
1. Registered-tag set = distinct tags across all registrations. Several
   identities sharing a tag collapse into one member.
2. uncovered = universe - registered, in universe order.
3. duplicates[tag] = number of identities registered with tag, for every
   registered tag. Counts above one are warnings, not failures.
4. percentage = 100 * |universe ∩ registered| / |universe|, 0.0 when the
   universe is empty.
5. extraneous = registered - universe. Never counted, never a failure.

Coverage computed before every registration has happened undercounts;
the plugin only computes it after collection has finished.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence

from cts_harness.contracts import CaseRegistration, CoverageReport, FunctionTag
from cts_harness.registry.context import HarnessContext


def compute_coverage(
    registrations: Iterable[CaseRegistration],
    universe: Sequence[FunctionTag],
) -> CoverageReport:
    """Build a CoverageReport from plain registrations and universe tags."""
    counts: Counter[FunctionTag] = Counter()
    case_count = 0
    for registration in registrations:
        counts[registration.tag] += 1
        case_count += 1

    required = dict.fromkeys(universe)
    uncovered = tuple(tag for tag in required if tag not in counts)
    covered_count = len(required) - len(uncovered)
    extraneous = tuple(tag for tag in counts if tag not in required)

    percentage = 0.0 if not required else covered_count / len(required) * 100.0

    return CoverageReport(
        universe_size=len(required),
        registered_case_count=case_count,
        covered_count=covered_count,
        uncovered=uncovered,
        duplicates=dict(counts),
        extraneous=extraneous,
        percentage=percentage,
    )


class CoverageEngine:
    """Computes coverage reports over a HarnessContext.

    Usage:
        engine = CoverageEngine(context)
        report = engine.compute_report()
        if engine.get_coverage_percentage() < 80.0:
            ...
    """

    def __init__(self, context: HarnessContext) -> None:
        self._context = context

    def compute_report(self) -> CoverageReport:
        snapshot = self._context.snapshot()
        return compute_coverage(snapshot.registrations, snapshot.universe)

    def get_coverage_percentage(self) -> float:
        return self.compute_report().percentage
