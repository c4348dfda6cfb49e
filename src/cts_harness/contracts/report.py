# src/cts_harness/contracts/report.py
"""Coverage report contract.

Computed on demand by CoverageEngine; never persisted by the engine itself.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from cts_harness.contracts.identity import FunctionTag


@dataclass(frozen=True)
class CoverageReport:
    """Snapshot of universe coverage after (or during) a run.

    Attributes:
        universe_size: Number of distinct tags that must be covered
        registered_case_count: Number of registered test identities
        covered_count: |universe ∩ registered tags|
        uncovered: Universe tags nobody registered, in universe order
        duplicates: Identity count for EVERY registered tag, in first
            registration order (use ``warnings`` for the counts above one)
        extraneous: Registered tags absent from the universe; they never
            count toward coverage
        percentage: 100 * covered_count / universe_size, 0.0 for an empty universe
    """

    universe_size: int
    registered_case_count: int
    covered_count: int
    uncovered: tuple[FunctionTag, ...]
    duplicates: Mapping[FunctionTag, int] = field(default_factory=dict)
    extraneous: tuple[FunctionTag, ...] = ()
    percentage: float = 0.0

    @property
    def registered(self) -> tuple[FunctionTag, ...]:
        """Distinct registered tags in first registration order."""
        return tuple(self.duplicates)

    @property
    def warnings(self) -> dict[FunctionTag, int]:
        """Tags registered by more than one test identity."""
        return {tag: count for tag, count in self.duplicates.items() if count > 1}

    @property
    def fully_covered(self) -> bool:
        return not self.uncovered

    def meets(self, threshold: float | None) -> bool:
        """Whether coverage reaches ``threshold`` percent (None always passes)."""
        if threshold is None:
            return True
        return self.percentage >= threshold

    def to_dict(self) -> dict[str, Any]:
        return {
            "universe_size": self.universe_size,
            "registered_case_count": self.registered_case_count,
            "covered_count": self.covered_count,
            "uncovered": [str(tag) for tag in self.uncovered],
            "registered": {str(tag): count for tag, count in self.duplicates.items()},
            "duplicates": {str(tag): count for tag, count in self.warnings.items()},
            "extraneous": [str(tag) for tag in self.extraneous],
            "percentage": round(self.percentage, 4),
        }
