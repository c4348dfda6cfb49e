"""Coverage computation, rendering and persistence."""

from cts_harness.coverage.engine import CoverageEngine, compute_coverage
from cts_harness.coverage.render import render_json, render_text

__all__ = [
    "CoverageEngine",
    "compute_coverage",
    "render_json",
    "render_text",
]
