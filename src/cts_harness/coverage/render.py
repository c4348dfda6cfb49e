# src/cts_harness/coverage/render.py
"""Human-readable and machine-readable coverage report output."""

from __future__ import annotations

import json

from cts_harness.contracts import CoverageReport

REPORT_HEADER = "=== CTS Coverage Report ==="
REPORT_FOOTER = "========================="


def format_percentage(percentage: float) -> str:
    return f"{percentage:.1f}%"


def render_text(
    report: CoverageReport,
    *,
    show_extraneous: bool = False,
    abandoned_workers: int = 0,
) -> str:
    """Render the textual end-of-run report.

    Args:
        report: Report to render
        show_extraneous: Include the "not in universe" section when non-empty
        abandoned_workers: Number of timed-out workers left running; a
            warning line is added when non-zero
    """
    lines = [
        REPORT_HEADER,
        f"Total functions defined: {report.universe_size}",
        f"Test cases registered: {report.registered_case_count}",
        "",
    ]

    if report.fully_covered:
        lines.append("✓ All functions are covered!")
    else:
        lines.append(f"✗ Uncovered functions ({len(report.uncovered)}):")
        lines.extend(f"  - {tag}" for tag in report.uncovered)

    lines.append("")
    lines.append("Registered functions:")
    for tag, count in report.duplicates.items():
        suffix = f" (WARNING: registered {count} times)" if count > 1 else ""
        lines.append(f"  - {tag}{suffix}")

    if show_extraneous and report.extraneous:
        lines.append("")
        lines.append(f"Extraneous functions (not in universe) ({len(report.extraneous)}):")
        lines.extend(f"  - {tag}" for tag in report.extraneous)

    if abandoned_workers:
        lines.append("")
        lines.append(f"WARNING: {abandoned_workers} timed-out test worker(s) were abandoned and may still be running")

    lines.append("")
    lines.append(f"Coverage: {format_percentage(report.percentage)}")
    lines.append(REPORT_FOOTER)
    return "\n".join(lines)


def render_json(report: CoverageReport, *, abandoned_workers: int = 0) -> str:
    payload = report.to_dict()
    payload["abandoned_workers"] = abandoned_workers
    return json.dumps(payload, indent=2, ensure_ascii=False)
