# src/cts_harness/declare.py
"""Declaring conformance cases on pytest tests.

A test declares the function it exercises with the ``cts`` marker, either
directly or through the ``cts_case`` helper:

    @cts_case("MATH_ADD", "v1.0")
    def test_addition(): ...

    @pytest.mark.cts("NETWORK_GOOD", "v2.0", post_check=connection_closed)
    def test_good_connection(cts_results): ...

    @cts_case("PERF_SLOW", "v1.0", timeout_ms=800)
    def test_slow_operation(): ...

Registration itself happens in the pytest plugin once collection is
complete, before any test runs.
"""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from cts_harness.contracts import CheckHook, DeclarationError, FunctionTag

MARKER_NAME = "cts"
MARKER_HELP = (
    "cts(function_id, function_version, *, pre_check=None, post_check=None, timeout_ms=None): "
    "bind the test to a required function; optional verification hooks and deadline"
)

_ALLOWED_KWARGS = frozenset({"function_id", "function_version", "pre_check", "post_check", "timeout_ms"})


@dataclass(frozen=True, slots=True)
class CaseDeclaration:
    """Parsed and validated ``cts`` marker arguments."""

    tag: FunctionTag
    pre_check: CheckHook | None = None
    post_check: CheckHook | None = None
    timeout_ms: int | None = None


def cts_case(
    function_id: str,
    function_version: str,
    *,
    pre_check: CheckHook | None = None,
    post_check: CheckHook | None = None,
    timeout_ms: int | None = None,
) -> pytest.MarkDecorator:
    """Return a ``pytest.mark.cts`` decorator for one required function."""
    return getattr(pytest.mark, MARKER_NAME)(
        function_id,
        function_version,
        pre_check=pre_check,
        post_check=post_check,
        timeout_ms=timeout_ms,
    )


def parse_declaration(mark: pytest.Mark, nodeid: str = "") -> CaseDeclaration:
    """Validate a ``cts`` marker.

    Raises:
        DeclarationError: On missing/extra arguments, non-callable hooks
            or a non-positive timeout.
    """
    unknown = set(mark.kwargs) - _ALLOWED_KWARGS
    if unknown:
        raise DeclarationError(nodeid, f"unknown argument(s): {', '.join(sorted(unknown))}")

    args = list(mark.args)
    if len(args) > 2:
        raise DeclarationError(nodeid, f"expected (function_id, function_version), got {len(args)} positional arguments")
    function_id = args[0] if args else mark.kwargs.get("function_id")
    function_version = args[1] if len(args) > 1 else mark.kwargs.get("function_version")
    if not isinstance(function_id, str) or not function_id:
        raise DeclarationError(nodeid, "function_id must be a non-empty string")
    if not isinstance(function_version, str) or not function_version:
        raise DeclarationError(nodeid, "function_version must be a non-empty string")

    pre_check = mark.kwargs.get("pre_check")
    post_check = mark.kwargs.get("post_check")
    for label, hook in (("pre_check", pre_check), ("post_check", post_check)):
        if hook is not None and not callable(hook):
            raise DeclarationError(nodeid, f"{label} must be callable, got {type(hook).__name__}")

    timeout_ms = mark.kwargs.get("timeout_ms")
    if timeout_ms is not None:
        if isinstance(timeout_ms, bool) or not isinstance(timeout_ms, int) or timeout_ms <= 0:
            raise DeclarationError(nodeid, f"timeout_ms must be a positive integer, got {timeout_ms!r}")

    return CaseDeclaration(
        tag=FunctionTag(function_id, function_version),
        pre_check=pre_check,
        post_check=post_check,
        timeout_ms=timeout_ms,
    )
