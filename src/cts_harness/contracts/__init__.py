"""Shared contracts for cross-boundary data types.

This package is a LEAF MODULE with no outbound dependencies to
registry/coverage/engine. Settings classes are NOT re-exported here;
import them from cts_harness.core.config.
"""

from cts_harness.contracts.enums import CheckPhase, ExecutionOutcome, HarnessState, ReportFormat
from cts_harness.contracts.errors import (
    CoverageThresholdError,
    DeclarationError,
    HarnessError,
    ReportDumpError,
    UniverseFileError,
)
from cts_harness.contracts.identity import FunctionTag, TestIdentity
from cts_harness.contracts.registration import CaseRegistration, CheckContext, CheckHook, CheckResult
from cts_harness.contracts.report import CoverageReport
from cts_harness.contracts.results import ExceptionResult, ExecutionResult

__all__ = [
    "CaseRegistration",
    "CheckContext",
    "CheckHook",
    "CheckPhase",
    "CheckResult",
    "CoverageReport",
    "CoverageThresholdError",
    "DeclarationError",
    "ExceptionResult",
    "ExecutionOutcome",
    "ExecutionResult",
    "FunctionTag",
    "HarnessError",
    "HarnessState",
    "ReportDumpError",
    "ReportFormat",
    "TestIdentity",
    "UniverseFileError",
]
