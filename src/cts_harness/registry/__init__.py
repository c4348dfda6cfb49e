"""Shared, lock-guarded harness state: cases, universe and results."""

from cts_harness.registry.cases import CaseRegistry
from cts_harness.registry.context import HarnessContext, RegistrySnapshot
from cts_harness.registry.results import ResultStore
from cts_harness.registry.universe import FunctionUniverse

__all__ = [
    "CaseRegistry",
    "FunctionUniverse",
    "HarnessContext",
    "RegistrySnapshot",
    "ResultStore",
]
