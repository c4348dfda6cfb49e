# src/cts_harness/contracts/identity.py
"""Identifiers for required functionality and for test cases.

These types answer: "What must be exercised?" (FunctionTag) and
"Which test exercised it?" (TestIdentity).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import pytest


@dataclass(frozen=True, slots=True)
class FunctionTag:
    """One unit of required functionality, identified by (id, version).

    Equality and hashing use both fields, so "MATH_ADD:v1.0" and
    "MATH_ADD:v1.1" are different tags.
    """

    id: str
    version: str

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("FunctionTag id must be a non-empty string")
        if not self.version:
            raise ValueError(f"FunctionTag {self.id!r} must have a non-empty version")

    def __str__(self) -> str:
        return f"{self.id}:{self.version}"

    @classmethod
    def parse(cls, text: str) -> FunctionTag:
        """Parse an ``id:version`` string.

        Splits on the LAST colon so identifiers may themselves contain colons
        (``net:tcp:v2`` -> id ``net:tcp``, version ``v2``).

        Raises:
            ValueError: If there is no colon or either side is empty.
        """
        function_id, sep, version = text.strip().rpartition(":")
        if not sep:
            raise ValueError(f"Expected 'id:version', got {text!r}")
        return cls(function_id, version)

    @classmethod
    def coerce(cls, value: Any) -> FunctionTag:
        """Accept a FunctionTag, an ``(id, version)`` pair or an ``id:version`` string."""
        if isinstance(value, FunctionTag):
            return value
        if isinstance(value, str):
            return cls.parse(value)
        if isinstance(value, tuple | list) and len(value) == 2:
            return cls(str(value[0]), str(value[1]))
        raise TypeError(f"Cannot interpret {value!r} as a FunctionTag")


@dataclass(frozen=True, slots=True)
class TestIdentity:
    """One test case as pytest knows it.

    ``suite`` is the node id without its last ``::`` segment
    (``tests/test_math.py::TestBasic``); ``name`` is the item name,
    including any parametrization suffix.
    """

    __test__ = False  # not a pytest test class

    suite: str
    name: str

    def __str__(self) -> str:
        return f"{self.suite}.{self.name}"

    @classmethod
    def from_item(cls, item: pytest.Item) -> TestIdentity:
        """Derive the identity of the item pytest is collecting or running."""
        suite, _, _ = item.nodeid.rpartition("::")
        return cls(suite, item.name)
