# src/cts_harness/core/universe.py
"""Loading the function universe from a YAML or JSON file.

File format (JSON is accepted too, being a YAML subset):

    functions:
      - id: MATH_ADD
        version: v1.0
      - MATH_MULTIPLY:v1.0

A bare top-level list is accepted as shorthand for ``functions:``.
Duplicate entries collapse; order of first appearance is kept.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, ValidationError

from cts_harness.contracts import FunctionTag, UniverseFileError


class FunctionEntry(BaseModel):
    """One ``{id, version}`` mapping in a universe file."""

    model_config = {"frozen": True, "extra": "forbid"}

    id: str = Field(min_length=1)
    version: str = Field(min_length=1)

    def to_tag(self) -> FunctionTag:
        return FunctionTag(self.id, self.version)


class UniverseDocument(BaseModel):
    """Validated universe file contents."""

    model_config = {"frozen": True}

    functions: list[FunctionEntry | str] = Field(default_factory=list)

    def tags(self) -> tuple[FunctionTag, ...]:
        ordered: dict[FunctionTag, None] = {}
        for entry in self.functions:
            tag = entry.to_tag() if isinstance(entry, FunctionEntry) else FunctionTag.parse(entry)
            ordered.setdefault(tag, None)
        return tuple(ordered)


def parse_universe(data: Any, *, source: str = "<data>") -> tuple[FunctionTag, ...]:
    """Validate already-parsed universe data.

    Raises:
        UniverseFileError: If the structure or any entry is invalid.
    """
    if data is None:
        return ()
    if isinstance(data, list):
        data = {"functions": data}
    if not isinstance(data, dict):
        raise UniverseFileError(f"{source}: expected a mapping with 'functions' or a list, got {type(data).__name__}")
    try:
        return UniverseDocument.model_validate(data).tags()
    except ValidationError as e:
        raise UniverseFileError(f"{source}: invalid universe: {e}") from e
    except ValueError as e:
        raise UniverseFileError(f"{source}: invalid function entry: {e}") from e


def load_universe(path: Path) -> tuple[FunctionTag, ...]:
    """Read and validate a universe file.

    Raises:
        UniverseFileError: If the file is missing, not YAML, or invalid.
    """
    if not path.exists():
        raise UniverseFileError(f"Universe file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise UniverseFileError(f"Invalid YAML in universe file {path}: {e}") from e
    return parse_universe(data, source=str(path))
