# src/cts_harness/coverage/dump.py
"""JSON dump of a run's registrations and universe.

Written by the pytest plugin (``--cts-report-file``) and read back by
``cts-harness report`` so coverage can be re-rendered, or re-checked
against another universe, without re-running the tests. Hooks are not
serializable; only whether a hook was present is recorded.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, ValidationError, field_validator

from cts_harness.contracts import CaseRegistration, FunctionTag, ReportDumpError, TestIdentity
from cts_harness.coverage.engine import compute_coverage
from cts_harness.registry.context import RegistrySnapshot

DUMP_FORMAT_VERSION = 1


class RegistrationRecord(BaseModel):
    """Serializable view of one CaseRegistration."""

    model_config = {"frozen": True}

    suite: str
    name: str
    function_id: str = Field(min_length=1)
    function_version: str = Field(min_length=1)
    timeout_ms: int | None = Field(default=None, gt=0)
    has_pre_check: bool = False
    has_post_check: bool = False

    @classmethod
    def from_registration(cls, registration: CaseRegistration) -> RegistrationRecord:
        return cls(
            suite=registration.identity.suite,
            name=registration.identity.name,
            function_id=registration.tag.id,
            function_version=registration.tag.version,
            timeout_ms=registration.timeout_ms,
            has_pre_check=registration.pre_check is not None,
            has_post_check=registration.post_check is not None,
        )

    def to_registration(self) -> CaseRegistration:
        return CaseRegistration(
            identity=TestIdentity(self.suite, self.name),
            tag=FunctionTag(self.function_id, self.function_version),
            timeout_ms=self.timeout_ms,
        )


class RunDump(BaseModel):
    """On-disk document written at the end of a pytest session."""

    model_config = {"frozen": True}

    format_version: Literal[1] = DUMP_FORMAT_VERSION
    universe: list[str] = Field(default_factory=list)
    registrations: list[RegistrationRecord] = Field(default_factory=list)
    report: dict[str, Any] = Field(default_factory=dict)

    @field_validator("universe")
    @classmethod
    def validate_universe(cls, v: list[str]) -> list[str]:
        for text in v:
            FunctionTag.parse(text)
        return v

    @classmethod
    def from_snapshot(cls, snapshot: RegistrySnapshot) -> RunDump:
        report = compute_coverage(snapshot.registrations, snapshot.universe)
        return cls(
            universe=[str(tag) for tag in snapshot.universe],
            registrations=[RegistrationRecord.from_registration(r) for r in snapshot.registrations],
            report=report.to_dict(),
        )

    def universe_tags(self) -> tuple[FunctionTag, ...]:
        return tuple(FunctionTag.parse(text) for text in self.universe)

    def to_registrations(self) -> tuple[CaseRegistration, ...]:
        return tuple(record.to_registration() for record in self.registrations)


def write_dump(path: Path, snapshot: RegistrySnapshot) -> RunDump:
    dump = RunDump.from_snapshot(snapshot)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump.model_dump_json(indent=2) + "\n", encoding="utf-8")
    return dump


def load_dump(path: Path) -> RunDump:
    """Read a dump written by write_dump().

    Raises:
        ReportDumpError: If the file is missing or not a valid dump.
    """
    if not path.exists():
        raise ReportDumpError(f"Report dump not found: {path}")
    try:
        return RunDump.model_validate_json(path.read_text(encoding="utf-8"))
    except ValidationError as e:
        raise ReportDumpError(f"Invalid report dump {path}: {e}") from e
