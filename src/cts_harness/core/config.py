# src/cts_harness/core/config.py
"""
Configuration schema and loading for the CTS harness.

Uses Pydantic for validation and Dynaconf for multi-source loading.
Settings are frozen (immutable) after construction; pytest command-line
options are layered on top and re-validated.
"""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

from cts_harness.contracts.enums import ReportFormat

ENVVAR_PREFIX = "CTS"


class LoggingSettings(BaseModel):
    """Harness log output.

    Example YAML:
        logging:
          level: INFO
          json_output: true
    """

    model_config = {"frozen": True}

    level: str = Field(default="WARNING", description="Log level for harness events")
    json_output: bool = Field(default=False, description="Emit JSON lines instead of console output")

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        normalized = v.upper()
        if normalized not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v!r}")
        return normalized


class HarnessSettings(BaseModel):
    """Top-level harness configuration.

    Example YAML (cts.yaml):
        universe_file: conformance/universe.yaml
        min_coverage: 80
        default_timeout_ms: 5000
        report_format: text
        report_file: build/cts-report.json
        report_extraneous: true
        reraise_body_errors: false
        logging:
          level: INFO
    """

    model_config = {"frozen": True}

    universe_file: Path | None = Field(
        default=None,
        description="YAML/JSON file listing the functions that must be covered",
    )
    min_coverage: float | None = Field(
        default=None,
        ge=0.0,
        le=100.0,
        description="Fail the session when coverage (percent) is below this",
    )
    default_timeout_ms: int | None = Field(
        default=None,
        gt=0,
        description="Deadline applied to cts tests that declare none",
    )
    report_format: ReportFormat = Field(
        default=ReportFormat.TEXT,
        description="Terminal coverage report rendering",
    )
    report_file: Path | None = Field(
        default=None,
        description="Write a JSON dump of registrations, universe and report here",
    )
    report_extraneous: bool = Field(
        default=False,
        description="List registered tags that are not in the universe",
    )
    reraise_body_errors: bool = Field(
        default=False,
        description="Surface the original exception of a failed guarded body",
    )
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


def load_settings(config_path: Path | None = None) -> HarnessSettings:
    """Load settings from YAML with environment variable overrides.

    Uses Dynaconf for multi-source loading with precedence:
    1. Environment variables (CTS_*) - highest priority
    2. Config file, if given
    3. Defaults from the Pydantic schema - lowest priority

    Environment variable format: CTS_LOGGING__LEVEL for nested keys.

    Args:
        config_path: Path to a YAML configuration file, or None for
            environment + defaults only

    Returns:
        Validated HarnessSettings instance

    Raises:
        ValidationError: If configuration fails Pydantic validation
        FileNotFoundError: If config_path is given but doesn't exist
    """
    from dynaconf import Dynaconf

    # Dynaconf silently accepts missing files
    if config_path is not None and not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    dynaconf_settings = Dynaconf(
        envvar_prefix=ENVVAR_PREFIX,
        settings_files=[str(config_path)] if config_path is not None else [],
        environments=False,
        load_dotenv=False,
        merge_enabled=True,
    )

    # Dynaconf returns uppercase keys; Pydantic fields are lowercase
    internal_keys = {"LOAD_DOTENV", "ENVIRONMENTS", "SETTINGS_FILES"}
    raw_config: dict[str, Any] = {
        k.lower(): _lower_keys(v) for k, v in dynaconf_settings.as_dict().items() if k not in internal_keys
    }
    known = set(HarnessSettings.model_fields)
    raw_config = {k: v for k, v in raw_config.items() if k in known}

    if config_path is not None and raw_config.get("universe_file") is not None:
        universe_path = Path(raw_config["universe_file"])
        if not universe_path.is_absolute():
            raw_config["universe_file"] = (config_path.parent / universe_path).resolve()

    return HarnessSettings(**raw_config)


def _lower_keys(value: Any) -> Any:
    if isinstance(value, dict):
        return {str(k).lower(): _lower_keys(v) for k, v in value.items()}
    return value
