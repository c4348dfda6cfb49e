# tests/unit/core/test_config.py
"""Tests for HarnessSettings and load_settings."""

from pathlib import Path

import pytest
from pydantic import ValidationError


class TestHarnessSettings:
    def test_defaults(self) -> None:
        from cts_harness.contracts import ReportFormat
        from cts_harness.core.config import HarnessSettings

        settings = HarnessSettings()
        assert settings.universe_file is None
        assert settings.min_coverage is None
        assert settings.default_timeout_ms is None
        assert settings.report_format is ReportFormat.TEXT
        assert settings.reraise_body_errors is False
        assert settings.logging.level == "WARNING"

    def test_settings_are_frozen(self) -> None:
        from cts_harness.core.config import HarnessSettings

        settings = HarnessSettings()
        with pytest.raises(ValidationError):
            settings.min_coverage = 50.0  # type: ignore[misc]

    @pytest.mark.parametrize("value", [-1.0, 100.5])
    def test_min_coverage_bounds(self, value: float) -> None:
        from cts_harness.core.config import HarnessSettings

        with pytest.raises(ValidationError):
            HarnessSettings(min_coverage=value)

    def test_default_timeout_must_be_positive(self) -> None:
        from cts_harness.core.config import HarnessSettings

        with pytest.raises(ValidationError):
            HarnessSettings(default_timeout_ms=0)

    def test_log_level_normalized(self) -> None:
        from cts_harness.core.config import LoggingSettings

        assert LoggingSettings(level="debug").level == "DEBUG"
        with pytest.raises(ValidationError):
            LoggingSettings(level="chatty")


class TestLoadSettings:
    def test_no_file_gives_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        from cts_harness.core.config import load_settings

        monkeypatch.delenv("CTS_MIN_COVERAGE", raising=False)
        assert load_settings().min_coverage is None

    def test_missing_file_raises(self, tmp_path: Path) -> None:
        from cts_harness.core.config import load_settings

        with pytest.raises(FileNotFoundError):
            load_settings(tmp_path / "absent.yaml")

    def test_yaml_file_loaded(self, tmp_path: Path) -> None:
        from cts_harness.contracts import ReportFormat
        from cts_harness.core.config import load_settings

        config_file = tmp_path / "cts.yaml"
        config_file.write_text(
            "min_coverage: 80\nreport_format: json\ndefault_timeout_ms: 2500\nlogging:\n  level: info\n",
            encoding="utf-8",
        )

        settings = load_settings(config_file)

        assert settings.min_coverage == 80.0
        assert settings.report_format is ReportFormat.JSON
        assert settings.default_timeout_ms == 2500
        assert settings.logging.level == "INFO"

    def test_relative_universe_file_resolved_against_config(self, tmp_path: Path) -> None:
        from cts_harness.core.config import load_settings

        config_dir = tmp_path / "conf"
        config_dir.mkdir()
        config_file = config_dir / "cts.yaml"
        config_file.write_text("universe_file: universe.yaml\n", encoding="utf-8")

        settings = load_settings(config_file)

        assert settings.universe_file == (config_dir / "universe.yaml").resolve()

    def test_environment_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        from cts_harness.core.config import load_settings

        config_file = tmp_path / "cts.yaml"
        config_file.write_text("min_coverage: 80\n", encoding="utf-8")
        monkeypatch.setenv("CTS_MIN_COVERAGE", "95")
        monkeypatch.setenv("CTS_LOGGING__LEVEL", "ERROR")

        settings = load_settings(config_file)

        assert settings.min_coverage == 95.0
        assert settings.logging.level == "ERROR"

    def test_invalid_value_raises_validation_error(self, tmp_path: Path) -> None:
        from cts_harness.core.config import load_settings

        config_file = tmp_path / "cts.yaml"
        config_file.write_text("min_coverage: 150\n", encoding="utf-8")

        with pytest.raises(ValidationError):
            load_settings(config_file)
