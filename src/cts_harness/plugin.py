# src/cts_harness/plugin.py
"""pytest plugin wiring the harness into the test lifecycle.

Lifecycle:
    pytest_configure              settings loaded, HarnessContext created
    pytest_collection_modifyitems cts-marked items registered, universe populated
    pytest_runtest_setup          PreCheck (after skip marks, before fixtures)
    pytest_pyfunc_call            body under ExecutionHarness when a deadline applies
    pytest_runtest_teardown       PostCheck (end of teardown, always)
    pytest_runtest_makereport     check failures attached to the test's reports
    pytest_sessionfinish          coverage computed, threshold enforced, dump written
    pytest_terminal_summary       coverage report printed
    pytest_unconfigure            leaked workers reported

Registered through the ``pytest11`` entry point, so installing the package
is enough; ``-p no:cts_harness.plugin`` disables it.
"""

from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest
import structlog
from pydantic import ValidationError

from cts_harness.contracts import (
    CaseRegistration,
    CheckResult,
    CoverageReport,
    DeclarationError,
    FunctionTag,
    ReportFormat,
    TestIdentity,
    UniverseFileError,
)
from cts_harness.core.config import HarnessSettings, load_settings
from cts_harness.core.logging import configure_logging
from cts_harness.core.universe import load_universe
from cts_harness.coverage.dump import write_dump
from cts_harness.coverage.engine import CoverageEngine
from cts_harness.coverage.render import format_percentage, render_json, render_text
from cts_harness.declare import MARKER_HELP, MARKER_NAME, parse_declaration
from cts_harness.engine.dispatcher import CheckDispatcher
from cts_harness.engine.harness import ExecutionHarness
from cts_harness.registry.context import HarnessContext
from cts_harness.registry.results import ResultStore

if TYPE_CHECKING:
    from collections.abc import Generator

    from _pytest.terminal import TerminalReporter

logger = structlog.get_logger(__name__)


@dataclass
class HarnessSession:
    """Per-pytest-session harness state, kept in ``config.stash``."""

    settings: HarnessSettings
    context: HarnessContext = field(default_factory=HarnessContext)
    harness: ExecutionHarness = field(default_factory=ExecutionHarness)
    file_universe: tuple[FunctionTag, ...] | None = None
    report: CoverageReport | None = None
    below_threshold: bool = False

    @property
    def dispatcher(self) -> CheckDispatcher:
        return CheckDispatcher(self.context)

    @property
    def engine(self) -> CoverageEngine:
        return CoverageEngine(self.context)


SESSION_KEY = pytest.StashKey[HarnessSession]()
REGISTRATION_KEY = pytest.StashKey[CaseRegistration]()
PRE_CHECK_KEY = pytest.StashKey[CheckResult]()
POST_CHECK_KEY = pytest.StashKey[CheckResult]()
PRE_CHECK_REPORTED_KEY = pytest.StashKey[bool]()
CHECKS_STARTED_KEY = pytest.StashKey[bool]()
DECLARATION_ERROR_KEY = pytest.StashKey[DeclarationError]()

CHECK_SECTION = "cts check failures"


def get_session(config: pytest.Config) -> HarnessSession:
    """Return the harness state of a configured pytest session."""
    return config.stash[SESSION_KEY]


# =============================================================================
# Options and configuration
# =============================================================================


def pytest_addhooks(pluginmanager: pytest.PytestPluginManager) -> None:
    from cts_harness import hookspecs

    pluginmanager.add_hookspecs(hookspecs)


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("cts", "conformance coverage and deadlines")
    group.addoption("--cts-config", type=Path, default=None, help="Harness settings YAML file.")
    group.addoption(
        "--cts-universe",
        type=Path,
        default=None,
        help="YAML/JSON file listing the functions that must be covered.",
    )
    group.addoption(
        "--cts-min-coverage",
        type=float,
        default=None,
        metavar="PERCENT",
        help="Fail the session when function coverage is below PERCENT.",
    )
    group.addoption(
        "--cts-report",
        choices=[f.value for f in ReportFormat],
        default=None,
        help="Coverage report format in the terminal summary (default: text).",
    )
    group.addoption(
        "--cts-report-file",
        type=Path,
        default=None,
        help="Write a JSON dump of registrations, universe and coverage.",
    )
    group.addoption(
        "--cts-report-extraneous",
        action="store_true",
        default=None,
        help="List registered functions that are not in the universe.",
    )
    group.addoption(
        "--cts-default-timeout",
        type=int,
        default=None,
        metavar="MS",
        help="Deadline for cts tests that declare no timeout_ms.",
    )
    group.addoption(
        "--cts-reraise",
        action="store_true",
        default=None,
        help="Show the original exception of a failed deadline-guarded body.",
    )
    group.addoption("--cts-log-level", default=None, help="Harness log level (DEBUG, INFO, WARNING, ERROR).")


def _resolve_settings(config: pytest.Config) -> HarnessSettings:
    settings = load_settings(config.getoption("cts_config"))

    overrides: dict[str, Any] = {}
    option_map = {
        "cts_universe": "universe_file",
        "cts_min_coverage": "min_coverage",
        "cts_report_file": "report_file",
        "cts_report_extraneous": "report_extraneous",
        "cts_default_timeout": "default_timeout_ms",
        "cts_reraise": "reraise_body_errors",
    }
    for option, setting in option_map.items():
        value = config.getoption(option)
        if value is not None:
            overrides[setting] = value
    report_format = config.getoption("cts_report")
    if report_format is not None:
        overrides["report_format"] = ReportFormat(report_format)
    log_level = config.getoption("cts_log_level")
    if log_level is not None:
        overrides["logging"] = {**settings.logging.model_dump(), "level": log_level}

    if not overrides:
        return settings
    # model_validate re-runs field validation on the merged values
    return HarnessSettings.model_validate({**settings.model_dump(), **overrides})


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", MARKER_HELP)

    try:
        settings = _resolve_settings(config)
        file_universe = load_universe(settings.universe_file) if settings.universe_file is not None else None
    except (FileNotFoundError, ValidationError, UniverseFileError) as e:
        raise pytest.UsageError(f"cts harness: {e}") from e
    if config.getoption("cts_log_level") is not None or not structlog.is_configured():
        configure_logging(json_output=settings.logging.json_output, level=settings.logging.level)

    config.stash[SESSION_KEY] = HarnessSession(settings=settings, file_universe=file_universe)


def pytest_unconfigure(config: pytest.Config) -> None:
    session = config.stash.get(SESSION_KEY, None)
    if session is None:
        return
    live = session.harness.live_abandoned_workers()
    if live:
        logger.warning("Abandoned test workers still running at exit", workers=live)
    del config.stash[SESSION_KEY]


# =============================================================================
# Registration (after collection, before any test runs)
# =============================================================================


def pytest_collection_modifyitems(session: pytest.Session, config: pytest.Config, items: list[pytest.Item]) -> None:
    harness_session = get_session(config)
    default_timeout = harness_session.settings.default_timeout_ms

    for item in items:
        mark = item.get_closest_marker(MARKER_NAME)
        if mark is None:
            continue
        try:
            declaration = parse_declaration(mark, item.nodeid)
        except DeclarationError as e:
            # Reported on the test itself so the rest of the run proceeds
            item.stash[DECLARATION_ERROR_KEY] = e
            logger.error("Invalid cts declaration", test=item.nodeid, reason=e.reason)
            continue
        timeout_ms = declaration.timeout_ms if declaration.timeout_ms is not None else default_timeout
        registration = harness_session.context.registry.register_case(
            TestIdentity.from_item(item),
            declaration.tag,
            pre_check=declaration.pre_check,
            post_check=declaration.post_check,
            timeout_ms=timeout_ms,
        )
        item.stash[REGISTRATION_KEY] = registration

    _populate_universe(config, harness_session)


def _populate_universe(config: pytest.Config, harness_session: HarnessSession) -> None:
    tags: list[Any] = list(harness_session.file_universe or ())
    for contributed in config.hook.pytest_cts_universe(config=config):
        if contributed:
            tags.extend(contributed)
    if harness_session.file_universe is not None or tags:
        try:
            harness_session.context.set_universe(tags)
        except (TypeError, ValueError) as e:
            raise pytest.UsageError(f"cts harness: invalid universe tag: {e}") from e
        logger.info(
            "Function universe loaded",
            size=len(harness_session.context.universe),
            registered=len(harness_session.context.registry),
        )


# =============================================================================
# Per-test lifecycle
# =============================================================================


def pytest_runtest_setup(item: pytest.Item) -> None:
    # Runs after skip/skipif evaluation, before the runner sets up fixtures
    declaration_error = item.stash.get(DECLARATION_ERROR_KEY, None)
    if declaration_error is not None:
        raise declaration_error
    if REGISTRATION_KEY not in item.stash:
        return
    item.stash[CHECKS_STARTED_KEY] = True
    failure = get_session(item.config).dispatcher.run_pre_check(TestIdentity.from_item(item))
    if failure is not None:
        item.stash[PRE_CHECK_KEY] = failure


@pytest.hookimpl(wrapper=True)
def pytest_runtest_teardown(item: pytest.Item, nextitem: pytest.Item | None) -> Generator[None, None, None]:
    try:
        return (yield)
    finally:
        if item.stash.get(CHECKS_STARTED_KEY, False):
            failure = get_session(item.config).dispatcher.run_post_check(TestIdentity.from_item(item))
            if failure is not None:
                item.stash[POST_CHECK_KEY] = failure


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Run deadline-guarded test bodies on an ExecutionHarness worker."""
    registration = pyfuncitem.stash.get(REGISTRATION_KEY, None)
    if registration is None or registration.timeout_ms is None:
        return None

    harness_session = get_session(pyfuncitem.config)
    testfunction = pyfuncitem.obj
    kwargs = _call_kwargs(pyfuncitem)

    if inspect.iscoroutinefunction(testfunction):

        def body() -> None:
            asyncio.run(testfunction(**kwargs))

    else:

        def body() -> None:
            testfunction(**kwargs)

    result = harness_session.harness.execute(
        body,
        registration.timeout_ms,
        reraise=harness_session.settings.reraise_body_errors,
        label=str(registration.identity),
    )
    if result.passed:
        return True

    captured = result.captured
    if captured is not None and isinstance(captured.exception, pytest.skip.Exception | pytest.xfail.Exception):
        raise captured.exception

    message = result.describe()
    if captured is not None:
        message = f"{message}\n\n{captured.traceback}"
    pytest.fail(message, pytrace=False)


def _call_kwargs(pyfuncitem: pytest.Function) -> dict[str, Any]:
    """Only the fixtures the test function actually declares, as pytest passes them."""
    signature = inspect.signature(pyfuncitem.obj)
    if any(p.kind is inspect.Parameter.VAR_KEYWORD for p in signature.parameters.values()):
        return dict(pyfuncitem.funcargs)
    return {name: value for name, value in pyfuncitem.funcargs.items() if name in signature.parameters}


@pytest.hookimpl(wrapper=True)
def pytest_runtest_makereport(item: pytest.Item, call: pytest.CallInfo[None]) -> Generator[None, pytest.TestReport, pytest.TestReport]:
    report = yield

    failure: CheckResult | None = None
    if call.when == "setup" and report.failed:
        # No call phase will follow; attach the pre-check failure here
        failure = item.stash.get(PRE_CHECK_KEY, None)
    elif call.when == "call":
        failure = item.stash.get(PRE_CHECK_KEY, None)
    elif call.when == "teardown":
        failure = item.stash.get(POST_CHECK_KEY, None)

    if call.when in ("setup", "call") and failure is not None:
        if item.stash.get(PRE_CHECK_REPORTED_KEY, False):
            failure = None
        else:
            item.stash[PRE_CHECK_REPORTED_KEY] = True

    if failure is not None:
        _attach_check_failure(report, failure)
    return report


def _attach_check_failure(report: pytest.TestReport, failure: CheckResult) -> None:
    text = f"{failure.message}\n(test {failure.identity}, function {failure.tag})"
    report.outcome = "failed"
    if report.longrepr is None or isinstance(report.longrepr, tuple):
        report.longrepr = text
    else:
        report.sections.append((CHECK_SECTION, text))


# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def cts_results(request: pytest.FixtureRequest) -> ResultStore:
    """The session's ResultStore, for handing values to a post-check."""
    return get_session(request.config).context.results


@pytest.fixture
def cts_context(request: pytest.FixtureRequest) -> HarnessContext:
    """The session's HarnessContext."""
    return get_session(request.config).context


@pytest.fixture
def cts_harness(request: pytest.FixtureRequest) -> ExecutionHarness:
    """The session's ExecutionHarness, for guarding parts of a test body."""
    return get_session(request.config).harness


# =============================================================================
# Session end: coverage
# =============================================================================


def _has_coverage_data(harness_session: HarnessSession) -> bool:
    context = harness_session.context
    return bool(len(context.registry) or len(context.universe))


@pytest.hookimpl(trylast=True)
def pytest_sessionfinish(session: pytest.Session, exitstatus: int | pytest.ExitCode) -> None:
    harness_session = session.config.stash.get(SESSION_KEY, None)
    if harness_session is None or not _has_coverage_data(harness_session):
        return

    settings = harness_session.settings
    report = harness_session.engine.compute_report()
    harness_session.report = report
    session.config.hook.pytest_cts_report(report=report, config=session.config)

    if settings.report_file is not None:
        write_dump(settings.report_file, harness_session.context.snapshot())
        logger.info("Coverage dump written", path=str(settings.report_file))

    if not report.meets(settings.min_coverage):
        harness_session.below_threshold = True
        logger.warning(
            "Coverage below threshold",
            percentage=round(report.percentage, 1),
            threshold=settings.min_coverage,
        )
        if session.exitstatus == pytest.ExitCode.OK:
            session.exitstatus = pytest.ExitCode.TESTS_FAILED


def pytest_terminal_summary(terminalreporter: TerminalReporter, exitstatus: int, config: pytest.Config) -> None:
    harness_session = config.stash.get(SESSION_KEY, None)
    if harness_session is None or harness_session.report is None:
        return
    settings = harness_session.settings
    report = harness_session.report
    abandoned = harness_session.harness.abandoned_workers

    if settings.report_format is ReportFormat.TEXT:
        terminalreporter.write_sep("=", "cts coverage")
        for line in render_text(
            report,
            show_extraneous=settings.report_extraneous,
            abandoned_workers=abandoned,
        ).splitlines():
            terminalreporter.write_line(line)
    elif settings.report_format is ReportFormat.JSON:
        terminalreporter.write_sep("=", "cts coverage")
        terminalreporter.write_line(render_json(report, abandoned_workers=abandoned))

    if harness_session.below_threshold:
        terminalreporter.write_line(
            f"CTS coverage {format_percentage(report.percentage)} is below the required "
            f"{format_percentage(settings.min_coverage or 0.0)}",
            red=True,
        )
