# src/cts_harness/core/logging.py
"""Structured logging configuration for the CTS harness.

Uses structlog for structured events (test identity, tag, timeout, error
text as key/value context).

Architecture:
    structlog is configured to route through stdlib logging, and the
    harness's own handler uses ProcessorFormatter so stdlib records and
    structlog events render the same way (JSON or console). Because events
    end up as stdlib records, pytest's log capture and ``caplog`` see them
    like any other log output.

    The handler is attached to the ``cts_harness`` logger rather than the
    root logger: the harness runs inside someone else's pytest session and
    must not replace the handlers pytest or the project installed.
"""

import logging
import sys
from typing import Any, TextIO

import structlog
from structlog.stdlib import ProcessorFormatter

HARNESS_LOGGER = "cts_harness"


def _remove_internal_fields(
    logger: logging.Logger | None,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Remove ProcessorFormatter bookkeeping fields from output.

    ProcessorFormatter always adds _record and _from_structlog; a KeyError
    here would mean the structlog integration is broken.
    """
    del event_dict["_record"]
    del event_dict["_from_structlog"]
    return event_dict


def configure_logging(
    *,
    json_output: bool = False,
    level: str = "WARNING",
    stream: TextIO | None = None,
) -> None:
    """Configure structlog and the harness's stdlib logger.

    Args:
        json_output: If True, output JSON lines. If False, human-readable.
        level: Log level for harness events (DEBUG, INFO, WARNING, ERROR).
        stream: Destination for harness log lines (default: sys.stderr).
    """
    log_level = getattr(logging, level.upper())

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
    ]

    if json_output:
        final_processors: list[Any] = [
            _remove_internal_fields,
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        final_processors = [
            _remove_internal_fields,
            structlog.dev.ConsoleRenderer(colors=False),
        ]

    structlog.configure(
        processors=[*shared_processors, ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        # Tests reconfigure logging; cached loggers would keep stale config
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(
        ProcessorFormatter(
            processors=final_processors,
            foreign_pre_chain=shared_processors,
        )
    )

    harness_logger = logging.getLogger(HARNESS_LOGGER)
    harness_logger.handlers = [handler]
    harness_logger.setLevel(log_level)
