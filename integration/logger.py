"""Structured logging for the command line via *structlog*.

Every CLI command runs inside :func:`command_context`, which assigns a
correlation ID and binds the command name so that log lines from the
repository, the analytics and the report writers can be grouped.
"""

from __future__ import annotations

import logging
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator, Optional

import structlog

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")

_CONFIGURED = False


# ── correlation id ─────────────────────────────────────────────────


def new_correlation_id() -> str:
    """Generate and store a new correlation ID for the current context."""
    cid = uuid.uuid4().hex[:12]
    _correlation_id.set(cid)
    return cid


@contextmanager
def command_context(command: str, **fields: Any) -> Iterator[str]:
    """Bind *command* (plus *fields*) and a fresh correlation ID.

    Yields:
        The correlation ID assigned to this command run.
    """
    cid = new_correlation_id()
    structlog.contextvars.bind_contextvars(command=command, **fields)
    try:
        yield cid
    finally:
        structlog.contextvars.unbind_contextvars("command", *fields)
        _correlation_id.set("")


# ── structlog processors ──────────────────────────────────────────


def _add_correlation_id(
    logger: Any,
    method_name: str,
    event_dict: dict[str, Any],
) -> dict[str, Any]:
    """Inject the current correlation ID into every log entry."""
    cid = _correlation_id.get()
    if cid:
        event_dict["correlation_id"] = cid
    return event_dict


def _stderr_logger(*args: Any) -> structlog.PrintLogger:
    """Logger factory bound to whatever ``sys.stderr`` is at call time."""
    return structlog.PrintLogger(file=sys.stderr)


# ── setup ──────────────────────────────────────────────────────────


def setup_logging(log_level: str = "INFO", json_output: Optional[bool] = None) -> None:
    """Configure *structlog* + stdlib logging.

    Subsequent calls are no-ops.

    Args:
        log_level: One of ``DEBUG``, ``INFO``, ``WARNING``, ``ERROR``.
        json_output: Force JSON (``True``) or console (``False``) rendering;
            by default JSON is used unless stderr is a terminal.
    """
    global _CONFIGURED  # noqa: PLW0603
    if _CONFIGURED:
        return
    _CONFIGURED = True

    numeric_level = getattr(logging, log_level.upper(), logging.INFO)
    if json_output is None:
        json_output = not sys.stderr.isatty()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=numeric_level,
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            _add_correlation_id,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer()
            if json_output
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a bound structlog logger, optionally named *name*."""
    log = structlog.get_logger()
    if name:
        log = log.bind(logger=name)
    return log
