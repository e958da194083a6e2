"""
Strata logging - structured logging for the data-access layer.

Every strata module logs through :func:`get_logger`, which returns a
structlog logger. Applications call :func:`configure_logging` once at
startup to choose between JSON output (log aggregation) and a colored
console renderer (development). Until then structlog's defaults apply.

Architecture:
    ::

        configure_logging(level="INFO", json_format=True, service="billing")
            │
            ▼
        structlog processor chain:
            1. TimeStamper (iso, utc)             optional
            2. merge_contextvars                  LogContext / bind_context
            3. add_log_level / add_logger_name
            4. _add_service                       service="billing"
            5. _redact_secrets                    password=..., token=...
            6. format_exc_info
            7. JSONRenderer | ConsoleRenderer
            │
            ▼
        stdlib logging (LoggerFactory) → stream

Examples:
    >>> from strata.core.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG", service="billing")
    >>> logger = get_logger(__name__)
    >>> logger.info("query_executed", rows=3)

Guardrails:
    ❌ DON'T: Log DatabaseConfiguration objects directly (passwords)
    ✅ DO: Log ``configuration.to_dict()``; ``_redact_secrets`` is a backstop

    ❌ DON'T: Interpolate values into the event name
    ✅ DO: ``logger.warning("query_failed", sql=sql, error=str(e))``

Tags:
    logging, structlog, observability, strata-core
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

REDACTED = "***"

# Event keys whose values never reach the output
SECRET_KEYS = frozenset({"password", "passwd", "secret", "token", "api_key"})

_service = "strata"


def _add_service(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("service", _service)
    return event_dict


def _redact(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            key: (REDACTED if key.lower() in SECRET_KEYS and item is not None else _redact(item))
            for key, item in value.items()
        }
    return value


def _redact_secrets(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    """Mask secret-looking keys, including inside nested dicts (``source=...``)."""
    return _redact(event_dict)


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "strata",
    add_timestamp: bool = True,
    stream: IO[str] | None = None,
) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        level: Minimum level (DEBUG, INFO, WARNING, ERROR)
        json_format: JSON lines when True, console when False; None picks
            JSON unless *stream* is a terminal
        service: Value of the ``service`` key added to every event
        add_timestamp: Add a UTC ISO-8601 ``timestamp`` key
        stream: Output stream (default ``sys.stderr``)
    """
    global _service
    _service = service

    stream = stream or sys.stderr
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level}")
    if json_format is None:
        json_format = not stream.isatty()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        _add_service,
        _redact_secrets,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if add_timestamp:
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso", utc=True))

    renderer: Processor
    if json_format:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=stream.isatty())

    structlog.configure(
        processors=[*processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    # Events are already rendered; stdlib only writes them out
    logging.basicConfig(format="%(message)s", stream=stream, level=numeric_level, force=True)


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger (usually ``get_logger(__name__)``)."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Attach key-value pairs to every later event of the current context.

    Example:
        bind_context(request_id="abc123")
        logger.info("query_failed", sql=sql)  # carries request_id
    """
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Bind context for the duration of a ``with`` block.

    Values bound before entering are restored on exit, so blocks nest::

        with LogContext(broker="InvoiceBroker"):
            with LogContext(broker="LineBroker"):
                ...
            # broker == "InvoiceBroker" again
    """

    def __init__(self, **kwargs: Any):
        self._values = kwargs
        self._tokens: dict[str, Any] = {}

    def __enter__(self) -> LogContext:
        self._tokens = structlog.contextvars.bind_contextvars(**self._values)
        return self

    def __exit__(self, *args: Any) -> None:
        structlog.contextvars.reset_contextvars(**self._tokens)
        self._tokens = {}


__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "LogContext",
    "REDACTED",
]
