"""
Structured logging for tracespine.

Every loader module logs through ``get_logger(__name__)``; the CLI calls
``configure_logging`` once at startup. Per-file failures during a scan are
logged at error level with the offending path before the aggregate failure
is reported. Output always goes to stderr so listings on stdout stay
parseable.

Examples:
    >>> from tracespine.core.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG", json_format=False)
    >>> get_logger(__name__).info("file_loaded", path="design/core.rsk", artifacts=3)

Tags:
    logging, structlog, observability, tracespine
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

_SERVICE_NAME = "tracespine"


def _add_service(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
    event_dict.setdefault("service.name", _SERVICE_NAME)
    return event_dict


def configure_logging(
    level: str = "WARNING",
    json_format: bool | None = None,
    service: str = "tracespine",
    add_timestamp: bool = True,
    colors: bool = True,
) -> None:
    """Set up structlog for the process.

    Args:
        level: Minimum level name, e.g. ``"INFO"``
        json_format: JSON lines if True, console rendering if False; ``None``
            picks JSON whenever stderr is not a terminal
        service: Value of the ``service.name`` key on every event
        add_timestamp: Prefix events with an ISO timestamp
        colors: Colored console rendering (no effect on JSON)
    """
    global _SERVICE_NAME
    _SERVICE_NAME = service

    if json_format is None:
        json_format = not sys.stderr.isatty()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _add_service,
    ]
    if add_timestamp:
        processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))
    processors.append(
        structlog.processors.JSONRenderer() if json_format else structlog.dev.ConsoleRenderer(colors=colors)
    )

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level.upper())),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> Any:
    """Return a structlog logger, usually ``get_logger(__name__)``."""
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Attach ``kwargs`` to every event logged from this context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    structlog.contextvars.unbind_contextvars(*keys)


class LogContext:
    """Bind keys for the duration of a ``with`` block.

    Example:
        with LogContext(load_root="/repo/design"):
            load_dir(root, session)
    """

    def __init__(self, **kwargs: Any):
        self._bound = kwargs

    def __enter__(self) -> LogContext:
        bind_context(**self._bound)
        return self

    def __exit__(self, *exc_info: Any) -> None:
        unbind_context(*self._bound)


__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "unbind_context",
    "LogContext",
]
