"""
Structured logging for tablespine.

Configures structlog once and hands out loggers to the engine modules.
Repository calls log the SQL they prepare and execute at ``debug`` and
report rollbacks at ``warning``, so turning the level down to ``DEBUG``
gives a complete statement trace.

Architecture:
    ::

        configure_logging(level="INFO", json_format=True, service="tablespine")
            ↓
        structlog processor chain:
          1. TimeStamper (iso, optional)
          2. add_log_level
          3. add_logger_name
          4. ServiceStamp (service.name)
          5. JSONRenderer (or ConsoleRenderer for dev)

        logger = get_logger(__name__)
        logger.debug("statement_executed", table="companies", rowcount=3)

Examples:
    >>> from tablespine.core.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG", json_format=False)
    >>> logger = get_logger(__name__)
    >>> logger.debug("descriptor_built", table="companies", columns=3)

Tags:
    logging, structlog, observability, tablespine

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from tablespine.core.errors import ConfigError

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ServiceStamp:
    """Processor that puts ``service.name`` on every event that lacks one."""

    key = "service.name"

    def __init__(self, service: str) -> None:
        self.service = service

    def __call__(self, logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        if self.key not in event_dict:
            event_dict[self.key] = self.service
        return event_dict


def _level_number(level: str) -> int:
    name = level.upper()
    if name not in LEVELS:
        raise ConfigError(f"unknown log level {level!r}; expected one of {', '.join(LEVELS)}")
    return logging.getLevelName(name)


def build_processors(service: str, *, json_format: bool, add_timestamp: bool) -> list[Processor]:
    """The processor chain used by :func:`configure_logging`, renderer last."""
    chain: list[Processor] = []
    if add_timestamp:
        chain.append(structlog.processors.TimeStamper(fmt="iso"))
    chain += [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        ServiceStamp(service),
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
    ]
    chain.append(
        structlog.processors.JSONRenderer() if json_format else structlog.dev.ConsoleRenderer(colors=True)
    )
    return chain


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "tablespine",
    add_timestamp: bool = True,
) -> None:
    """Route tablespine's structlog events through the stdlib root logger.

    Args:
        level: DEBUG shows every prepared and executed statement.
        json_format: JSON lines when true, coloured console output when
            false; ``None`` picks JSON unless stdout is a terminal.
        service: Value stamped as ``service.name``.
        add_timestamp: Prefix events with an ISO timestamp.

    Raises:
        ConfigError: ``level`` is not a standard level name.
    """
    threshold = _level_number(level)
    if json_format is None:
        json_format = not sys.stdout.isatty()

    structlog.configure(
        processors=build_processors(service, json_format=json_format, add_timestamp=add_timestamp),
        wrapper_class=structlog.make_filtering_bound_logger(threshold),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=threshold)


def get_logger(name: str | None = None) -> Any:
    return structlog.get_logger(name)


__all__ = [
    "ServiceStamp",
    "build_processors",
    "configure_logging",
    "get_logger",
]
