"""Structured logging configuration using structlog.

JSON output for log aggregation in production, coloured console output in
development. Remote store URLs carry the database secret as an ``auth``
query parameter, so every rendered event is scrubbed of it and the httpx
request logger is kept at WARNING.

Usage::

    from pap.logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("claims_loaded", source="remote", count=12)
"""

import logging
import re
import sys
from typing import Any

import structlog

_AUTH_PARAM = re.compile(r"(auth=)[^&\s\"']+")


def redact_auth(_logger: Any, _method: str, event_dict: dict) -> dict:
    """Mask ``auth=<secret>`` in any string value of the event."""
    for key, value in event_dict.items():
        if isinstance(value, str) and "auth=" in value:
            event_dict[key] = _AUTH_PARAM.sub(r"\1***", value)
    return event_dict


def setup_logging(json_logs: bool = False, log_level: str = "INFO") -> None:
    """Configure structlog and route stdlib logging through it.

    Args:
        json_logs: If True, render JSON lines. If False, use the console renderer.
        log_level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
    """
    level = getattr(logging, log_level.upper())
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    # httpx logs full request URLs at INFO
    logging.getLogger("httpx").setLevel(max(level, logging.WARNING))

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        redact_auth,
    ]
    if json_logs:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> Any:
    """Return a structlog logger bound to ``name`` (usually ``__name__``)."""
    return structlog.get_logger(name)
