"""Structured logging for deckpack.

Events carry field paths, hashes and sizes. Inline asset payloads
(``data:`` URIs) that reach an event anyway are cut down to a short
preview before rendering, so a logged deck never dumps its images.
"""

import logging
import sys
from collections.abc import MutableMapping
from typing import Any, Literal

import structlog

LogFormat = Literal["text", "json"]

INLINE_PAYLOAD_PREFIX = "data:"
# Characters of an inline payload kept in log output
INLINE_PREVIEW_LENGTH = 48


def shorten_inline_payloads(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Replace long ``data:`` URI values with a preview and their length."""
    for key, value in event_dict.items():
        if (
            key != "event"
            and isinstance(value, str)
            and value.startswith(INLINE_PAYLOAD_PREFIX)
            and len(value) > INLINE_PREVIEW_LENGTH
        ):
            event_dict[key] = f"{value[:INLINE_PREVIEW_LENGTH]}... ({len(value)} chars)"
    return event_dict


def setup_logging(
    level: str = "INFO",
    log_format: LogFormat = "text",
) -> None:
    """Configure structured logging.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        log_format: "json" for one JSON object per line, "text" for console output
    """
    log_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
    )

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        shorten_inline_payloads,
        structlog.dev.set_exc_info,
    ]

    if log_format == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    # Logs go to stderr; stdout carries CLI output such as imported JSON.
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a named logger."""
    return structlog.get_logger(name)
