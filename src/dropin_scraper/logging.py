"""structlog setup for the scraper.

Everything is logged to stderr: stdout carries the rendered YAML/JSON
schedule, so the two can be piped separately. Modules log through
get_logger() with snake_case event names and key/value context.
"""

import logging
import sys
from typing import TextIO

import structlog

# Chatty below WARNING: one line per HTTP connection / event loop detail
QUIET_LOGGERS = ("urllib3", "asyncio")


def setup_logging(
    json_output: bool = False,
    log_level: str = "INFO",
    stream: TextIO | None = None,
) -> None:
    """Configure structlog and route stdlib logging to the same stream.

    Args:
        json_output: One JSON object per line instead of console output.
        log_level: DEBUG, INFO, WARNING, ERROR or CRITICAL.
        stream: Where logs go (stderr by default).
    """
    stream = stream if stream is not None else sys.stderr
    level = getattr(logging, log_level.upper(), logging.INFO)

    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    if json_output:
        processors += [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream),
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger()
    root.handlers = [logging.StreamHandler(stream)]
    root.setLevel(level)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))


def get_logger(name: str) -> structlog.BoundLogger:
    """Logger for a module (pass __name__)."""
    return structlog.get_logger(name)
