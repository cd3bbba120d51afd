"""
structlog configuration for hosts embedding the price engine.

The engine itself only calls ``structlog.get_logger``; a host process calls
setup_logging once at startup. Events carry ``image_id`` and ``profile``
through contextvars while ``evaluate`` runs.
"""

import logging
import sys
from typing import TextIO

import structlog


def setup_logging(debug: bool = False, stream: TextIO | None = None) -> None:
    """
    Configure structlog and stdlib logging.

    Args:
        debug: Console output at DEBUG level when True; JSON at INFO otherwise.
        stream: Where log lines go. Defaults to stdout.
    """
    out = stream or sys.stdout
    level = logging.DEBUG if debug else logging.INFO

    processors: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    processors.append(structlog.dev.ConsoleRenderer() if debug else structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=out),
        cache_logger_on_first_use=not debug,
    )

    logging.basicConfig(format="%(message)s", stream=out, level=level, force=True)
