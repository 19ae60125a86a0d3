"""structlog setup for tick-territory.

Everything goes to stderr through the ``tick_territory`` stdlib logger, so
the grid drawn on stdout is never interleaved with log lines. Other
libraries' loggers are left alone.
"""
from __future__ import annotations

import logging
import sys

import structlog

LOGGER_NAME = "tick_territory"


def configure_logging(*, verbose: bool = False, log_json: bool = False) -> None:
    """Route the package's structlog loggers to stderr.

    ``verbose`` lowers the threshold from WARNING to DEBUG, which shows
    per-tick spread summaries, defeats and revivals. ``log_json`` switches
    from the console renderer to one JSON object per line. Calling this
    again replaces the previous handler.
    """
    if log_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="%H:%M:%S"),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    logger = logging.getLogger(LOGGER_NAME)
    logger.handlers = [handler]
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    logger.propagate = False
