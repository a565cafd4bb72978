import logging
import sys

import structlog

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def setup_logging(level: "str") -> "None":
    """
    maps string log level to logging module levels and configures
    structlog with a console renderer on stderr. stdout is left to
    the report lines.

    Unknown levels fall back to info with a warning.
    """
    numeric_level = _LEVELS.get(level.lower())
    if numeric_level is None:
        print(f"unknown log level `{level}`, using info", file=sys.stderr)
        numeric_level = logging.INFO

    logging.basicConfig(
        format="%(message)s",
        level=numeric_level,
        stream=sys.stderr,
    )
    # httpx logs every request at info, only show it when debugging
    httpx_level = (
        logging.DEBUG
        if numeric_level == logging.DEBUG
        else max(numeric_level, logging.WARNING)
    )
    logging.getLogger("httpx").setLevel(httpx_level)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
