"""Opt-in output for the session trace httpflow logs at DEBUG."""

import logging
from typing import Optional, TextIO

LOGGER_NAME = "httpflow"
TRACE_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"


def enable_debug_logging(
    stream: Optional[TextIO] = None,
    format_string: Optional[str] = None,
) -> logging.Handler:
    """
    Print the agent's send/receive trace and the handlers' read sizes.

    Adds a stream handler to the httpflow logger and lowers it to DEBUG.
    Loggers outside httpflow are left alone.

    Args:
        stream: Where to write records (stderr if None)
        format_string: Optional format for the records

    Returns:
        The added handler, for disable_debug_logging()
    """
    handler = logging.StreamHandler(stream)
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(format_string or TRACE_FORMAT))

    logger = logging.getLogger(LOGGER_NAME)
    logger.addHandler(handler)
    logger.setLevel(logging.DEBUG)
    logger.debug(f"Debug logging enabled for {LOGGER_NAME}")
    return handler


def disable_debug_logging(handler: logging.Handler) -> None:
    """Remove a handler added by enable_debug_logging()."""
    logger = logging.getLogger(LOGGER_NAME)
    logger.removeHandler(handler)
    handler.close()
    if all(isinstance(h, logging.NullHandler) for h in logger.handlers):
        logger.setLevel(logging.NOTSET)
