"""
Logging setup for the Elicit MCP Server
"""

import logging
import sys
from typing import Optional

PACKAGE_LOGGER = "elicit_mcp"

DEFAULT_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Chatty at INFO and not about elicitation
QUIET_LOGGERS = ("uvicorn.access", "sse_starlette.sse")


def setup_logging(
    level: str = "INFO",
    disable_stdio_logging: bool = False,
    format_string: Optional[str] = None,
) -> logging.Logger:
    """
    Configure root logging for the server process.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL);
            unknown names fall back to INFO
        disable_stdio_logging: Log to stderr, as required when stdout
            carries the stdio protocol stream
        format_string: Custom format for log records

    Returns:
        The ``elicit_mcp`` package logger
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=log_level,
        format=format_string or DEFAULT_FORMAT,
        stream=sys.stderr if disable_stdio_logging else sys.stdout,
        force=True,
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(log_level)
    logger.info(
        f"Logging configured at {logging.getLevelName(log_level)} level "
        f"({'stderr' if disable_stdio_logging else 'stdout'})"
    )
    return logger
