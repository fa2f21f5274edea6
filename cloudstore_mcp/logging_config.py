"""Logging setup for the server entry points.

stdout carries line-delimited JSON-RPC in stdio mode, so log output
always goes to stderr.
"""

import logging
import sys

logger = logging.getLogger("cloudstore_mcp")


def configure_logging(level: str = "INFO") -> None:
    """Attach a stderr handler to the package logger.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
    """
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Only add handler if not already configured
    if not logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
                datefmt="%H:%M:%S",
            )
        )
        logger.addHandler(handler)
