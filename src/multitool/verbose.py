"""Logger configuration for debug output."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FORMAT = "[%(asctime)s] %(message)s"
LOG_DATEFMT = "%Y-%m-%dT%H:%M:%S"


def setup_logger(
    debug_file: Path | None = None,
    verbose: bool = False,
    logger_name: str = "multitool",
) -> logging.Logger:
    """Point the multitool logger at a debug file and, if verbose, stderr.

    Calling it again with the same name replaces the previous handlers, so
    each CLI invocation starts clean. With neither destination the logger
    gets a NullHandler and stays quiet.
    """
    logger = logging.getLogger(logger_name)
    for handler in logger.handlers:
        handler.close()
    logger.handlers.clear()
    logger.disabled = False
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    handlers: list[logging.Handler] = []
    if debug_file is not None:
        debug_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(debug_file, mode="a"))
    if verbose:
        handlers.append(logging.StreamHandler(sys.stderr))
    if not handlers:
        handlers.append(logging.NullHandler())

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)
    for handler in handlers:
        handler.setLevel(logging.DEBUG)
        handler.setFormatter(formatter)
        logger.addHandler(handler)
    return logger
