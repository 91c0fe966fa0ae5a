"""Logging configuration for the dynexpr CLI."""

from __future__ import annotations

import logging
import sys


LOGGER_NAME = "dynexpr"


def configure_logging(verbose: bool, debug: bool = False) -> None:
    """Configure logging output based on verbosity.

    Log records go to stderr so rendered expressions on stdout stay parseable.

    Args:
        verbose: Whether to enable INFO logging
        debug: Whether to also log every placeholder assignment (DEBUG)
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.propagate = False

    if verbose or debug:
        level = logging.DEBUG if debug else logging.INFO
        logger.setLevel(level)
        handler = next(
            (item for item in logger.handlers if isinstance(item, logging.StreamHandler)),
            None,
        )
        if handler is None:
            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(logging.Formatter("%(message)s"))
            logger.addHandler(handler)
        handler.setLevel(level)
    else:
        logger.setLevel(logging.WARNING)
        logger.handlers.clear()
