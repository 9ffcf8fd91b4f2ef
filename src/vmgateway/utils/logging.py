"""Logging setup utilities for vmgateway.

Log records go to stderr, never stdout: the Invocation Bridge
temporarily redirects ``sys.stdout`` while govc runs.
"""

from __future__ import annotations

import logging
import sys

from vmgateway.config.settings import LoggingConfig

# uvicorn's own loggers share the gateway's handlers and format.
_SERVER_LOGGERS = ("uvicorn", "uvicorn.error")


def setup_logging(config: LoggingConfig | None = None, verbose: bool = False) -> None:
    """Configure the ``vmgateway`` logger and the uvicorn loggers.

    Safe to call more than once; existing handlers are replaced.

    Args:
        config: Logging configuration. If None, uses defaults
                (INFO level, stderr output).
        verbose: Force DEBUG level regardless of ``config.level``.
    """
    if config is None:
        config = LoggingConfig()

    level_name = "DEBUG" if verbose else config.level.upper()
    level = getattr(logging, level_name, logging.INFO)
    formatter = logging.Formatter(config.format)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if config.file:
        handlers.append(logging.FileHandler(config.file))
    for handler in handlers:
        handler.setFormatter(formatter)

    for name in ("vmgateway", *_SERVER_LOGGERS):
        target = logging.getLogger(name)
        target.handlers = list(handlers)
        target.setLevel(level)
        target.propagate = False

    logging.getLogger("vmgateway").info("Logging initialized at %s level", level_name)
