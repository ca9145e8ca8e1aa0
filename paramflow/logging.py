"""Logging setup shared by the paramflow CLI and HTTP service.

Engine modules log through children of the ``paramflow`` logger: dropped
parameters and discarded stale fetches at debug level, loader failures as
warnings.
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TextIO

_LOGGER_NAME = "paramflow"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``paramflow.<name>``, or the root ``paramflow`` logger."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *,
    verbose: bool = False,
    log_file: Path | None = None,
    stream: TextIO | None = None,
) -> logging.Logger:
    """Install console and optional file handlers on the ``paramflow`` logger.

    ``verbose`` enables the debug diagnostics. Console records go to
    ``stream`` (stderr by default) because ``paramflow detect --json`` writes
    its result to stdout.
    """
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Each CLI run and service start replaces the previous handlers.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(stream or sys.stderr)
    console.setLevel(level)
    console.setFormatter(logging.Formatter("[paramflow] %(levelname)s %(message)s"))
    logger.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = ["configure_logging", "get_logger"]
