"""Logging helpers for the sheetsync_io package."""

# Module responsibilities:
# - Route sheetsync_io loggers to their own rotating file (sheetsync_io.log).
# - Keep the console quiet below WARNING so command output stays readable.

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from sheetsync.core.logger import configure_logger

PACKAGE = "sheetsync_io"


def get_logger(name: str, log_dir: Optional[Path] = None) -> logging.Logger:
    """Return a logger scoped under ``sheetsync_io``.

    Args:
        name: Logger name suffix appended to the package logger namespace.
        log_dir: Optional override for the logging directory.
    """

    configure_logger(PACKAGE, f"{PACKAGE}.log", log_dir=log_dir, stream=sys.stderr, console_level=logging.WARNING)
    return logging.getLogger(f"{PACKAGE}.{name}")
