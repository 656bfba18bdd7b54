from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
import sys
from typing import Iterable, TextIO

from .profiles import log_dir as _default_log_dir

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
PACKAGE_LOGGERS = ("sheetsync", "sheetsync_io")

_LOGGER: logging.Logger | None = None


def configure_logger(
    name: str,
    filename: str,
    *,
    log_dir: Path | None = None,
    stream: TextIO | None = None,
    console_level: int = logging.NOTSET,
) -> logging.Logger:
    """Attach a rotating file handler and a console handler to logger ``name``.

    Handlers are attached once; later calls return the logger unchanged.
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    base = Path(log_dir) if log_dir is not None else _default_log_dir()
    base.mkdir(parents=True, exist_ok=True)
    fmt = logging.Formatter(fmt=LOG_FORMAT, datefmt=DATE_FORMAT)

    file_handler = RotatingFileHandler(base / filename, maxBytes=2 * 1024 * 1024, backupCount=3, encoding="utf-8")
    file_handler.setFormatter(fmt)
    logger.addHandler(file_handler)

    console = logging.StreamHandler(stream or sys.stdout)
    console.setFormatter(fmt)
    console.setLevel(console_level)
    logger.addHandler(console)

    logger.setLevel(logging.INFO)
    logger.propagate = False
    return logger


def get_logger(log_dir: Path | None = None) -> logging.Logger:
    """Return the application logger writing to <log dir>/sheetsync.log and stdout.

    Modules that log through ``logging.getLogger(__name__)`` inherit its handlers.
    """
    global _LOGGER
    if _LOGGER is None:
        _LOGGER = configure_logger("sheetsync", "sheetsync.log", log_dir=log_dir)
    return _LOGGER


def set_level(level: int, names: Iterable[str] = PACKAGE_LOGGERS) -> None:
    for name in names:
        logging.getLogger(name).setLevel(level)
