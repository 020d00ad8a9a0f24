#!/usr/bin/env python3
"""
logging_setup.py
================
Configures the root logger with a console handler and a rotating file
handler (``levelk.log``, 1 MB, 2 backups) in the output directory.

Call :func:`setup_logging` once at startup before the experiment starts.
"""

import logging
import os
from logging.handlers import RotatingFileHandler
from typing import Optional

# Level names accepted by ``--log-level``.
LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "err": logging.ERROR,
    "critical": logging.CRITICAL,
}


def parse_level(name: str) -> int:
    """Map a CLI level name (``trace``, ``warn``, ``err`` …) to a ``logging`` level."""
    try:
        return LEVELS[name.strip().lower()]
    except KeyError:
        raise ValueError(f"unknown log level {name!r}; choose from {', '.join(LEVELS)}") from None


def setup_logging(level: int = logging.INFO, log_dir: Optional[str] = None) -> None:
    """Apply a unified log format to both console and file output.

    Parameters
    ----------
    level : int
        Minimum severity level (e.g. ``logging.DEBUG``, ``logging.INFO``).
    log_dir : str or None
        Directory for the log files; the current directory when *None*.
    """
    root = logging.getLogger()
    root.setLevel(level)

    fmt = logging.Formatter(
        "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
    )

    directory = log_dir or "."
    os.makedirs(directory, exist_ok=True)

    ch = logging.StreamHandler()
    ch.setFormatter(fmt)

    fh = RotatingFileHandler(
        os.path.join(directory, "levelk.log"), maxBytes=1_000_000, backupCount=2
    )
    fh.setFormatter(fmt)

    for handler in root.handlers:
        handler.close()
    root.handlers.clear()
    root.addHandler(ch)
    root.addHandler(fh)

    # ── Dedicated debug file for the planner search traces ────────────
    planner_logger = logging.getLogger("planner")
    for handler in list(planner_logger.handlers):
        planner_logger.removeHandler(handler)
        handler.close()
    if level <= logging.DEBUG:
        planner_logger.setLevel(logging.DEBUG)
        dfh = RotatingFileHandler(
            os.path.join(directory, "planner_debug.log"), maxBytes=5_000_000, backupCount=2
        )
        dfh.setLevel(logging.DEBUG)
        dfh.setFormatter(fmt)
        planner_logger.addHandler(dfh)
    else:
        planner_logger.setLevel(logging.NOTSET)
