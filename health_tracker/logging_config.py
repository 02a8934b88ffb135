"""
Logging setup for the Health Tracker.

``setup_logging`` attaches a console handler (and optionally a file
handler) to the root logger. The application factory calls it on every
``create_app``; only the first call has any effect, so tests that build
many apps do not stack duplicate handlers.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(level: str = "INFO", logfile: Optional[str] = None) -> None:
    """Configure the root logger once.

    Parameters
    ----------
    level: str
        Logging level name such as ``"DEBUG"``. Unknown names fall back
        to ``INFO``.
    logfile: Optional[str]
        Optional path of a file to write log records to.
    """
    logger = logging.getLogger()
    if logger.handlers:
        return

    logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if logfile:
        file_handler = logging.FileHandler(Path(logfile).resolve(), encoding="utf-8")
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)
