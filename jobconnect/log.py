"""Centralized logging configuration — stdlib only.

``LOG_LEVEL`` sets the level (default INFO). A daily log file
is written under ``logs/`` (or ``JOBCONNECT_LOG_DIR``) unless
``JOBCONNECT_LOG_FILE=0``.
"""
from __future__ import annotations

import logging
import os
import sys
from datetime import datetime
from pathlib import Path

_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"
_DATE_FMT = "%Y-%m-%d %H:%M:%S"
_QUIET_LOGGERS = ("urllib3", "charset_normalizer")
_configured = False


def _log_dir() -> Path:
    override = os.environ.get("JOBCONNECT_LOG_DIR")
    if override:
        return Path(override).expanduser()
    return Path(__file__).resolve().parent.parent / "logs"


def get_logger(name: str) -> logging.Logger:
    """Return a named logger; configures root handlers on first call."""
    global _configured
    if not _configured:
        _configure()
        _configured = True
    return logging.getLogger(name)


def _configure() -> None:
    level = getattr(logging, os.environ.get("LOG_LEVEL", "INFO").upper(), logging.INFO)
    formatter = logging.Formatter(_FORMAT, datefmt=_DATE_FMT)

    root = logging.getLogger()
    root.setLevel(level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    # Someone (pytest, an embedding app) already owns the handlers.
    if root.handlers:
        return

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    console.setFormatter(formatter)
    root.addHandler(console)

    if os.environ.get("JOBCONNECT_LOG_FILE", "1") == "0":
        return
    try:
        log_dir = _log_dir()
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(
            log_dir / f"jobconnect_{datetime.now().strftime('%Y-%m-%d')}.log", encoding="utf-8"
        )
    except OSError:
        return
    fh.setLevel(logging.DEBUG)
    fh.setFormatter(formatter)
    root.addHandler(fh)
