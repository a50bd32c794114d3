"""Logging setup for jobsieve: console output plus a dated log file.

Modules call ``get_logger(__name__)``. The first call installs the handlers
with the level from ``LOG_LEVEL``; the CLI may call ``setup_logging`` again
with an explicit level, which only adjusts levels on the existing handlers.
"""
from __future__ import annotations

import logging
import os
import sys
from datetime import date
from pathlib import Path

LOGS_DIR = Path(__file__).resolve().parent.parent / "logs"
LOG_FORMAT = "%(asctime)s  %(levelname)-8s  %(name)s  %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# HTTP and LLM client libraries log every request at INFO.
QUIET_LOGGERS = ("httpx", "httpcore", "openai", "asyncio")

_console: logging.Handler | None = None


def _level(name: str | None) -> int:
    value = (name or os.environ.get("LOG_LEVEL") or "INFO").upper()
    level = logging.getLevelName(value)
    return level if isinstance(level, int) else logging.INFO


def _file_handler(formatter: logging.Formatter) -> logging.Handler | None:
    if os.environ.get("JOBSIEVE_NO_FILE_LOG"):
        return None
    try:
        LOGS_DIR.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(
            LOGS_DIR / f"jobsieve_{date.today():%Y-%m-%d}.log", encoding="utf-8"
        )
    except OSError as exc:
        sys.stderr.write(f"jobsieve: file logging disabled ({exc})\n")
        return None
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(formatter)
    return handler


def setup_logging(level: str | None = None) -> None:
    """Install handlers once; later calls only change the console level."""
    global _console
    resolved = _level(level)
    root = logging.getLogger()

    if _console is None:
        formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
        _console = logging.StreamHandler(sys.stdout)
        _console.setFormatter(formatter)
        # Leave a root logger the host application already configured.
        if not root.handlers:
            root.addHandler(_console)
            file_handler = _file_handler(formatter)
            if file_handler is not None:
                root.addHandler(file_handler)

    _console.setLevel(resolved)
    root.setLevel(min(resolved, logging.DEBUG) if _has_file_handler(root) else resolved)
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(resolved, logging.WARNING))


def _has_file_handler(root: logging.Logger) -> bool:
    return any(isinstance(h, logging.FileHandler) for h in root.handlers)


def get_logger(name: str) -> logging.Logger:
    if _console is None:
        setup_logging()
    return logging.getLogger(name)
