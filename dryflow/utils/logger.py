# utils/logger.py
from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from logging.handlers import RotatingFileHandler

LOGGER_NAME = "dryflow"
DEFAULT_LEVEL = logging.WARNING


def _env_level() -> int:
    """LOG_LEVEL from env (DEBUG/INFO/WARNING/ERROR), else WARNING."""
    lvl = logging.getLevelName(os.getenv("LOG_LEVEL", "").upper())
    return lvl if isinstance(lvl, int) else DEFAULT_LEVEL


def _colorize(level: int, msg: str) -> str:
    """ANSI color for warnings and errors when stderr is a terminal."""
    if not sys.stderr.isatty():
        return msg
    if level >= logging.ERROR:
        return f"\033[91m{msg}\033[0m"   # red
    if level >= logging.WARNING:
        return f"\033[93m{msg}\033[0m"   # yellow
    return msg


class _ColorFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        return _colorize(record.levelno, super().format(record))


def init_logger(
    name: str = LOGGER_NAME,
    level: int | None = None,
    log_dir: str | Path | None = None,
    file_name: str = "dryflow.log",
    file_max_mb: int = 5,
    file_backup: int = 3,
) -> logging.Logger:
    """
    Project logger. Records go to stderr so the report on stdout stays clean;
    with `log_dir` (or DRYFLOW_LOG_DIR) a rotating file gets a plain copy.
    """
    logger = logging.getLogger(name)
    logger.handlers.clear()
    logger.propagate = False

    fmt = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d - %(message)s"
    datefmt = "%Y-%m-%d %H:%M:%S"

    sh = logging.StreamHandler(sys.stderr)
    sh.setFormatter(_ColorFormatter(fmt=fmt, datefmt=datefmt))
    logger.addHandler(sh)

    log_dir = log_dir or os.getenv("DRYFLOW_LOG_DIR")
    if log_dir:
        log_dir = Path(log_dir)
        log_dir.mkdir(parents=True, exist_ok=True)
        fh = RotatingFileHandler(
            filename=str(log_dir / file_name),
            maxBytes=file_max_mb * 1024 * 1024,
            backupCount=file_backup,
            encoding="utf-8",
        )
        fh.setFormatter(logging.Formatter(fmt=fmt, datefmt=datefmt))
        logger.addHandler(fh)

    set_level(level if level is not None else _env_level(), logger)
    return logger


def set_level(level: int, logger: logging.Logger | None = None) -> None:
    """Change the level of the logger and of every handler it owns (`--verbose`)."""
    logger = logger or logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    for h in logger.handlers:
        h.setLevel(level)


# Convenience default logger
log = init_logger()


def get_logger(child: str) -> logging.Logger:
    """Module logger under the project logger, e.g. get_logger("sandbox")."""
    return logging.getLogger(LOGGER_NAME).getChild(child)
