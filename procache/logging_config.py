"""Logging configuration for procache.

PROCACHE_LOG_LEVEL and PROCACHE_LOG_FILE override the arguments, so the
scheduler thread and the API share one setup without code changes.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

# Chatty third-party loggers; one line per ProShop request is too much
QUIET_LOGGERS = ("httpx", "httpcore", "aiosqlite", "schedule")


def setup_logging(
    log_level: Optional[str] = None,
    log_file: Optional[Path] = None,
) -> logging.Logger:
    """Configure root logging and return the ``procache`` logger."""
    level_name = os.getenv("PROCACHE_LOG_LEVEL") or log_level or "INFO"
    env_file = os.getenv("PROCACHE_LOG_FILE")
    if env_file:
        log_file = Path(env_file)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(
        level=getattr(logging, level_name.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
    )

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    return logging.getLogger("procache")
