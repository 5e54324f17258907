"""Progress notification sinks."""

from __future__ import annotations

import logging
from typing import Protocol


class Notifier(Protocol):
    def notify(self, message: str) -> None:
        ...


class NullNotifier:
    """Used when nobody registered for progress messages."""

    def notify(self, message: str) -> None:
        return None


class LoggingNotifier:
    """Forward progress messages to a logger."""

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.INFO):
        self.logger = logger or logging.getLogger("procache.progress")
        self.level = level

    def notify(self, message: str) -> None:
        self.logger.log(self.level, message)
