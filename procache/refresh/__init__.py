"""Cache refresh engine."""
from procache.refresh.criteria import matches
from procache.refresh.fetcher import FetchScheduler, FetchSummary
from procache.refresh.notify import LoggingNotifier, Notifier, NullNotifier
from procache.refresh.progress import RefreshProgress
from procache.refresh.queue_builder import FetchQueue, QueueBuilder
from procache.refresh.scheduler import RefreshScheduler
from procache.refresh.service import RefreshResult, RefreshService

__all__ = [
    "matches",
    "FetchQueue",
    "QueueBuilder",
    "FetchScheduler",
    "FetchSummary",
    "Notifier",
    "NullNotifier",
    "LoggingNotifier",
    "RefreshProgress",
    "RefreshResult",
    "RefreshService",
    "RefreshScheduler",
]
