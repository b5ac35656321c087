"""Buffer utilities for the hormone simulation."""

from .history import DEFAULT_MAX_HISTORY, History, HistoryRecord

__all__ = [
    "DEFAULT_MAX_HISTORY",
    "History",
    "HistoryRecord",
]
