"""Feed orchestration: debounce policy and the fetch state machine."""

from marketfeed.feed.debounce import DebounceSettings, select_debounce_delay
from marketfeed.feed.orchestrator import (
    FeedListener,
    FeedOrchestrator,
    FeedState,
    FeedView,
    FetchSession,
)

__all__ = [
    "DebounceSettings",
    "FeedListener",
    "FeedOrchestrator",
    "FeedState",
    "FeedView",
    "FetchSession",
    "select_debounce_delay",
]
