"""Debounce delay selection for live feed refreshes."""

from dataclasses import dataclass


@dataclass(frozen=True)
class DebounceSettings:
    """Delays in seconds for each phase of the feed's life."""

    initial_with_snapshot: float = 0.0
    initial: float = 0.05
    subsequent: float = 0.3


def select_debounce_delay(
    *,
    is_initial_load: bool,
    snapshot_served: bool,
    settings: DebounceSettings = DebounceSettings(),
) -> float:
    """Pick the delay before a reset fetch runs.

    A served snapshot already covers perceived latency, so the first live
    refresh races to replace it. User edits after the first load are
    debounced to absorb typing and toggling.
    """
    if is_initial_load:
        return settings.initial_with_snapshot if snapshot_served else settings.initial
    return settings.subsequent
