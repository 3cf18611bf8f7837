"""Feed orchestrator: snapshot, live refresh and pagination control.

States::

    IDLE -> SNAPSHOT_SERVED -> LIVE_LOADING -> HYDRATED <-> PAGINATING

Every triggered fetch runs inside a ``FetchSession``. Starting a new session
supersedes the previous one; a superseded session's results are dropped on
arrival, so only the authoritative session ever touches listings or cursors.
"""

import asyncio
import logging
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from marketfeed.cache import SnapshotCache
from marketfeed.data import FeedCursors, Listing
from marketfeed.feed.debounce import DebounceSettings, select_debounce_delay
from marketfeed.fetch import MultiSourceFetcher
from marketfeed.filters import FilterCriteria, FilterIntent

logger = logging.getLogger(__name__)

FETCH_FAILED_MESSAGE = "Failed to fetch listings"


class FeedState(StrEnum):
    IDLE = "idle"
    SNAPSHOT_SERVED = "snapshot_served"
    LIVE_LOADING = "live_loading"
    HYDRATED = "hydrated"
    PAGINATING = "paginating"


@dataclass(frozen=True)
class FeedView:
    """Everything a UI needs to render the feed at one point in time."""

    listings: tuple[Listing, ...]
    loading: bool
    loading_more: bool
    has_more: bool
    error: str | None
    is_transitioning: bool
    visual_commit_ready: bool
    listings_changed_trigger: int
    has_hydrated_live_data: bool
    state: FeedState


@dataclass
class FetchSession:
    """Cancellation scope for one orchestration cycle."""

    id: int
    criteria: FilterCriteria
    reset: bool
    background: bool = False
    started: bool = False
    cancelled: bool = False


FeedListener = Callable[[FeedView], None]


class FeedOrchestrator:
    """Drive the feed from filter criteria to rendered listings.

    The orchestrator is the single subscriber of the ``FilterIntent``. It
    serves the snapshot for clean criteria at start, debounces live reset
    fetches, appends pages on ``fetch_more`` and writes the snapshot after a
    clean reset succeeds. Public methods never raise fetch errors; failures
    land in ``error`` and the last good listings stay on screen.

    Args:
        intent: Source of filter criteria.
        fetcher: Multi-source fetcher for live pages.
        snapshot_cache: Snapshot cache, or None to disable snapshots.
        viewer_id: Identity keying the snapshot (None for anonymous).
        debounce: Delay settings for reset fetches.
        enable_snapshot: Serve and write snapshots when a cache is given.
    """

    def __init__(
        self,
        intent: FilterIntent,
        fetcher: MultiSourceFetcher,
        snapshot_cache: SnapshotCache | None = None,
        *,
        viewer_id: str | None = None,
        debounce: DebounceSettings | None = None,
        enable_snapshot: bool = True,
    ) -> None:
        self._intent = intent
        self._fetcher = fetcher
        self._cache = snapshot_cache if enable_snapshot else None
        self._viewer_id = viewer_id
        self._debounce = debounce or DebounceSettings()

        self._state = FeedState.IDLE
        self._stable_state = FeedState.IDLE
        self._listings: list[Listing] = []
        self._cursors = FeedCursors()
        self._has_more = True
        self._loading = False
        self._loading_more = False
        self._error: str | None = None
        self._is_transitioning = False
        self._visual_commit_ready = True
        self._listings_changed_trigger = 0
        self._has_hydrated = False

        self._snapshot_served = False
        self._first_load_done = False

        self._session: FetchSession | None = None
        self._active: FetchSession | None = None
        self._session_counter = 0
        self._pending: asyncio.Task[None] | None = None
        self._tasks: set[asyncio.Task[None]] = set()
        self._listeners: list[FeedListener] = []
        self._unsubscribe: Callable[[], None] | None = None
        self._started = False
        self._closed = False

    # ------------------------------------------------------------------
    # Outputs
    # ------------------------------------------------------------------

    @property
    def listings(self) -> tuple[Listing, ...]:
        return tuple(self._listings)

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def loading_more(self) -> bool:
        return self._loading_more

    @property
    def has_more(self) -> bool:
        return self._has_more

    @property
    def error(self) -> str | None:
        return self._error

    @property
    def is_transitioning(self) -> bool:
        return self._is_transitioning

    @property
    def visual_commit_ready(self) -> bool:
        return self._visual_commit_ready

    @property
    def listings_changed_trigger(self) -> int:
        return self._listings_changed_trigger

    @property
    def has_hydrated_live_data(self) -> bool:
        return self._has_hydrated

    @property
    def state(self) -> FeedState:
        return self._state

    @property
    def cursors(self) -> FeedCursors:
        return self._cursors

    @property
    def snapshot_served(self) -> bool:
        """True between serving a snapshot and scheduling its live refresh."""
        return self._snapshot_served

    @property
    def view(self) -> FeedView:
        return FeedView(
            listings=tuple(self._listings),
            loading=self._loading,
            loading_more=self._loading_more,
            has_more=self._has_more,
            error=self._error,
            is_transitioning=self._is_transitioning,
            visual_commit_ready=self._visual_commit_ready,
            listings_changed_trigger=self._listings_changed_trigger,
            has_hydrated_live_data=self._has_hydrated,
            state=self._state,
        )

    def subscribe(self, listener: FeedListener) -> Callable[[], None]:
        """Observe every view change. Returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Serve the snapshot if eligible and schedule the first live fetch.

        Must be called from a running event loop.
        """
        if self._started or self._closed:
            return
        self._started = True
        self._unsubscribe = self._intent.subscribe(self._on_criteria_changed)

        if not self._serve_snapshot(self._intent.criteria):
            self._loading = True
        self._schedule_reset()

    def set_viewer(self, viewer_id: str | None) -> None:
        """Switch viewer identity; reloads the feed like a criteria change."""
        if viewer_id == self._viewer_id:
            return
        self._viewer_id = viewer_id
        if self._started and not self._closed:
            self._schedule_reset()

    async def close(self) -> None:
        """Cancel all scheduled and in-flight work and stop watching criteria."""
        self._closed = True
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self._session is not None:
            self._session.cancelled = True
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def wait_until_settled(self) -> None:
        """Wait for the authoritative scheduled or in-flight reset to finish."""
        while self._pending is not None and not self._pending.done():
            await asyncio.wait({self._pending})

    # ------------------------------------------------------------------
    # Actions
    # ------------------------------------------------------------------

    async def refresh(self) -> None:
        """Run a reset fetch now. Listings are replaced wholly on success."""
        if self._closed:
            return
        task = self._schedule_reset(delay=0.0)
        await asyncio.wait({task})

    async def fetch_more(self) -> None:
        """Append the next page.

        No-op unless the feed is hydrated, has more, and nothing else is
        scheduled or in flight. A snapshot is never paginated: if the live
        refresh behind it fails, the feed stays on the snapshot until
        ``refresh()`` or a criteria change succeeds.
        """
        if (
            self._closed
            or self._state is not FeedState.HYDRATED
            or not self._has_more
            or self._active is not None
        ):
            return

        session = self._begin_session(reset=False)
        session.started = True
        self._state = FeedState.PAGINATING
        self._loading_more = True
        self._notify()

        try:
            page = await self._fetcher.fetch(session.criteria, self._cursors, reset=False)
        except Exception as e:
            if not self._is_current(session):
                return
            logger.warning("Pagination failed: %s", e)
            self._error = str(e) or FETCH_FAILED_MESSAGE
            self._state = FeedState.HYDRATED
            self._loading_more = False
            self._active = None
            self._notify()
            return

        if not self._is_current(session):
            logger.debug("Discarding page from superseded session %d", session.id)
            return

        shown = {listing.key for listing in self._listings}
        appended = [listing for listing in page.listings if listing.key not in shown]
        self._listings.extend(appended)
        self._cursors = page.cursors
        self._has_more = page.has_more
        self._error = None
        self._state = FeedState.HYDRATED
        self._loading_more = False
        self._active = None
        logger.info("Appended %d listings (session %d)", len(appended), session.id)
        self._notify()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _on_criteria_changed(self, criteria: FilterCriteria) -> None:
        if self._closed:
            return
        self._schedule_reset()

    def _serve_snapshot(self, criteria: FilterCriteria) -> bool:
        if self._cache is None or not criteria.is_clean:
            return False
        try:
            snapshot = self._cache.read(self._viewer_id)
        except Exception:
            logger.debug("Snapshot read failed; treating as a miss", exc_info=True)
            return False
        if snapshot is None or not snapshot.listings:
            return False

        self._listings = list(snapshot.listings)
        self._cursors = snapshot.cursors
        self._has_more = len(snapshot.listings) >= self._fetcher.page_size
        self._loading = False
        self._listings_changed_trigger += 1
        self._snapshot_served = True
        self._state = self._stable_state = FeedState.SNAPSHOT_SERVED
        logger.info("Served snapshot with %d listings", len(snapshot.listings))
        self._notify()
        return True

    def _begin_session(self, *, reset: bool, background: bool = False) -> FetchSession:
        if self._session is not None:
            self._session.cancelled = True
        self._session_counter += 1
        session = FetchSession(
            id=self._session_counter,
            criteria=self._intent.criteria,
            reset=reset,
            background=background,
        )
        self._session = session
        self._active = session
        return session

    def _is_current(self, session: FetchSession) -> bool:
        return not self._closed and not session.cancelled and self._session is session

    def _schedule_reset(self, delay: float | None = None) -> asyncio.Task[None]:
        background = self._snapshot_served and not self._first_load_done
        if delay is None:
            delay = select_debounce_delay(
                is_initial_load=not self._first_load_done,
                snapshot_served=self._snapshot_served,
                settings=self._debounce,
            )
        self._snapshot_served = False

        previous = self._session
        if self._pending is not None and previous is not None and not previous.started:
            # Still waiting out its debounce: nothing reached the sources yet.
            self._pending.cancel()

        session = self._begin_session(reset=True, background=background)
        self._loading_more = False
        self._is_transitioning = True
        self._visual_commit_ready = False
        task = self._spawn(self._run_reset(session, delay))
        self._pending = task
        self._notify()
        return task

    async def _run_reset(self, session: FetchSession, delay: float) -> None:
        if delay > 0:
            await asyncio.sleep(delay)
        if not self._is_current(session):
            return

        session.started = True
        self._state = FeedState.LIVE_LOADING
        if not session.background:
            self._loading = True
        self._loading_more = False
        self._notify()

        try:
            page = await self._fetcher.fetch(session.criteria, FeedCursors(), reset=True)
        except Exception as e:
            if not self._is_current(session):
                logger.debug("Ignoring failure from superseded session %d", session.id)
                return
            logger.warning("Feed refresh failed: %s", e)
            self._error = str(e) or FETCH_FAILED_MESSAGE
            self._state = self._stable_state
            self._finish_reset()
            return

        if not self._is_current(session):
            logger.debug("Discarding results from superseded session %d", session.id)
            return

        self._listings = list(page.listings)
        self._cursors = page.cursors
        self._has_more = page.has_more
        self._error = None
        self._listings_changed_trigger += 1
        self._has_hydrated = True
        self._state = self._stable_state = FeedState.HYDRATED
        logger.info("Loaded %d listings (session %d)", len(page.listings), session.id)

        if self._cache is not None and session.criteria.is_clean and page.listings:
            try:
                self._cache.write(self._viewer_id, page.listings, page.cursors)
            except Exception:
                logger.warning("Could not save feed snapshot", exc_info=True)

        self._finish_reset()

    def _finish_reset(self) -> None:
        self._first_load_done = True
        self._loading = False
        self._is_transitioning = False
        self._visual_commit_ready = True
        self._active = None
        self._notify()

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task[None]:
        task = asyncio.get_running_loop().create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _notify(self) -> None:
        if not self._listeners:
            return
        view = self.view
        for listener in list(self._listeners):
            listener(view)
