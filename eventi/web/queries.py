"""Cached queries over the events API.

Results are cached per query key, a tuple such as ``('events', (...params...))``
or ``('event', '42')``. A key identifies exactly one request, so a late response
for parameters that are no longer displayed only fills its own cache entry.
"""

import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Dict, Hashable, List, Optional, Tuple

from ..models import Category, EventWithCategory
from .api import EventAPIClient, FetchEventsParams

logger = logging.getLogger(__name__)

QueryKey = Tuple[Hashable, ...]

CATEGORIES_KEY: QueryKey = ('categories',)
CATEGORIES_STALE_TIME = 60 * 60

def events_key(params: FetchEventsParams) -> QueryKey:
    params = params.normalized()
    return ('events', (
        ('page', params.page),
        ('limit', params.limit),
        ('q', params.q),
        ('categoryId', params.category_id),
        ('location_like', params.location_like),
        ('date_gte', params.date_gte),
        ('date_lte', params.date_lte),
    ))

def event_key(event_id: str) -> QueryKey:
    return ('event', str(event_id))

@dataclass
class QueryState:
    """
    Cache entry for one query key.

    Fields:
        data: Last successful result
        error: Error of the last attempt, cleared on success
        updated_at: Clock time of the last success
        is_fetching: A request for this key is in flight
        is_invalidated: Marked stale by a mutation
        future: Future of the in-flight or last request
    """
    data: Any = None
    error: Optional[Exception] = None
    updated_at: Optional[float] = None
    is_fetching: bool = False
    is_invalidated: bool = False
    future: Optional[Future] = None

    @property
    def is_fetched(self) -> bool:
        """At least one request for this key has completed."""
        return self.updated_at is not None or self.error is not None

    @property
    def is_success(self) -> bool:
        return self.updated_at is not None and self.error is None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @property
    def is_loading(self) -> bool:
        """Fetching with nothing to show yet."""
        return self.is_fetching and self.data is None

class QueryClient:
    """Keyed result cache with background fetching."""

    def __init__(self, max_workers: int = 4, clock: Callable[[], float] = time.monotonic):
        self._states: Dict[QueryKey, QueryState] = {}
        self._lock = threading.RLock()
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='eventi-query')
        self._clock = clock

    def get_state(self, key: QueryKey) -> QueryState:
        with self._lock:
            return self._states.setdefault(key, QueryState())

    def get_data(self, key: QueryKey) -> Any:
        return self.get_state(key).data

    def set_data(self, key: QueryKey, data: Any) -> None:
        with self._lock:
            state = self._states.setdefault(key, QueryState())
            state.data = data
            state.error = None
            state.updated_at = self._clock()
            state.is_invalidated = False

    def is_stale(self, key: QueryKey, stale_time: float = 0) -> bool:
        state = self.get_state(key)
        if state.error is not None or state.updated_at is None or state.is_invalidated:
            return True
        return self._clock() - state.updated_at >= stale_time

    def _run(self, key: QueryKey, state: QueryState, fn: Callable[[], Any]) -> Any:
        try:
            data = fn()
        except Exception as e:
            with self._lock:
                state.error = e
                state.is_fetching = False
            logger.warning(f"Query {key[0]} failed: {e}")
            raise
        with self._lock:
            state.data = data
            state.error = None
            state.updated_at = self._clock()
            state.is_invalidated = False
            state.is_fetching = False
        return data

    def fetch(self, key: QueryKey, fn: Callable[[], Any], stale_time: float = 0) -> Future:
        """
        Fetch a key in the background.

        Returns the in-flight future when one exists, or an already-completed
        future holding the cached data when it is still fresh.
        """
        with self._lock:
            state = self._states.setdefault(key, QueryState())
            if state.is_fetching and state.future is not None:
                return state.future
            if not self.is_stale(key, stale_time):
                done: Future = Future()
                done.set_result(state.data)
                return done
            state.is_fetching = True
            state.future = self._executor.submit(self._run, key, state, fn)
            return state.future

    def fetch_sync(self, key: QueryKey, fn: Callable[[], Any], stale_time: float = 0) -> Any:
        return self.fetch(key, fn, stale_time).result()

    def prefetch(self, key: QueryKey, fn: Callable[[], Any], stale_time: float = 0) -> Future:
        """
        Warm the cache for a key nobody is waiting on yet.

        Failures are recorded on the key's state and logged; callers normally
        inspect the state rather than the returned future.
        """
        return self.fetch(key, fn, stale_time)

    def matching(self, prefix: QueryKey) -> List[QueryKey]:
        with self._lock:
            return [key for key in self._states if key[:len(prefix)] == prefix]

    def invalidate(self, prefix: QueryKey) -> None:
        """Mark every key starting with `prefix` as stale."""
        with self._lock:
            for key in self.matching(prefix):
                self._states[key].is_invalidated = True

    def remove(self, prefix: QueryKey) -> None:
        with self._lock:
            for key in self.matching(prefix):
                del self._states[key]

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)

class EventQueries:
    """Cached reads of events and categories."""

    def __init__(self, api: EventAPIClient, query_client: QueryClient):
        self.api = api
        self.query_client = query_client

    def events(self, params: FetchEventsParams, stale_time: float = 0) -> Future:
        params = params.normalized()
        return self.query_client.fetch(events_key(params), lambda: self.api.fetch_events(params), stale_time)

    def prefetch_events(self, params: FetchEventsParams, stale_time: float = 0) -> Future:
        params = params.normalized()
        return self.query_client.prefetch(events_key(params), lambda: self.api.fetch_events(params), stale_time)

    def events_state(self, params: FetchEventsParams) -> QueryState:
        return self.query_client.get_state(events_key(params))

    def event(self, event_id: str, stale_time: float = 0) -> Future:
        return self.query_client.fetch(event_key(event_id), lambda: self.api.fetch_event(event_id), stale_time)

    def event_state(self, event_id: str) -> QueryState:
        return self.query_client.get_state(event_key(event_id))

    def categories(self) -> Future:
        return self.query_client.fetch(CATEGORIES_KEY, self.api.fetch_categories, CATEGORIES_STALE_TIME)

    def cached_categories(self) -> List[Category]:
        return self.query_client.get_data(CATEGORIES_KEY) or []

    def cached_events(self, params: FetchEventsParams) -> List[EventWithCategory]:
        return self.events_state(params).data or []
