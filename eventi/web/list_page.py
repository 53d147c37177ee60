"""Controller of the event list page.

Owns the filters, the current page and the "is there a next page" decision.
The list endpoint returns no total count, so whenever the visible page is full
the controller quietly fetches the following page; "Next" is offered only once
that page is known to be non-empty.
"""

import logging
import time
from concurrent.futures import Future
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Tuple

from ..models import EventWithCategory
from ..models.event import format_instant
from .api import FetchEventsParams
from .debounce import DEBOUNCE_SECONDS, Debounced
from .queries import EventQueries, QueryState, events_key

logger = logging.getLogger(__name__)

EVENTS_PER_PAGE = 3
PREFETCH_STALE_TIME = 5 * 60

PERIODS = ('all', 'past', 'today', 'future')

VIEW_ERROR = 'error'
VIEW_LOADING = 'loading'
VIEW_EMPTY = 'empty'
VIEW_EVENTS = 'events'

def period_bounds(period: str, now: datetime) -> Tuple[Optional[str], Optional[str]]:
    """`(date_gte, date_lte)` for a period filter, relative to the local time `now`."""
    if period == 'past':
        return None, format_instant(now)
    if period == 'today':
        start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        end = start + timedelta(days=1) - timedelta(milliseconds=1)
        return format_instant(start), format_instant(end)
    if period == 'future':
        return format_instant(now), None
    return None, None

@dataclass
class PaginationState:
    current_page: int
    is_fetching: bool
    events_length: int
    events_per_page: int
    has_more: bool

    @property
    def previous_disabled(self) -> bool:
        return self.current_page <= 1 or self.is_fetching

    @property
    def next_disabled(self) -> bool:
        return (
            self.events_length < self.events_per_page
            or not self.has_more
            or self.is_fetching
            or self.events_length == 0
        )

@dataclass
class ListView:
    """What the page should render right now."""
    kind: str
    events: List[EventWithCategory] = field(default_factory=list)
    error: Optional[Exception] = None
    pagination: Optional[PaginationState] = None

class EventListController:
    """Filter, pagination and lookahead state of the event list."""

    def __init__(
        self,
        queries: EventQueries,
        per_page: int = EVENTS_PER_PAGE,
        debounce: float = DEBOUNCE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        now: Optional[Callable[[], datetime]] = None,
        on_scroll_top: Optional[Callable[[], None]] = None,
    ):
        self.queries = queries
        self.per_page = per_page
        self.on_scroll_top = on_scroll_top
        self._now = now or (lambda: datetime.now().astimezone())

        self.search = Debounced("", debounce, clock)
        self.location = Debounced("", debounce, clock)
        self.category_id: Optional[str] = None
        self.period = 'all'
        self._date_range: Tuple[Optional[str], Optional[str]] = (None, None)
        self.current_page = 1
        self._requested: Optional[FetchEventsParams] = None

    # -- query parameters -------------------------------------------------

    def params(self, page: Optional[int] = None) -> FetchEventsParams:
        """Parameters of the visible page (or of `page`) from the settled filter values."""
        date_gte, date_lte = self._date_range
        return FetchEventsParams(
            page=page or self.current_page,
            limit=self.per_page,
            q=self.search.settled or None,
            category_id=self.category_id or None,
            location_like=self.location.settled or None,
            date_gte=date_gte,
            date_lte=date_lte,
        )

    @property
    def current_state(self) -> QueryState:
        return self.queries.events_state(self.params())

    @property
    def next_page_state(self) -> QueryState:
        return self.queries.events_state(self.params(self.current_page + 1))

    @property
    def events(self) -> List[EventWithCategory]:
        return self.current_state.data or []

    @property
    def is_fetching(self) -> bool:
        return self.current_state.is_fetching

    # -- filters ----------------------------------------------------------

    def set_search(self, text: str) -> None:
        """Update the search box. The query follows once typing pauses; call `tick()`."""
        self.search.set(text)
        self.current_page = 1

    def set_location(self, text: str) -> None:
        """Update the location box. The query follows once typing pauses; call `tick()`."""
        self.location.set(text)
        self.current_page = 1

    def set_category(self, category_id: Optional[str]) -> Future:
        self.category_id = category_id or None
        self.current_page = 1
        return self.refresh()

    def set_period(self, period: str) -> Future:
        self.period = period if period in PERIODS else 'all'
        self._date_range = period_bounds(self.period, self._now())
        self.current_page = 1
        return self.refresh()

    # -- fetching ---------------------------------------------------------

    def refresh(self) -> Future:
        """Fetch the visible page; once it arrives, look one page ahead."""
        params = self.params()
        self._requested = params
        future = self.queries.events(params)
        future.add_done_callback(lambda _: self._after_fetch(params))
        return future

    def _after_fetch(self, params: FetchEventsParams) -> None:
        # A response for parameters no longer on screen only fills its own cache entry
        if params != self.params():
            logger.debug(f"Ignoring response for page {params.page}; filters changed")
            return
        self.maybe_prefetch()

    def maybe_prefetch(self) -> Optional[Future]:
        """Fetch the next page in the background if the visible page is full and settled."""
        state = self.current_state
        if state.is_fetching or len(state.data or []) != self.per_page:
            return None
        next_params = self.params(self.current_page + 1)
        logger.debug(f"Looking ahead to page {next_params.page}")
        return self.queries.prefetch_events(next_params, stale_time=PREFETCH_STALE_TIME)

    def tick(self) -> Optional[Future]:
        """Apply filter edits whose quiet period has elapsed. Call periodically from the UI loop."""
        if self.params() != self._requested:
            return self.refresh()
        return None

    def settle(self, timeout: Optional[float] = None) -> ListView:
        """Block until the visible page and its lookahead have been fetched, then return the view."""
        if self._requested != self.params():
            self.refresh()
        state = self.current_state
        if state.future is not None:
            state.future.exception(timeout)
        prefetch = self.maybe_prefetch()
        if prefetch is not None:
            prefetch.exception(timeout)
        return self.view()

    def retry(self) -> Future:
        """Re-issue the visible page's request after an error."""
        self.queries.query_client.invalidate(events_key(self.params()))
        return self.refresh()

    # -- pagination -------------------------------------------------------

    @property
    def has_more(self) -> bool:
        """A next page is known to exist: this page is full and the lookahead came back non-empty."""
        if len(self.events) != self.per_page:
            return False
        lookahead = self.next_page_state
        return lookahead.is_success and len(lookahead.data or []) > 0

    @property
    def can_go_next(self) -> bool:
        return self.has_more and not self.is_fetching

    @property
    def can_go_previous(self) -> bool:
        return self.current_page > 1 and not self.is_fetching

    def _scroll_to_top(self) -> None:
        if self.on_scroll_top:
            self.on_scroll_top()

    def next_page(self) -> Optional[Future]:
        if not self.can_go_next:
            return None
        self.current_page += 1
        self._scroll_to_top()
        return self.refresh()

    def previous_page(self) -> Optional[Future]:
        if not self.can_go_previous:
            return None
        self.current_page -= 1
        self._scroll_to_top()
        return self.refresh()

    def pagination(self) -> PaginationState:
        return PaginationState(
            current_page=self.current_page,
            is_fetching=self.is_fetching,
            events_length=len(self.events),
            events_per_page=self.per_page,
            has_more=self.has_more,
        )

    def view(self) -> ListView:
        state = self.current_state
        events = state.data or []
        if state.is_error:
            return ListView(kind=VIEW_ERROR, error=state.error)
        if not events and (state.is_loading or not state.is_fetched):
            return ListView(kind=VIEW_LOADING)
        if not events:
            return ListView(kind=VIEW_EMPTY)
        return ListView(kind=VIEW_EVENTS, events=events, pagination=self.pagination())

    # -- URL state --------------------------------------------------------

    def to_search_params(self) -> dict:
        """Filter state as URL query parameters, omitting defaults."""
        params = {}
        if self.search.settled:
            params['q'] = self.search.settled
        if self.category_id:
            params['categoryId'] = self.category_id
        if self.location.settled:
            params['location_like'] = self.location.settled
        if self.period != 'all':
            params['period'] = self.period
        if self.current_page > 1:
            params['page'] = str(self.current_page)
        return params

    def restore_search_params(self, params: dict) -> None:
        """Restore filter state from URL query parameters without fetching."""
        try:
            page = int(params.get('page') or 1)
        except ValueError:
            page = 1
        self.current_page = page if page >= 1 else 1
        self.search.reset(params.get('q') or "")
        self.location.reset(params.get('location_like') or "")
        self.category_id = params.get('categoryId') or None
        period = params.get('period') or 'all'
        self.period = period if period in PERIODS else 'all'
        self._date_range = period_bounds(self.period, self._now())
