"""
Tests for the event list controller.

The controller runs against an in-memory API that pages the same way the
server does, so the lookahead behaviour can be checked without HTTP.
"""

import threading
from datetime import datetime, timedelta, timezone

import pytest

from eventi.models import EventWithCategory
from eventi.models.event import format_instant
from eventi.web.errors import NetworkFailure
from eventi.web.list_page import (
    VIEW_EMPTY,
    VIEW_ERROR,
    VIEW_EVENTS,
    VIEW_LOADING,
    EventListController,
    period_bounds,
)
from eventi.web.queries import EventQueries, QueryClient

NOW = datetime(2025, 6, 15, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class InMemoryEventsAPI:
    """Serves fetch_events from a list, recording every request."""

    def __init__(self, count):
        self.events = [
            EventWithCategory(id=str(i + 1), name=f"Evento {i + 1}", location="Napoli",
                              date=format_instant(NOW + timedelta(days=i)))
            for i in range(count)
        ]
        self.requests = []
        self.fail = False
        self.fail_pages = set()
        # Cleared to hold fetches in flight
        self.gate = threading.Event()
        self.gate.set()
        self._lock = threading.Lock()

    def fetch_events(self, params):
        self.gate.wait(timeout=5)
        with self._lock:
            self.requests.append(params)
        if self.fail or params.page in self.fail_pages:
            raise NetworkFailure("Failed to fetch events")
        matches = [e for e in self.events if not params.q or params.q.lower() in e.name.lower()]
        start = (params.page - 1) * params.limit
        return matches[start:start + params.limit]

    def searched_for(self):
        with self._lock:
            return [params.q for params in self.requests]


def make_controller(count, **kwargs):
    api = InMemoryEventsAPI(count)
    query_client = QueryClient()
    controller = EventListController(EventQueries(api, query_client), now=lambda: NOW, **kwargs)
    return controller, api, query_client


@pytest.fixture
def scrolls():
    return []


class TestPagination:
    """Tests for the Next/Previous decision."""

    def test_walks_seven_events_in_pages_of_three(self, scrolls):
        controller, _, query_client = make_controller(7, on_scroll_top=lambda: scrolls.append(1))

        view = controller.settle(timeout=5)
        assert view.kind == VIEW_EVENTS
        assert [e.id for e in view.events] == ["1", "2", "3"]
        assert view.pagination.previous_disabled
        assert not view.pagination.next_disabled

        controller.next_page().result(timeout=5)
        view = controller.settle(timeout=5)
        assert controller.current_page == 2
        assert [e.id for e in view.events] == ["4", "5", "6"]
        assert not view.pagination.next_disabled

        controller.next_page().result(timeout=5)
        view = controller.settle(timeout=5)
        assert [e.id for e in view.events] == ["7"]
        assert view.pagination.next_disabled
        assert not view.pagination.previous_disabled
        assert controller.next_page() is None
        assert controller.current_page == 3
        assert scrolls == [1, 1]

        controller.previous_page().result(timeout=5)
        assert controller.current_page == 2
        assert len(scrolls) == 3
        query_client.shutdown()

    def test_next_disabled_when_following_page_is_empty(self):
        controller, api, query_client = make_controller(6)
        controller.settle(timeout=5)
        controller.next_page().result(timeout=5)
        view = controller.settle(timeout=5)

        assert len(view.events) == 3
        assert view.pagination.next_disabled
        assert not controller.can_go_next
        # The lookahead for page 3 was requested and came back empty
        assert any(params.page == 3 for params in api.requests)
        query_client.shutdown()

    def test_single_full_page(self):
        controller, _, query_client = make_controller(3)
        view = controller.settle(timeout=5)
        assert len(view.events) == 3
        assert view.pagination.next_disabled
        query_client.shutdown()

    def test_no_lookahead_for_partial_page(self):
        controller, api, query_client = make_controller(2)
        controller.settle(timeout=5)
        assert [params.page for params in api.requests] == [1]
        assert controller.maybe_prefetch() is None
        query_client.shutdown()

    def test_previous_disabled_on_first_page(self):
        controller, _, query_client = make_controller(7)
        controller.settle(timeout=5)
        assert controller.previous_page() is None
        query_client.shutdown()

    def test_failed_lookahead_keeps_next_disabled(self):
        controller, api, query_client = make_controller(7)
        api.fail_pages = {2}
        controller.settle(timeout=5)
        assert not controller.has_more
        query_client.shutdown()

    def test_controls_disabled_while_fetching(self):
        controller, api, query_client = make_controller(7)
        controller.settle(timeout=5)
        controller.next_page().result(timeout=5)
        controller.settle(timeout=5)
        assert controller.can_go_next
        assert controller.can_go_previous

        api.gate.clear()
        pending = controller.retry()
        assert controller.is_fetching
        assert not controller.can_go_next
        assert not controller.can_go_previous
        pagination = controller.pagination()
        assert pagination.next_disabled
        assert pagination.previous_disabled
        assert controller.next_page() is None
        assert controller.previous_page() is None
        assert controller.current_page == 2

        api.gate.set()
        pending.result(timeout=5)
        assert controller.can_go_next
        assert controller.can_go_previous
        query_client.shutdown()

    def test_response_for_old_filters_does_not_look_ahead(self):
        controller, api, query_client = make_controller(7)
        api.gate.clear()
        stale = controller.refresh()
        fresh = controller.set_category("1")
        api.gate.set()
        stale.result(timeout=5)
        fresh.result(timeout=5)
        controller.settle(timeout=5)
        query_client.shutdown()

        assert not any(params.page == 2 and params.category_id is None for params in api.requests)
        assert any(params.page == 2 and params.category_id == "1" for params in api.requests)


class TestFilters:
    """Tests for debounced text filters and the other filters."""

    def test_search_waits_for_typing_to_pause(self):
        clock = FakeClock()
        controller, api, query_client = make_controller(7, clock=clock)
        controller.settle(timeout=5)

        controller.set_search("ev")
        clock.advance(0.1)
        assert controller.tick() is None
        controller.set_search("evento 7")
        clock.advance(0.25)
        assert controller.tick() is None
        clock.advance(0.05)
        controller.tick().result(timeout=5)

        view = controller.settle(timeout=5)
        assert [e.id for e in view.events] == ["7"]
        assert "ev" not in api.searched_for()
        assert "evento 7" in api.searched_for()
        query_client.shutdown()

    def test_filter_change_resets_page(self):
        controller, _, query_client = make_controller(7)
        controller.settle(timeout=5)
        controller.next_page().result(timeout=5)
        controller.set_search("evento")
        assert controller.current_page == 1
        query_client.shutdown()

    def test_category_change_refetches_first_page(self):
        controller, api, query_client = make_controller(7)
        controller.current_page = 2
        controller.set_category("3").result(timeout=5)
        assert controller.current_page == 1
        assert any(params.category_id == "3" and params.page == 1 for params in api.requests)
        query_client.shutdown()

    def test_period_sets_date_bounds(self):
        controller, api, query_client = make_controller(7)
        controller.set_period("future").result(timeout=5)
        assert any(
            params.date_gte == format_instant(NOW) and params.date_lte is None for params in api.requests
        )

        controller.set_period("nonsense").result(timeout=5)
        assert controller.period == "all"
        assert controller.params().date_gte is None
        query_client.shutdown()

    def test_period_bounds(self):
        assert period_bounds("all", NOW) == (None, None)
        assert period_bounds("past", NOW) == (None, format_instant(NOW))
        start, end = period_bounds("today", NOW)
        assert start == "2025-06-15T00:00:00.000Z"
        assert end == "2025-06-15T23:59:59.999Z"


class TestView:
    """Tests for the rendered view kinds."""

    def test_loading_before_first_response(self):
        controller, _, query_client = make_controller(3)
        assert controller.view().kind == VIEW_LOADING
        query_client.shutdown()

    def test_empty(self):
        controller, _, query_client = make_controller(0)
        assert controller.settle(timeout=5).kind == VIEW_EMPTY
        query_client.shutdown()

    def test_error_then_retry(self):
        controller, api, query_client = make_controller(4)
        api.fail = True
        view = controller.settle(timeout=5)
        assert view.kind == VIEW_ERROR
        assert isinstance(view.error, NetworkFailure)

        api.fail = False
        controller.retry().result(timeout=5)
        assert controller.settle(timeout=5).kind == VIEW_EVENTS
        query_client.shutdown()


class TestSearchParams:
    """Tests for exporting and restoring the URL state."""

    def test_defaults_are_omitted(self):
        controller, _, query_client = make_controller(0)
        assert controller.to_search_params() == {}
        query_client.shutdown()

    def test_round_trip(self):
        controller, _, query_client = make_controller(0)
        controller.restore_search_params({
            "q": "jazz",
            "categoryId": "1",
            "location_like": "Napoli",
            "period": "past",
            "page": "3",
        })
        assert controller.current_page == 3
        assert controller.search.settled == "jazz"
        assert controller.params().date_lte == format_instant(NOW)
        assert controller.to_search_params() == {
            "q": "jazz",
            "categoryId": "1",
            "location_like": "Napoli",
            "period": "past",
            "page": "3",
        }
        query_client.shutdown()

    def test_bad_values_fall_back(self):
        controller, _, query_client = make_controller(0)
        controller.restore_search_params({"page": "x", "period": "yesterday"})
        assert controller.current_page == 1
        assert controller.period == "all"
        query_client.shutdown()
