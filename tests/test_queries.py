"""
Tests for the keyed query cache.

A fake clock drives staleness; fetches still run on the worker pool, so tests
wait on the returned futures.
"""

import threading

import pytest

from eventi.web.api import FetchEventsParams
from eventi.web.queries import QueryClient, event_key, events_key


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class Counter:
    """A fetch function that counts its calls."""

    def __init__(self, result="data"):
        self.calls = 0
        self.result = result
        self.error = None

    def __call__(self):
        self.calls += 1
        if self.error:
            raise self.error
        return f"{self.result}-{self.calls}"


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def query_client(clock):
    client = QueryClient(clock=clock)
    yield client
    client.shutdown()


class TestKeys:
    """Tests for query key construction."""

    def test_equivalent_params_share_a_key(self):
        assert events_key(FetchEventsParams(page=1, limit=3, q="")) == events_key(FetchEventsParams(page=1, limit=3))

    def test_page_is_part_of_the_key(self):
        assert events_key(FetchEventsParams(page=1)) != events_key(FetchEventsParams(page=2))

    def test_event_key_uses_string_id(self):
        assert event_key(5) == ("event", "5")


class TestFetch:
    """Tests for QueryClient.fetch."""

    def test_result_is_cached(self, query_client):
        fn = Counter()
        assert query_client.fetch(("a",), fn).result(timeout=5) == "data-1"
        state = query_client.get_state(("a",))
        assert state.is_success
        assert state.data == "data-1"
        assert not state.is_fetching

    def test_fresh_data_is_not_refetched(self, query_client, clock):
        fn = Counter()
        query_client.fetch(("a",), fn, stale_time=60).result(timeout=5)
        clock.advance(30)
        assert query_client.fetch(("a",), fn, stale_time=60).result(timeout=5) == "data-1"
        assert fn.calls == 1

    def test_stale_data_is_refetched(self, query_client, clock):
        fn = Counter()
        query_client.fetch(("a",), fn, stale_time=60).result(timeout=5)
        clock.advance(60)
        assert query_client.fetch(("a",), fn, stale_time=60).result(timeout=5) == "data-2"

    def test_in_flight_requests_are_shared(self, query_client):
        release = threading.Event()
        calls = []

        def slow():
            calls.append(1)
            release.wait(timeout=5)
            return "done"

        first = query_client.fetch(("a",), slow)
        second = query_client.fetch(("a",), slow)
        assert query_client.get_state(("a",)).is_fetching
        assert query_client.get_state(("a",)).is_loading
        release.set()
        assert first is second
        assert first.result(timeout=5) == "done"
        assert len(calls) == 1

    def test_errors_are_recorded_then_cleared(self, query_client):
        fn = Counter()
        fn.error = RuntimeError("down")
        with pytest.raises(RuntimeError):
            query_client.fetch(("a",), fn).result(timeout=5)
        state = query_client.get_state(("a",))
        assert state.is_error
        assert state.is_fetched
        assert not state.is_success

        fn.error = None
        query_client.fetch(("a",), fn).result(timeout=5)
        assert query_client.get_state(("a",)).is_success

    def test_fetch_sync(self, query_client):
        assert query_client.fetch_sync(("a",), Counter()) == "data-1"


class TestInvalidation:
    """Tests for invalidate, remove and set_data."""

    def test_invalidate_by_prefix(self, query_client):
        first, second, other = Counter(), Counter(), Counter()
        query_client.fetch(("events", 1), first, stale_time=60).result(timeout=5)
        query_client.fetch(("events", 2), second, stale_time=60).result(timeout=5)
        query_client.fetch(("event", "1"), other, stale_time=60).result(timeout=5)

        query_client.invalidate(("events",))

        assert query_client.is_stale(("events", 1), stale_time=60)
        assert query_client.is_stale(("events", 2), stale_time=60)
        assert not query_client.is_stale(("event", "1"), stale_time=60)
        assert query_client.fetch(("events", 1), first, stale_time=60).result(timeout=5) == "data-2"

    def test_invalidated_data_stays_visible(self, query_client):
        query_client.fetch(("a",), Counter()).result(timeout=5)
        query_client.invalidate(("a",))
        assert query_client.get_data(("a",)) == "data-1"

    def test_remove(self, query_client):
        query_client.set_data(("event", "1"), "cached")
        query_client.remove(("event", "1"))
        assert query_client.get_data(("event", "1")) is None

    def test_set_data_is_fresh(self, query_client):
        query_client.set_data(("a",), "seeded")
        assert not query_client.is_stale(("a",), stale_time=10)
        assert query_client.fetch(("a",), Counter(), stale_time=10).result(timeout=5) == "seeded"
