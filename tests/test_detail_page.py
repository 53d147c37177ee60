"""
Tests for the event detail controller.

Covers:
- Attendance and favorite toggles, including rollback on failure.
- Rating selection, submission and local-only un-rating.
- Deletion.
"""

import threading

import pytest

from eventi.models import EventWithCategory, Rating
from eventi.web.detail_page import EventDetailController
from eventi.web.errors import NetworkFailure
from eventi.web.local_state import LocalState
from eventi.web.mutations import EventMutations
from eventi.web.queries import EventQueries, QueryClient


class RecordingAPI:
    """Stands in for EventAPIClient, recording the calls that would reach the server."""

    def __init__(self):
        self.server_calls = []
        self.fail = False
        self._lock = threading.Lock()

    def _call(self, *call):
        with self._lock:
            self.server_calls.append(call)
        if self.fail:
            raise NetworkFailure("server unavailable", status_code=503)

    def fetch_event(self, event_id):
        return EventWithCategory(id=event_id, name="Festa della Pizza")

    def mark_attendance(self, event_id):
        self._call("attendees", event_id)
        return 0

    def remove_attendance(self, event_id):
        pass

    def add_to_favorites(self, event_id):
        self._call("favorites", event_id)
        return 0

    def remove_from_favorites(self, event_id):
        pass

    def submit_rating(self, event_id, rating):
        self._call("ratings", event_id, rating)
        return Rating(id="r1", event_id=event_id, rating=rating, date="2025-06-01T00:00:00.000Z")

    def delete_event(self, event_id):
        self._call("delete", event_id)

    def writes(self):
        with self._lock:
            return list(self.server_calls)


@pytest.fixture
def api():
    return RecordingAPI()


@pytest.fixture
def local_state(tmp_path):
    return LocalState(tmp_path / "state.json")


@pytest.fixture
def query_client():
    client = QueryClient()
    yield client
    client.shutdown()


@pytest.fixture
def make_controller(api, local_state, query_client):
    def factory(event_id="42", **kwargs):
        return EventDetailController(
            event_id,
            EventQueries(api, query_client),
            EventMutations(api, query_client),
            local_state,
            **kwargs,
        )
    return factory


class TestLoad:
    """Tests for loading the event and the stored flags."""

    def test_load(self, make_controller):
        controller = make_controller()
        controller.load().result(timeout=5)
        assert controller.event.name == "Festa della Pizza"

    def test_flags_come_from_local_state(self, make_controller, local_state):
        local_state.set_attending("42", True)
        local_state.set_rating("42", 4)
        controller = make_controller()
        assert controller.is_attending
        assert not controller.is_favorite
        assert controller.has_rated
        assert controller.rating == 4


class TestAttendance:
    """Tests for toggle_attendance and toggle_favorite."""

    def test_join_calls_server_and_remembers(self, make_controller, api, local_state):
        controller = make_controller()
        assert controller.toggle_attendance() is True
        assert api.writes() == [("attendees", "42")]
        assert local_state.is_attending("42")

    def test_leave_is_local_only(self, make_controller, api, local_state):
        local_state.set_attending("42", True)
        controller = make_controller()
        assert controller.toggle_attendance() is False
        assert api.writes() == []
        assert not local_state.is_attending("42")

    def test_failure_rolls_back(self, make_controller, api, local_state):
        api.fail = True
        controller = make_controller()
        assert controller.toggle_attendance() is False
        assert not controller.is_attending
        assert not local_state.is_attending("42")
        assert isinstance(controller.last_error, NetworkFailure)

    def test_favorite_toggle(self, make_controller, api, local_state):
        controller = make_controller()
        assert controller.toggle_favorite() is True
        assert local_state.is_favorite("42")
        assert controller.toggle_favorite() is False
        assert not local_state.is_favorite("42")
        assert api.writes() == [("favorites", "42")]

    def test_favorite_failure_rolls_back(self, make_controller, api, local_state):
        api.fail = True
        controller = make_controller()
        controller.toggle_favorite()
        assert not controller.is_favorite
        assert not local_state.is_favorite("42")


class TestRating:
    """Tests for select_rating and toggle_rating."""

    def test_nothing_selected(self, make_controller, api):
        controller = make_controller()
        assert controller.toggle_rating() is False
        assert api.writes() == []

    def test_submit_then_forget(self, make_controller, api, local_state):
        controller = make_controller()
        controller.select_rating(4)
        assert controller.toggle_rating() is True
        assert api.writes() == [("ratings", "42", 4)]
        assert local_state.get_rating("42") == 4

        # Already rated: the selection is frozen
        controller.select_rating(1)
        assert controller.rating == 4

        assert controller.toggle_rating() is False
        assert controller.rating == 0
        assert local_state.get_rating("42") is None
        assert api.writes() == [("ratings", "42", 4)]

    def test_rating_out_of_range(self, make_controller):
        with pytest.raises(ValueError):
            make_controller().select_rating(6)

    def test_failed_submission_is_not_remembered(self, make_controller, api, local_state):
        api.fail = True
        controller = make_controller()
        controller.select_rating(5)
        assert controller.toggle_rating() is False
        assert not controller.has_rated
        assert local_state.get_rating("42") is None


class TestDelete:
    """Tests for delete."""

    def test_delete_notifies(self, make_controller, api):
        deleted = []
        controller = make_controller(on_deleted=lambda: deleted.append(True))
        assert controller.delete() is True
        assert deleted == [True]
        assert api.writes() == [("delete", "42")]

    def test_delete_failure(self, make_controller, api):
        api.fail = True
        deleted = []
        controller = make_controller(on_deleted=lambda: deleted.append(True))
        assert controller.delete() is False
        assert deleted == []
        assert controller.last_error is not None
