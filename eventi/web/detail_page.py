"""Controller of the event detail page."""

import logging
from concurrent.futures import Future
from typing import Callable, Optional

from ..models import EventWithCategory
from .errors import ClientError
from .local_state import LocalState
from .mutations import EventMutations
from .queries import EventQueries, QueryState, event_key

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5

class EventDetailController:
    """
    Attendance, favorite and rating actions for one event.

    The "have I done this" flags live in `LocalState`. Toggles flip the flag
    first and put it back if the server call fails.
    """

    def __init__(
        self,
        event_id: str,
        queries: EventQueries,
        mutations: EventMutations,
        local_state: LocalState,
        on_deleted: Optional[Callable[[], None]] = None,
    ):
        self.event_id = str(event_id)
        self.queries = queries
        self.mutations = mutations
        self.local_state = local_state
        self.on_deleted = on_deleted
        self.last_error: Optional[ClientError] = None

        self.is_attending = local_state.is_attending(self.event_id)
        self.is_favorite = local_state.is_favorite(self.event_id)
        stored_rating = local_state.get_rating(self.event_id)
        self.rating = stored_rating or 0
        self.has_rated = stored_rating is not None

    @property
    def state(self) -> QueryState:
        return self.queries.event_state(self.event_id)

    @property
    def event(self) -> Optional[EventWithCategory]:
        return self.state.data

    def load(self) -> Future:
        return self.queries.event(self.event_id)

    def refetch(self) -> Future:
        self.queries.query_client.invalidate(event_key(self.event_id))
        return self.load()

    def _set_attending(self, attending: bool) -> None:
        self.is_attending = attending
        self.local_state.set_attending(self.event_id, attending)

    def _set_favorite(self, favorite: bool) -> None:
        self.is_favorite = favorite
        self.local_state.set_favorite(self.event_id, favorite)

    def toggle_attendance(self) -> bool:
        """Join or leave the event. Returns the attendance flag after the call."""
        attending = not self.is_attending
        self._set_attending(attending)
        try:
            if attending:
                self.mutations.add_attendance(self.event_id)
            else:
                self.mutations.remove_attendance(self.event_id)
        except ClientError as e:
            logger.error(f"Error updating attendance for event {self.event_id}: {e}")
            self.last_error = e
            self._set_attending(not attending)
            return self.is_attending
        self.last_error = None
        self.refetch()
        return self.is_attending

    def toggle_favorite(self) -> bool:
        """Add or remove the event from favorites. Returns the favorite flag after the call."""
        favorite = not self.is_favorite
        self._set_favorite(favorite)
        try:
            if favorite:
                self.mutations.add_favorite(self.event_id)
            else:
                self.mutations.remove_favorite(self.event_id)
        except ClientError as e:
            logger.error(f"Error updating favorites for event {self.event_id}: {e}")
            self.last_error = e
            self._set_favorite(not favorite)
            return self.is_favorite
        self.last_error = None
        self.refetch()
        return self.is_favorite

    def select_rating(self, rating: int) -> None:
        """Pick a star value. Ignored once the event has been rated from this client."""
        if self.has_rated:
            return
        if not MIN_RATING <= rating <= MAX_RATING:
            raise ValueError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")
        self.rating = rating

    def toggle_rating(self) -> bool:
        """
        Submit the selected rating, or forget a previous one.

        Forgetting only clears the local flag; the stored rating and the
        event's average are left as they are. Returns `has_rated`.
        """
        if self.has_rated:
            self.has_rated = False
            self.rating = 0
            self.local_state.set_rating(self.event_id, None)
            self.refetch()
            return False

        if self.rating == 0:
            return False

        try:
            self.mutations.submit_rating(self.event_id, self.rating)
        except ClientError as e:
            logger.error(f"Error rating event {self.event_id}: {e}")
            self.last_error = e
            return False
        self.last_error = None
        self.has_rated = True
        self.local_state.set_rating(self.event_id, self.rating)
        self.refetch()
        return True

    def delete(self) -> bool:
        """Delete the event. Returns False and records the error if the server refuses."""
        try:
            self.mutations.delete_event(self.event_id)
        except ClientError as e:
            logger.error(f"Error deleting event {self.event_id}: {e}")
            self.last_error = e
            return False
        self.last_error = None
        if self.on_deleted:
            self.on_deleted()
        return True
