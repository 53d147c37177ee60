"""Mutations over the events API. Successful mutations invalidate the queries they affect."""

import logging
from pathlib import Path
from typing import Optional, Union

from ..models import Event, Rating
from .api import EventAPIClient
from .queries import QueryClient, event_key

logger = logging.getLogger(__name__)

EVENTS_PREFIX = ('events',)

class EventMutations:
    """Writes to the events API."""

    def __init__(self, api: EventAPIClient, query_client: QueryClient):
        self.api = api
        self.query_client = query_client

    def _invalidate_event(self, event_id: str) -> None:
        self.query_client.invalidate(event_key(event_id))
        self.query_client.invalidate(EVENTS_PREFIX)

    def add_attendance(self, event_id: str) -> int:
        previous = self.api.mark_attendance(event_id)
        self._invalidate_event(event_id)
        return previous

    def remove_attendance(self, event_id: str) -> None:
        self.api.remove_attendance(event_id)
        self._invalidate_event(event_id)

    def add_favorite(self, event_id: str) -> int:
        previous = self.api.add_to_favorites(event_id)
        self._invalidate_event(event_id)
        return previous

    def remove_favorite(self, event_id: str) -> None:
        self.api.remove_from_favorites(event_id)
        self._invalidate_event(event_id)

    def submit_rating(self, event_id: str, rating: int) -> Rating:
        created = self.api.submit_rating(event_id, rating)
        self._invalidate_event(event_id)
        return created

    def create_event(self, fields: dict) -> Event:
        created = self.api.create_event(fields)
        self.query_client.invalidate(EVENTS_PREFIX)
        return created

    def update_event(self, event_id: str, fields: dict) -> Event:
        updated = self.api.update_event(event_id, fields)
        self._invalidate_event(event_id)
        return updated

    def delete_event(self, event_id: str) -> None:
        self.api.delete_event(event_id)
        logger.info(f"Deleted event {event_id}")
        self.query_client.remove(event_key(event_id))
        self.query_client.invalidate(EVENTS_PREFIX)

    def upload_image(self, image: Union[str, Path, bytes], filename: Optional[str] = None,
                     content_type: Optional[str] = None) -> str:
        return self.api.upload_image(image, filename=filename, content_type=content_type)
