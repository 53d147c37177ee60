import logging
import mimetypes
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Optional, Union

import requests

from ..config.client import get_client_config
from ..models import Category, Event, EventWithCategory, Rating
from ..models.event import format_instant
from .errors import NetworkFailure, NotFound

logger = logging.getLogger(__name__)

PLACEHOLDER_IMAGE = "/placeholder-event.jpg"
DEFAULT_PAGE = 1
DEFAULT_LIMIT = 12

@dataclass(frozen=True)
class FetchEventsParams:
    """
    Parameters of one event list request.

    Fields:
        page: 1-based page number
        limit: Page size
        q: Free-text search over name and description
        category_id: Exact category id
        location_like: Location substring
        date_gte: Inclusive lower date bound (ISO-8601)
        date_lte: Inclusive upper date bound (ISO-8601)
    """
    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT
    q: Optional[str] = None
    category_id: Optional[str] = None
    location_like: Optional[str] = None
    date_gte: Optional[str] = None
    date_lte: Optional[str] = None

    @staticmethod
    def _positive(value, default: int) -> int:
        try:
            number = int(value)
        except (TypeError, ValueError):
            return default
        return number if number >= 1 else default

    def normalized(self) -> "FetchEventsParams":
        """Same parameters with page/limit defaulted when absent or non-numeric and empty filters dropped."""
        return FetchEventsParams(
            page=self._positive(self.page, DEFAULT_PAGE),
            limit=self._positive(self.limit, DEFAULT_LIMIT),
            q=self.q or None,
            category_id=self.category_id or None,
            location_like=self.location_like or None,
            date_gte=self.date_gte or None,
            date_lte=self.date_lte or None,
        )

    def with_page(self, page: int) -> "FetchEventsParams":
        return FetchEventsParams(
            page=page,
            limit=self.limit,
            q=self.q,
            category_id=self.category_id,
            location_like=self.location_like,
            date_gte=self.date_gte,
            date_lte=self.date_lte,
        )

    def to_query(self) -> dict:
        params = self.normalized()
        query = {
            '_page': str(params.page),
            '_limit': str(params.limit),
            '_expand': 'category',
        }
        optional = {
            'q': params.q,
            'categoryId': params.category_id,
            'location_like': params.location_like,
            'date_gte': params.date_gte,
            'date_lte': params.date_lte,
        }
        query.update({key: value for key, value in optional.items() if value})
        return query

class EventAPIClient:
    """Client for the events API."""

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[int] = None, session: Any = None):
        """
        Args:
            base_url: API base URL, defaults to API_BASE_URL
            timeout: Request timeout in seconds, defaults to API_TIMEOUT
            session: Object with a requests-style `request(method, url, **kwargs)`,
                     defaults to a new `requests.Session`
        """
        config = get_client_config()
        self.base_url = (base_url or config.api_base_url).rstrip('/')
        self.timeout = timeout or config.api_timeout
        self.session = session or requests.Session()

    def _request(self, method: str, path: str, failure: str, **kwargs) -> Any:
        """
        Send a request and decode its JSON body.

        Raises:
            NotFound: If the server answers 404
            NetworkFailure: If the request fails or the server answers with any other non-2xx status
        """
        url = f"{self.base_url}{path}"
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            logger.error(f"{failure}: {e}")
            raise NetworkFailure(f"{failure}: {e}") from e

        if response.status_code == 404:
            logger.warning(f"{failure}: {method} {path} returned 404")
            raise NotFound(failure)
        if not 200 <= response.status_code < 300:
            logger.error(f"{failure}: {method} {path} returned {response.status_code}")
            raise NetworkFailure(failure, status_code=response.status_code)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise NetworkFailure(f"{failure}: invalid JSON response") from e

    def fetch_events(self, params: Optional[FetchEventsParams] = None) -> List[EventWithCategory]:
        """
        Fetch one page of events with their categories inlined.

        Returns:
            List[EventWithCategory]: At most `params.limit` events
        """
        params = params or FetchEventsParams()
        events_data = self._request('GET', '/events', "Failed to fetch events", params=params.to_query())
        if not isinstance(events_data, list):
            raise NetworkFailure("Failed to fetch events: response must be a list of events")
        return [EventWithCategory.from_dict(event) for event in events_data]

    def fetch_event(self, event_id: str) -> EventWithCategory:
        data = self._request('GET', f'/events/{event_id}', "Failed to fetch event", params={'_expand': 'category'})
        return EventWithCategory.from_dict(data)

    def fetch_categories(self) -> List[Category]:
        data = self._request('GET', '/categories', "Failed to fetch categories")
        return [Category.from_dict(category) for category in data]

    def create_event(self, fields: dict) -> Event:
        data = self._request('POST', '/events', "Failed to create event", json=fields)
        return Event.from_dict(data)

    def update_event(self, event_id: str, fields: dict) -> Event:
        data = self._request('PUT', f'/events/{event_id}', "Failed to update event", json=fields)
        return Event.from_dict(data)

    def delete_event(self, event_id: str) -> None:
        self._request('DELETE', f'/events/{event_id}', "Failed to delete event")

    def mark_attendance(self, event_id: str) -> int:
        """Mark attendance. Returns the attendee count from before this mark."""
        data = self._request('POST', f'/events/{event_id}/attendees', "Failed to mark attendance")
        return int(data['attendees'])

    def remove_attendance(self, event_id: str) -> None:
        """There is no server endpoint to decrement attendance; this only exists for symmetry."""
        logger.debug(f"remove_attendance({event_id}) is local only")

    def add_to_favorites(self, event_id: str) -> int:
        """Add to favorites. Returns the favorite count from before this addition."""
        data = self._request('POST', f'/events/{event_id}/favorites', "Failed to add to favorites")
        return int(data['favorites'])

    def remove_from_favorites(self, event_id: str) -> None:
        """There is no server endpoint to decrement favorites; this only exists for symmetry."""
        logger.debug(f"remove_from_favorites({event_id}) is local only")

    def submit_rating(self, event_id: str, rating: int) -> Rating:
        payload = {'rating': rating, 'date': format_instant(datetime.now(timezone.utc))}
        data = self._request('POST', f'/events/{event_id}/ratings', "Failed to submit rating", json=payload)
        return Rating.from_dict(data)

    def upload_image(
        self,
        image: Union[str, Path, bytes],
        filename: Optional[str] = None,
        content_type: Optional[str] = None,
    ) -> str:
        """
        Upload an image file.

        Args:
            image: Path of the file to send, or its raw bytes
            filename: Name to send; required when `image` is bytes
            content_type: MIME type; guessed from the filename when omitted

        Returns:
            str: Server-relative path of the stored image, e.g. '/uploads/1700000000000.jpg'
        """
        if isinstance(image, (str, Path)):
            path = Path(image)
            content = path.read_bytes()
            filename = filename or path.name
        else:
            content = image
            if not filename:
                raise ValueError("filename is required when uploading raw bytes")
        content_type = content_type or mimetypes.guess_type(filename)[0] or 'application/octet-stream'

        data = self._request(
            'POST', '/upload', "Failed to upload image",
            files={'image': (filename, content, content_type)},
        )
        return data['url']

    def get_image_url(self, image_path: Optional[str]) -> str:
        """Absolute URL for an event image. Relative paths resolve against the API base."""
        if not image_path:
            return PLACEHOLDER_IMAGE
        if image_path.startswith('http'):
            return image_path
        return f"{self.base_url}{image_path}"
