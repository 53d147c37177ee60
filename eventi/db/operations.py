"""Event queries and aggregation operations.

Every function here works on an open `Session`; callers own the transaction:

    with db.session() as session:
        previous = mark_attendance(session, event_id)
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional

from ..models.event import parse_instant, format_instant
from .session import Session

logger = logging.getLogger(__name__)

# json-server's page size when `_page` is given without a usable `_limit`
DEFAULT_PAGE_LIMIT = 10

EDITABLE_FIELDS = ('name', 'description', 'location', 'date', 'categoryId', 'image')
COUNTER_FIELDS = ('attendees', 'favorites', 'averageRating')

_LEADING_INT = re.compile(r'\s*([+-]?\d+)')

def _leading_int(value) -> Optional[int]:
    """The integer a query parameter starts with ("3", " 3", "3.9x" -> 3), None when it has none."""
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else None

@dataclass
class EventQuery:
    """
    Parameters of an event list read.

    Fields:
        page: 1-based page number, None for no pagination
        limit: Page size
        q: Substring matched against name and description
        category_id: Exact category id
        location_like: Substring matched against location
        date_gte: Inclusive lower bound on the event date
        date_lte: Inclusive upper bound on the event date
        expand_category: Inline each event's category
    """
    page: Optional[int] = None
    limit: Optional[int] = None
    q: Optional[str] = None
    category_id: Optional[str] = None
    location_like: Optional[str] = None
    date_gte: Optional[str] = None
    date_lte: Optional[str] = None
    expand_category: bool = False

    @classmethod
    def from_params(
        cls,
        page=None,
        limit=None,
        q: Optional[str] = None,
        category_id: Optional[str] = None,
        location_like: Optional[str] = None,
        date_gte: Optional[str] = None,
        date_lte: Optional[str] = None,
        expand: Optional[str] = None,
    ) -> "EventQuery":
        """
        Build a query from raw request parameters without ever rejecting them.

        A `_page` without a leading integer means page 1. Without `_page`, a
        `_limit` without a leading integer keeps nothing.
        """
        parsed_page = None
        parsed_limit = None
        if page not in (None, ''):
            parsed_page = _leading_int(page) or 1
            if limit not in (None, ''):
                parsed_limit = _leading_int(limit)
        elif limit not in (None, ''):
            parsed_limit = _leading_int(limit) or 0
        return cls(
            page=parsed_page,
            limit=parsed_limit,
            q=q or None,
            category_id=category_id or None,
            location_like=location_like or None,
            date_gte=date_gte or None,
            date_lte=date_lte or None,
            expand_category=expand == 'category',
        )

    def slice_bounds(self) -> Optional[tuple]:
        """The `[start, end)` slice of the matches to return, or None for all of them."""
        if self.page is not None:
            page = max(self.page, 1)
            limit = self.limit or DEFAULT_PAGE_LIMIT
            return ((page - 1) * limit, page * limit)
        if self.limit is not None:
            return (0, self.limit)
        return None

def _contains(haystack, needle: str) -> bool:
    return needle.lower() in str(haystack or '').lower()

def _date_bound(raw: Optional[str], name: str) -> Optional[datetime]:
    if raw is None:
        return None
    bound = parse_instant(raw)
    if bound is None:
        logger.warning(f"Ignoring unparseable {name} bound: {raw!r}")
    return bound

def _matches(record: dict, query: EventQuery, gte: Optional[datetime], lte: Optional[datetime]) -> bool:
    if query.q and not (_contains(record.get('name'), query.q) or _contains(record.get('description'), query.q)):
        return False
    if query.category_id and str(record.get('categoryId')) != query.category_id:
        return False
    if query.location_like and not _contains(record.get('location'), query.location_like):
        return False
    if gte or lte:
        starts_at = parse_instant(record.get('date'))
        if starts_at is None:
            return False
        if gte and starts_at < gte:
            return False
        if lte and starts_at > lte:
            return False
    return True

def expand_category(session: Session, record: dict) -> dict:
    """Return a copy of an event record with its category inlined (None if dangling)."""
    expanded = dict(record)
    expanded['category'] = session.first('categories', id=record.get('categoryId'))
    return expanded

def list_events(session: Session, query: EventQuery) -> List[dict]:
    """
    Events matching every supplied filter, in store insertion order, sliced to the requested page.

    No total count is produced; callers infer further pages from the slice length.
    """
    gte = _date_bound(query.date_gte, 'date_gte')
    lte = _date_bound(query.date_lte, 'date_lte')

    matches = [record for record in session.all('events') if _matches(record, query, gte, lte)]

    bounds = query.slice_bounds()
    if bounds is not None:
        start, end = bounds
        matches = matches[start:end]

    if query.expand_category:
        matches = [expand_category(session, record) for record in matches]
    return matches

def get_event(session: Session, event_id: str, expand: bool = False) -> dict:
    """Get one event by id, raising NotFoundError if absent."""
    record = session.get('events', event_id)
    return expand_category(session, record) if expand else dict(record)

def create_event(session: Session, fields: dict) -> dict:
    """Create an event with a timestamp id and zeroed counters."""
    record = {
        'id': session.next_id('events'),
        'name': fields.get('name'),
        'description': fields.get('description'),
        'location': fields.get('location'),
        'date': fields.get('date'),
        'categoryId': fields.get('categoryId'),
        'attendees': 0,
        'favorites': 0,
        'averageRating': 0,
        'image': fields.get('image') or None,
    }
    created = session.insert('events', record)
    logger.info(f"Created event {created['id']} ({created['name']!r})")
    return created

def replace_event(session: Session, event_id: str, fields: dict) -> dict:
    """
    Replace an event's editable fields.

    Counters present in `fields` are written as given; counters left out keep
    their stored values.
    """
    current = session.get('events', event_id)
    replacement = {key: fields.get(key) for key in EDITABLE_FIELDS}
    replacement['image'] = replacement['image'] or None
    for key in COUNTER_FIELDS:
        replacement[key] = fields[key] if fields.get(key) is not None else current.get(key, 0)
    return session.replace('events', event_id, replacement)

def patch_event(session: Session, event_id: str, changes: dict) -> dict:
    """Merge the given fields into an event."""
    return session.update('events', event_id, changes)

def delete_event(session: Session, event_id: str) -> dict:
    """Delete an event together with its ratings."""
    deleted = session.delete('events', event_id)
    logger.info(f"Deleted event {event_id}")
    return deleted

def _increment(session: Session, event_id: str, counter: str) -> int:
    event = session.get('events', event_id)
    previous = int(event.get(counter) or 0)
    session.update('events', event_id, {counter: previous + 1})
    logger.info(f"Event {event_id}: {counter} {previous} -> {previous + 1}")
    return previous

def mark_attendance(session: Session, event_id: str) -> int:
    """
    Increment an event's attendee count.

    Returns:
        int: The count *before* the increment
    """
    return _increment(session, event_id, 'attendees')

def add_favorite(session: Session, event_id: str) -> int:
    """
    Increment an event's favorite count.

    Returns:
        int: The count *before* the increment
    """
    return _increment(session, event_id, 'favorites')

def round_rating(total: int, count: int) -> float:
    """
    Mean of `count` ratings summing to `total`, rounded half-up to one decimal.

    The float mean is rounded as stored, so 23/20 (held as 1.1499...) gives 1.1
    while an exact tie such as 2.25 gives 2.3.
    """
    if count == 0:
        return 0.0
    mean = Decimal(total / count)
    return float(mean.quantize(Decimal('0.1'), rounding=ROUND_HALF_UP))

def recompute_average_rating(session: Session, event_id: str) -> float:
    """Recompute an event's average from all of its ratings and store it on the event."""
    ratings = session.find('ratings', eventId=event_id)
    average = round_rating(sum(int(r['rating']) for r in ratings), len(ratings))
    session.update('events', event_id, {'averageRating': average})
    return average

def submit_rating(session: Session, event_id: str, rating: int, submitted_at: Optional[datetime] = None) -> dict:
    """
    Record a rating and refresh the event's stored average.

    The event is looked up first, so an unknown id writes nothing.
    """
    session.get('events', event_id)

    record = session.insert('ratings', {
        'id': session.next_id('ratings'),
        'eventId': str(event_id),
        'rating': int(rating),
        'date': format_instant(submitted_at or datetime.now(timezone.utc)),
    })
    average = recompute_average_rating(session, event_id)
    logger.info(f"Event {event_id}: rated {rating}, average now {average}")
    return record
