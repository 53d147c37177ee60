"""Event model definition."""

import logging
from datetime import datetime, timezone
from typing import Optional
from dataclasses import dataclass

from .category import Category

logger = logging.getLogger(__name__)

def parse_instant(value: Optional[str]) -> Optional[datetime]:
    """
    Parse an ISO-8601 instant into an aware UTC datetime.

    Naive values are taken to be UTC. Returns None for empty or unparseable input.
    """
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(str(value).strip().replace('Z', '+00:00'))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)

def format_instant(value: datetime) -> str:
    """Format a datetime as a UTC ISO-8601 instant with millisecond precision and a 'Z' suffix."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return value.strftime('%Y-%m-%dT%H:%M:%S.') + f"{value.microsecond // 1000:03d}Z"

@dataclass
class Event:
    """
    Event model representing a single listed activity.

    Fields:
        id: Unique identifier (assigned by the server from the creation timestamp)
        name: Event title
        description: Event description
        location: Where the event takes place
        date: When the event takes place, as an ISO-8601 instant
        category_id: Id of the event's category
        attendees: How many times attendance was marked
        favorites: How many times the event was added to favorites
        average_rating: Mean of the event's ratings, one decimal; 0 means no ratings yet
        image: Server-relative upload path or absolute URL (optional)
    """
    id: str
    name: str
    description: str = ""
    location: str = ""
    date: str = ""
    category_id: str = ""
    attendees: int = 0
    favorites: int = 0
    average_rating: float = 0.0
    image: Optional[str] = None

    @property
    def starts_at(self) -> Optional[datetime]:
        """The event date as an aware datetime, or None if it cannot be parsed."""
        starts_at = parse_instant(self.date)
        if starts_at is None and self.date:
            logger.warning(f"Invalid datetime format for event {self.id}: {self.date!r}")
        return starts_at

    @classmethod
    def from_dict(cls, data: dict) -> "Event":
        return cls(
            id=str(data['id']),
            name=data.get('name', ''),
            description=data.get('description', ''),
            location=data.get('location', ''),
            date=data.get('date', ''),
            category_id=str(data.get('categoryId', '')),
            attendees=int(data.get('attendees') or 0),
            favorites=int(data.get('favorites') or 0),
            average_rating=float(data.get('averageRating') or 0),
            image=data.get('image') or None,
        )

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'description': self.description,
            'location': self.location,
            'date': self.date,
            'categoryId': self.category_id,
            'attendees': self.attendees,
            'favorites': self.favorites,
            'averageRating': self.average_rating,
            'image': self.image,
        }

@dataclass
class EventWithCategory(Event):
    """An event with its category inlined, as returned by `_expand=category` reads."""
    category: Optional[Category] = None

    @classmethod
    def from_dict(cls, data: dict) -> "EventWithCategory":
        base = Event.from_dict(data)
        category = data.get('category')
        return cls(
            **vars(base),
            category=Category.from_dict(category) if category else None,
        )

    def to_dict(self) -> dict:
        data = super().to_dict()
        data['category'] = self.category.to_dict() if self.category else None
        return data
