"""Models package initialization."""

from .category import Category
from .event import Event, EventWithCategory
from .rating import Rating

__all__ = ['Category', 'Event', 'EventWithCategory', 'Rating']
