"""Routes package initialization."""

from . import (
    categories,
    events,
    health,
    ratings,
    uploads
)

__all__ = [
    'categories',
    'events',
    'health',
    'ratings',
    'uploads'
]
