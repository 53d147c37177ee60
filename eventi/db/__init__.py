"""Store package initialization.

This module exposes the public interface of the store package.
"""

from .db_core import (
    Database,
    DatabaseConfig,
    DatabaseError,
    StorageError,
    SessionError,
    NotFoundError,
    DEFAULT_CATEGORIES,
    db
)
from .session import Session
from .operations import (
    EventQuery,
    list_events,
    get_event,
    expand_category,
    create_event,
    replace_event,
    patch_event,
    delete_event,
    mark_attendance,
    add_favorite,
    submit_rating,
    recompute_average_rating,
)

__all__ = [
    # Core store classes
    'Database',
    'DatabaseConfig',
    'Session',

    # Exceptions
    'DatabaseError',
    'StorageError',
    'SessionError',
    'NotFoundError',

    # Seed data and global instance
    'DEFAULT_CATEGORIES',
    'db',

    # Operations
    'EventQuery',
    'list_events',
    'get_event',
    'expand_category',
    'create_event',
    'replace_event',
    'patch_event',
    'delete_event',
    'mark_attendance',
    'add_favorite',
    'submit_rating',
    'recompute_average_rating',
]
