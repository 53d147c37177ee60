"""Client data layer for the event catalog.

Talks to the events API over HTTP, caches reads per query key and keeps the
per-client attendance/favorite/rating flags.
"""

from .api import EventAPIClient, FetchEventsParams
from .detail_page import EventDetailController
from .errors import ClientError, NetworkFailure, NotFound, ValidationFailure
from .list_page import EventListController
from .local_state import LocalState
from .mutations import EventMutations
from .queries import EventQueries, QueryClient

__all__ = [
    'EventAPIClient',
    'FetchEventsParams',
    'EventQueries',
    'EventMutations',
    'QueryClient',
    'LocalState',
    'EventListController',
    'EventDetailController',
    'ClientError',
    'NetworkFailure',
    'NotFound',
    'ValidationFailure',
]
