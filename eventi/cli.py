"""
Command-line interface for managing the event store.

Common use cases:
    # Create the store (with the default categories) if it does not exist
    eventi-db init

    # Wipe everything and start over, optionally with a few sample events
    eventi-db reset --with-samples

    # Browse what is stored
    eventi-db list --q sagra --page 1 --limit 5
    eventi-db show 1718000000000

    # Recompute every stored average from the ratings
    eventi-db recompute
"""

import argparse
import logging
import sys
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from .db import (
    Database,
    DatabaseConfig,
    DatabaseError,
    EventQuery,
    create_event,
    get_event,
    list_events,
    recompute_average_rating,
)
from .models.event import format_instant
from .utils.logging_config import setup_logging

logger = logging.getLogger(__name__)

SAMPLE_EVENTS = [
    {
        'name': "Concerto in Piazza del Plebiscito",
        'description': "Una serata di musica dal vivo sotto le stelle nel cuore di Napoli.",
        'location': "Napoli",
        'categoryId': "1",
        'days_ahead': 7,
    },
    {
        'name': "Sagra della Mozzarella",
        'description': "Degustazioni di mozzarella di bufala campana e prodotti tipici locali.",
        'location': "Battipaglia",
        'categoryId': "6",
        'days_ahead': 14,
    },
    {
        'name': "Visita guidata agli Scavi di Pompei",
        'description': "Un percorso tra le domus e i templi dell'antica città romana.",
        'location': "Pompei",
        'categoryId': "3",
        'days_ahead': 21,
    },
    {
        'name': "Maratona di Salerno",
        'description': "Corsa lungo il lungomare con percorsi da 10 km e 42 km per tutti.",
        'location': "Salerno",
        'categoryId': "2",
        'days_ahead': 30,
    },
]

def add_sample_events(database: Database, now: Optional[datetime] = None) -> List[dict]:
    """Insert the sample events, dated relative to `now`."""
    now = now or datetime.now(timezone.utc)
    created = []
    with database.session() as session:
        for sample in SAMPLE_EVENTS:
            fields = {key: value for key, value in sample.items() if key != 'days_ahead'}
            fields['date'] = format_instant(now + timedelta(days=sample['days_ahead']))
            created.append(create_event(session, fields))
    return created

def recompute_all(database: Database) -> int:
    """Recompute the stored average of every event. Returns the number of events touched."""
    with database.session() as session:
        events = session.all('events')
        for event in events:
            recompute_average_rating(session, event['id'])
    return len(events)

def _print_event(event: dict, detailed: bool = False) -> None:
    category = event.get('category') or {}
    print(f"{event['id']}  {event.get('date') or '-':<24}  {event.get('name')}")
    if detailed:
        print(f"    Location:  {event.get('location')}")
        print(f"    Category:  {category.get('name', event.get('categoryId'))}")
        print(f"    Attendees: {event.get('attendees', 0)}  Favorites: {event.get('favorites', 0)}"
              f"  Rating: {event.get('averageRating', 0)}")
        print(f"    {event.get('description')}")

def main(argv: Optional[List[str]] = None) -> int:
    setup_logging()

    parser = argparse.ArgumentParser(description='Manage the event store')
    parser.add_argument('--db', help='Path of the JSON store (defaults to EVENTI_DB_PATH)')
    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    subparsers.add_parser('init', help='Create the store if missing')

    reset_parser = subparsers.add_parser('reset', help='Replace the store with an empty one')
    reset_parser.add_argument('--no-seed', action='store_true',
                              help='Do not add the default categories')
    reset_parser.add_argument('--with-samples', action='store_true',
                              help='Add a few sample events')

    subparsers.add_parser('samples', help='Add the sample events to the store')

    list_parser = subparsers.add_parser('list', help='List stored events')
    list_parser.add_argument('--q', help='Search name and description')
    list_parser.add_argument('--category', help='Category id')
    list_parser.add_argument('--location', help='Location substring')
    list_parser.add_argument('--page', type=int, help='Page number')
    list_parser.add_argument('--limit', type=int, help='Page size')
    list_parser.add_argument('--detailed', action='store_true',
                             help='Show counters and description')

    show_parser = subparsers.add_parser('show', help='Show one event')
    show_parser.add_argument('event_id', help='Event id')

    subparsers.add_parser('recompute', help='Recompute every average rating')

    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 1

    database = Database(DatabaseConfig(json_path=args.db))

    try:
        if args.command == 'reset':
            database.reset(seed=not args.no_seed)
            if args.with_samples:
                added = add_sample_events(database)
                logger.info(f"Added {len(added)} sample events")
            return 0

        database.init_db()

        if args.command == 'samples':
            added = add_sample_events(database)
            logger.info(f"Added {len(added)} sample events")
        elif args.command == 'list':
            query = EventQuery(page=args.page, limit=args.limit, q=args.q, category_id=args.category,
                               location_like=args.location, expand_category=True)
            with database.session() as session:
                events = list_events(session, query)
            for event in events:
                _print_event(event, detailed=args.detailed)
            print(f"\n{len(events)} events")
        elif args.command == 'show':
            with database.session() as session:
                event = get_event(session, args.event_id, expand=True)
            _print_event(event, detailed=True)
        elif args.command == 'recompute':
            count = recompute_all(database)
            logger.info(f"Recomputed averages for {count} events")
    except DatabaseError as e:
        logger.error(str(e))
        return 1
    return 0

if __name__ == "__main__":
    sys.exit(main())
