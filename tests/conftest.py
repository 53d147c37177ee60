"""
Shared pytest fixtures.

Every test gets its own JSON store and upload directory under `tmp_path`, so
nothing touches the configured data files.
"""

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from eventi.api import create_application
from eventi.db import Database, DatabaseConfig, create_event
from eventi.models.event import format_instant
from eventi.web.api import EventAPIClient

BASE_DATE = datetime(2025, 6, 1, 18, 0, tzinfo=timezone.utc)


@pytest.fixture
def database(tmp_path) -> Database:
    """A freshly initialised store seeded with the default categories."""
    store = Database(DatabaseConfig(json_path=tmp_path / "db.json"))
    store.init_db()
    return store


@pytest.fixture
def upload_dir(tmp_path):
    return tmp_path / "uploads"


@pytest.fixture
def client(database, upload_dir):
    """TestClient over an application bound to the temporary store."""
    app = create_application(database=database, upload_dir=upload_dir)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def api_client(client) -> EventAPIClient:
    """The HTTP client data layer, talking to the in-process application."""
    return EventAPIClient(base_url="http://testserver", session=client)


# ---------------------------------------------------------------------------
# Reusable factory helpers
# ---------------------------------------------------------------------------


def make_event_fields(**overrides) -> dict:
    """Return a valid event creation body with sensible defaults."""
    fields = {
        "name": "Sagra del Carciofo",
        "description": "Degustazioni e musica popolare in piazza",
        "location": "Paestum",
        "date": format_instant(BASE_DATE),
        "categoryId": "6",
        "image": None,
    }
    fields.update(overrides)
    return fields


def add_events(database: Database, count: int, **overrides) -> list:
    """Insert `count` events one day apart and return them in insertion order."""
    created = []
    with database.session() as session:
        for index in range(count):
            fields = make_event_fields(
                name=f"Evento {index + 1}",
                date=format_instant(BASE_DATE + timedelta(days=index)),
            )
            fields.update(overrides)
            created.append(create_event(session, fields))
    return created
