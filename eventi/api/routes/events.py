"""Events router module: CRUD, the paginated list read and the aggregation endpoints."""

import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query, status

from ...db import Database, operations
from ...db.operations import EventQuery
from ..dependencies import get_db
from ..schemas import EventCreate, EventPatch, EventReplace, RatingCreate

logger = logging.getLogger(__name__)

# Handlers stay `async def` so store reads and writes run one at a time on the event loop
router = APIRouter(tags=["events"])

@router.get("/events", response_model=List[Dict])
async def list_events(
    page: Optional[str] = Query(None, alias="_page"),
    limit: Optional[str] = Query(None, alias="_limit"),
    expand: Optional[str] = Query(None, alias="_expand"),
    q: Optional[str] = None,
    category_id: Optional[str] = Query(None, alias="categoryId"),
    location_like: Optional[str] = None,
    date_gte: Optional[str] = None,
    date_lte: Optional[str] = None,
    db: Database = Depends(get_db),
):
    """
    List events matching all supplied filters, one page at a time.

    Pagination parameters are read up to their leading integer, never rejected.
    """
    query = EventQuery.from_params(
        page=page,
        limit=limit,
        q=q,
        category_id=category_id,
        location_like=location_like,
        date_gte=date_gte,
        date_lte=date_lte,
        expand=expand,
    )
    with db.session() as session:
        return operations.list_events(session, query)

@router.get("/events/{event_id}", response_model=Dict)
async def get_event(
    event_id: str,
    expand: Optional[str] = Query(None, alias="_expand"),
    db: Database = Depends(get_db),
):
    """Get a single event by ID."""
    with db.session() as session:
        return operations.get_event(session, event_id, expand=expand == "category")

@router.post("/events", response_model=Dict, status_code=status.HTTP_201_CREATED)
async def create_event(payload: EventCreate, db: Database = Depends(get_db)):
    """Create an event. The id comes from the current timestamp and all counters start at zero."""
    with db.session() as session:
        return operations.create_event(session, payload.model_dump())

@router.put("/events/{event_id}", response_model=Dict)
async def replace_event(event_id: str, payload: EventReplace, db: Database = Depends(get_db)):
    """Replace an event's fields."""
    with db.session() as session:
        return operations.replace_event(session, event_id, payload.model_dump())

@router.patch("/events/{event_id}", response_model=Dict)
async def patch_event(event_id: str, payload: EventPatch, db: Database = Depends(get_db)):
    """Update only the given fields of an event."""
    with db.session() as session:
        return operations.patch_event(session, event_id, payload.model_dump(exclude_unset=True))

@router.delete("/events/{event_id}", response_model=Dict)
async def delete_event(event_id: str, db: Database = Depends(get_db)):
    """Delete an event and its ratings."""
    with db.session() as session:
        operations.delete_event(session, event_id)
    return {}

@router.post("/events/{event_id}/attendees")
async def mark_attendance(event_id: str, db: Database = Depends(get_db)):
    """
    Increment the attendee count.

    The response carries the count as it was *before* this increment.
    """
    with db.session() as session:
        previous = operations.mark_attendance(session, event_id)
    return {"attendees": previous}

@router.post("/events/{event_id}/favorites")
async def add_favorite(event_id: str, db: Database = Depends(get_db)):
    """
    Increment the favorite count.

    The response carries the count as it was *before* this increment.
    """
    with db.session() as session:
        previous = operations.add_favorite(session, event_id)
    return {"favorites": previous}

@router.get("/events/{event_id}/ratings", response_model=List[Dict])
async def list_event_ratings(event_id: str, db: Database = Depends(get_db)):
    """Get all ratings of one event."""
    with db.session() as session:
        session.get('events', event_id)
        return session.find('ratings', eventId=event_id)

@router.post("/events/{event_id}/ratings", response_model=Dict, status_code=status.HTTP_201_CREATED)
async def submit_rating(event_id: str, payload: RatingCreate, db: Database = Depends(get_db)):
    """
    Add a rating and recompute the event's average.

    The new average is persisted before the response is sent.
    """
    with db.session() as session:
        return operations.submit_rating(session, event_id, payload.rating)
