"""Ratings router module. Ratings are created through the events router."""

from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Query

from ...db import Database
from ..dependencies import get_db

router = APIRouter(tags=["ratings"])

@router.get("/ratings", response_model=List[Dict])
async def list_ratings(
    event_id: Optional[str] = Query(None, alias="eventId"),
    db: Database = Depends(get_db),
):
    """Get all ratings, optionally only those of one event."""
    with db.session() as session:
        if event_id:
            return session.find('ratings', eventId=event_id)
        return session.all('ratings')
