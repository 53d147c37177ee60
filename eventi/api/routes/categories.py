"""Categories router module."""

from typing import Dict, List

from fastapi import APIRouter, Depends

from ...db import Database
from ..dependencies import get_db

router = APIRouter(tags=["categories"])

@router.get("/categories", response_model=List[Dict])
async def list_categories(db: Database = Depends(get_db)):
    """Get all categories."""
    with db.session() as session:
        return session.all('categories')

@router.get("/categories/{category_id}", response_model=Dict)
async def get_category(category_id: str, db: Database = Depends(get_db)):
    """Get a single category by ID."""
    with db.session() as session:
        return session.get('categories', category_id)
