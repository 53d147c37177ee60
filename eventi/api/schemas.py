"""Request bodies for the events API.

The server only checks that required fields are present and well-typed; the
richer rules (minimum lengths, mandatory image) live in the client form.
"""

import re
from typing import Annotated, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, field_validator

_LEADING_INT = re.compile(r'^\s*([+-]?\d+)')

def _id_as_str(value):
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(int(value))
    return value

CategoryId = Annotated[str, BeforeValidator(_id_as_str)]

class EventCreate(BaseModel):
    """Fields accepted when creating an event. Counters and id are server-assigned."""
    model_config = ConfigDict(extra='ignore')

    name: str
    description: str
    location: str
    date: str
    categoryId: CategoryId
    image: Optional[str] = None

class EventReplace(EventCreate):
    """Full replacement of an event. Counters left out keep their stored values."""
    attendees: Optional[int] = None
    favorites: Optional[int] = None
    averageRating: Optional[float] = None

class EventPatch(BaseModel):
    """Partial update of an event."""
    model_config = ConfigDict(extra='ignore')

    name: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    date: Optional[str] = None
    categoryId: Optional[CategoryId] = None
    image: Optional[str] = None
    attendees: Optional[int] = None
    favorites: Optional[int] = None
    averageRating: Optional[float] = None

class RatingCreate(BaseModel):
    """A rating submission. `date` is accepted but the server records its own submission time."""
    rating: int
    date: Optional[str] = None

    @field_validator('rating', mode='before')
    @classmethod
    def parse_leading_integer(cls, value):
        """Accept ints and strings/floats with a leading integer part ("4", "4.7", 4.7 -> 4)."""
        if isinstance(value, bool):
            raise ValueError("rating must be an integer")
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            if value != value or value in (float('inf'), float('-inf')):
                raise ValueError("rating must be an integer")
            return int(value)
        if isinstance(value, str):
            match = _LEADING_INT.match(value)
            if match:
                return int(match.group(1))
        raise ValueError("rating must be an integer")
