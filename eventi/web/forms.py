"""Client-side validation of the create/edit event form.

The server only checks presence, so these rules are enforced here before any
request is sent.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from ..models import Event
from ..models.event import format_instant, parse_instant
from .errors import ValidationFailure

MAX_IMAGE_BYTES = 5 * 1024 * 1024

MESSAGES = {
    'name': "Il nome deve essere di almeno 3 caratteri",
    'description': "La descrizione deve essere di almeno 10 caratteri",
    'location': "La location deve essere di almeno 3 caratteri",
    'date': "La data è obbligatoria",
    'time': "L'ora è obbligatoria",
    'categoryId': "La categoria è obbligatoria",
    'imageUrl': "L'immagine è obbligatoria",
}
INVALID_DATE = "Data o ora non valide"
NOT_AN_IMAGE = "Il file deve essere un'immagine"
IMAGE_TOO_LARGE = "L'immagine deve essere inferiore a 5MB"

class EventFormValues(BaseModel):
    """Raw values of the event form, as typed by the user."""
    name: str = Field(min_length=3)
    description: str = Field(min_length=10)
    location: str = Field(min_length=3)
    date: str = Field(min_length=1)
    time: str = Field(min_length=1)
    categoryId: str = Field(min_length=1)
    imageUrl: str = Field(min_length=1)

def _local_instant(date: str, time: str) -> str:
    """Combine a local `YYYY-MM-DD` date and `HH:MM` time into a UTC instant."""
    try:
        local = datetime.fromisoformat(f"{date}T{time}")
    except ValueError:
        raise ValidationFailure({'date': INVALID_DATE})
    return format_instant(local.astimezone())

def validate_event_form(values: dict) -> dict:
    """
    Validate form values and build the API payload.

    Returns:
        dict: name, description, location, date (ISO instant), categoryId and image

    Raises:
        ValidationFailure: With one message per invalid field
    """
    try:
        form = EventFormValues(**{field: str(values.get(field) or "") for field in MESSAGES})
    except ValidationError as e:
        errors = {}
        for error in e.errors():
            field = str(error['loc'][0])
            errors.setdefault(field, MESSAGES.get(field, error['msg']))
        raise ValidationFailure(errors)

    return {
        'name': form.name,
        'description': form.description,
        'location': form.location,
        'date': _local_instant(form.date, form.time),
        'categoryId': form.categoryId,
        'image': form.imageUrl,
    }

def validate_image_file(content_type: Optional[str], size: int) -> None:
    """Reject non-images and images over 5MB before uploading."""
    if not (content_type or "").startswith("image/"):
        raise ValidationFailure({'imageUrl': NOT_AN_IMAGE})
    if size > MAX_IMAGE_BYTES:
        raise ValidationFailure({'imageUrl': IMAGE_TOO_LARGE})

def form_values_from_event(event: Event) -> dict:
    """Prefill the edit form from a stored event, in local time."""
    starts_at = parse_instant(event.date)
    local = starts_at.astimezone() if starts_at else None
    return {
        'name': event.name,
        'description': event.description,
        'location': event.location,
        'date': local.strftime('%Y-%m-%d') if local else "",
        'time': local.strftime('%H:%M') if local else "",
        'categoryId': event.category_id,
        'imageUrl': event.image or "",
    }
