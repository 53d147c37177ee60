"""Rating model definition."""

from dataclasses import dataclass

@dataclass
class Rating:
    """
    A single rating left on an event.

    Fields:
        id: Unique identifier
        event_id: Id of the rated event
        rating: Integer score, nominally 1-5
        date: ISO-8601 instant the rating was submitted
    """
    id: str
    event_id: str
    rating: int
    date: str

    @classmethod
    def from_dict(cls, data: dict) -> "Rating":
        return cls(
            id=str(data['id']),
            event_id=str(data['eventId']),
            rating=int(data['rating']),
            date=data['date'],
        )

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'eventId': self.event_id,
            'rating': self.rating,
            'date': self.date,
        }
