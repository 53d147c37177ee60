"""Category model definition."""

from dataclasses import dataclass, asdict

@dataclass(frozen=True)
class Category:
    """
    A category events are grouped under. Read-only from the client's point of view.

    Fields:
        id: Unique identifier
        name: Display name
    """
    id: str
    name: str

    @classmethod
    def from_dict(cls, data: dict) -> "Category":
        return cls(id=str(data['id']), name=data['name'])

    def to_dict(self) -> dict:
        return asdict(self)
