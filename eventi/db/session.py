"""Session over the in-memory JSON document.

A session works on a private copy of the document. The owning `Database`
decides whether to persist it when the session's scope ends.
"""

import logging
import time
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)

COLLECTIONS = ('events', 'categories', 'ratings')

# Collection name -> foreign key field dependent records use to reference it.
# Deleting a record also deletes its dependents.
FOREIGN_KEYS = {
    'events': 'eventId',
}

class Session:
    """Collection-oriented access to one copy of the store document."""

    def __init__(self, data: Dict[str, List[dict]]):
        self._data = data
        self.dirty = False

    @property
    def data(self) -> Dict[str, List[dict]]:
        return self._data

    def _collection(self, name: str) -> List[dict]:
        # Imported here to avoid a cycle with db_core
        from .db_core import DatabaseError

        if name not in self._data:
            raise DatabaseError(f"Unknown collection '{name}'")
        return self._data[name]

    def all(self, collection: str) -> List[dict]:
        """All records of a collection in insertion order."""
        return list(self._collection(collection))

    def find(self, collection: str, **equals: Any) -> List[dict]:
        """Records whose fields equal the given values, compared as strings."""
        wanted = {key: str(value) for key, value in equals.items()}
        return [
            record for record in self._collection(collection)
            if all(str(record.get(key)) == value for key, value in wanted.items())
        ]

    def first(self, collection: str, **equals: Any) -> Optional[dict]:
        matches = self.find(collection, **equals)
        return matches[0] if matches else None

    def get(self, collection: str, record_id: str) -> dict:
        """
        Get a record by id.

        Raises:
            NotFoundError: If no record has that id
        """
        from .db_core import NotFoundError

        record = self.first(collection, id=record_id)
        if record is None:
            raise NotFoundError(collection, record_id)
        return record

    def next_id(self, collection: str) -> str:
        """A new id from the current millisecond timestamp, bumped while it collides."""
        candidate = int(time.time() * 1000)
        taken = {str(record.get('id')) for record in self._collection(collection)}
        while str(candidate) in taken:
            candidate += 1
        return str(candidate)

    def insert(self, collection: str, record: dict) -> dict:
        record = dict(record)
        if not record.get('id'):
            record['id'] = self.next_id(collection)
        record['id'] = str(record['id'])
        self._collection(collection).append(record)
        self.dirty = True
        return record

    def update(self, collection: str, record_id: str, changes: dict) -> dict:
        """Merge `changes` into an existing record. The id never changes."""
        record = self.get(collection, record_id)
        record.update({key: value for key, value in changes.items() if key != 'id'})
        self.dirty = True
        return record

    def replace(self, collection: str, record_id: str, new_record: dict) -> dict:
        """Replace an existing record's content, keeping its id and position."""
        records = self._collection(collection)
        record = self.get(collection, record_id)
        replacement = {key: value for key, value in new_record.items() if key != 'id'}
        replacement = {'id': record['id'], **replacement}
        records[records.index(record)] = replacement
        self.dirty = True
        return replacement

    def delete(self, collection: str, record_id: str) -> dict:
        """Delete a record and every record in other collections that references it."""
        records = self._collection(collection)
        record = self.get(collection, record_id)
        records.remove(record)

        foreign_key = FOREIGN_KEYS.get(collection)
        if foreign_key:
            for other in COLLECTIONS:
                if other == collection:
                    continue
                kept = [r for r in self._data[other] if str(r.get(foreign_key)) != str(record['id'])]
                removed = len(self._data[other]) - len(kept)
                if removed:
                    logger.info(f"Removed {removed} dependent {other} of {collection}/{record['id']}")
                    self._data[other] = kept

        self.dirty = True
        return record
