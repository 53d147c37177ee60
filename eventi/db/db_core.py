"""Core storage functionality and configuration.

The store is a single JSON document holding the `events`, `categories` and
`ratings` collections. It is loaded once, mutated through sessions and written
back to disk whole on every committed change.
"""

from contextlib import contextmanager
import copy
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Generator, List, Optional

from ..config.storage import get_storage_config
from .session import COLLECTIONS, Session

logger = logging.getLogger(__name__)

DEFAULT_CATEGORIES = [
    {"id": "1", "name": "Musica"},
    {"id": "2", "name": "Sport"},
    {"id": "3", "name": "Cultura"},
    {"id": "4", "name": "Enogastronomia"},
    {"id": "5", "name": "Teatro"},
    {"id": "6", "name": "Sagre e Feste"},
]

class DatabaseConfig:
    """Store configuration settings."""

    def __init__(self, json_path: Optional[Path] = None, indent: int = 2):
        """
        Initialize store configuration.

        Args:
            json_path: Path of the JSON document. Defaults to EVENTI_DB_PATH
                       or data/db.json under the project root.
            indent: Indentation used when writing the document
        """
        self.json_path = Path(json_path) if json_path else get_storage_config().db_path
        self.indent = indent

class DatabaseError(Exception):
    """Base exception for storage-related errors."""
    pass

class StorageError(DatabaseError):
    """Raised when the JSON document cannot be read, decoded or written."""
    pass

class SessionError(DatabaseError):
    """Raised when a session fails; nothing from that session is persisted."""
    pass

class NotFoundError(DatabaseError):
    """Raised when a referenced record id does not exist."""

    def __init__(self, collection: str, record_id: str):
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"{collection}/{record_id} not found")

    @property
    def label(self) -> str:
        """Singular, capitalised collection name, e.g. 'Event'."""
        singular = self.collection[:-1] if self.collection.endswith('s') else self.collection
        return singular.capitalize()

class Database:
    """JSON-file backed store."""

    def __init__(self, config: Optional[DatabaseConfig] = None):
        self.config = config or DatabaseConfig()
        self._data: Optional[Dict[str, List[dict]]] = None

    @property
    def path(self) -> Path:
        return self.config.json_path

    def _empty_document(self, seed: bool) -> Dict[str, List[dict]]:
        document = {name: [] for name in COLLECTIONS}
        if seed:
            document['categories'] = copy.deepcopy(DEFAULT_CATEGORIES)
        return document

    def _load(self) -> Dict[str, List[dict]]:
        try:
            with open(self.path, encoding='utf-8') as f:
                document = json.load(f)
        except FileNotFoundError:
            raise
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Failed to read store at {self.path}: {e}") from e

        if not isinstance(document, dict):
            raise StorageError(f"Store at {self.path} must contain a JSON object")
        for name in COLLECTIONS:
            document.setdefault(name, [])
        return document

    def _write(self, document: Dict[str, List[dict]]) -> None:
        """Write the document atomically: temp file in the same directory, then rename."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix='.db-', suffix='.json')
            try:
                with os.fdopen(fd, 'w', encoding='utf-8') as f:
                    json.dump(document, f, indent=self.config.indent, ensure_ascii=False)
                os.replace(tmp_path, self.path)
            except BaseException:
                Path(tmp_path).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageError(f"Failed to write store at {self.path}: {e}") from e

    def init_db(self, seed: bool = True) -> None:
        """
        Load the store, creating it if the file does not exist yet.

        Args:
            seed: Populate the default categories when creating a new store
        """
        try:
            self._data = self._load()
            logger.info(f"Loaded store from {self.path}")
        except FileNotFoundError:
            self._data = self._empty_document(seed)
            self._write(self._data)
            logger.info(f"Created new store at {self.path}")

    def reset(self, seed: bool = True) -> None:
        """Replace the whole store with an empty (optionally seeded) document."""
        self._data = self._empty_document(seed)
        self._write(self._data)
        logger.info(f"Reset store at {self.path}")

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """
        Provide a transactional scope around a series of operations.

        Changes are made on a copy of the document. If the block completes and
        changed anything, the copy is written to disk and becomes the live state.
        If the block raises, nothing is written.

        Example:
            with db.session() as session:
                event = session.get('events', event_id)
                session.update('events', event_id, {'attendees': event['attendees'] + 1})

        Raises:
            NotFoundError: Propagated unchanged from the block
            SessionError: If the block fails for any other reason
            StorageError: If the document cannot be written
        """
        if self._data is None:
            self.init_db()

        session = Session(copy.deepcopy(self._data))
        try:
            yield session
        except DatabaseError:
            raise
        except Exception as e:
            raise SessionError(f"Store session error: {e}") from e

        if session.dirty:
            self._write(session.data)
            self._data = session.data

# Create the global store instance with default configuration
db = Database()
