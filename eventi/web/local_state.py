"""Per-client "have I done this" flags.

Attendance, favorites and ratings are remembered only on this client, keyed by
event id, in a small JSON file that plays the part of browser local storage.
They are not tied to any account.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Optional

from ..config.client import get_client_config

logger = logging.getLogger(__name__)

STORAGE_KEY_ATTENDANCE = "eventiCampania_attendance"
STORAGE_KEY_FAVORITES = "eventiCampania_favorites"
STORAGE_KEY_RATINGS = "eventiCampania_ratings"

class LocalState:
    """String-keyed storage holding JSON-encoded flag maps, persisted to a file."""

    def __init__(self, path: Optional[Path] = None):
        self.path = Path(path) if path else get_client_config().local_state_path

    def _read_all(self) -> Dict[str, str]:
        try:
            with open(self.path, encoding='utf-8') as f:
                items = json.load(f)
        except FileNotFoundError:
            return {}
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Ignoring unreadable local state at {self.path}: {e}")
            return {}
        return items if isinstance(items, dict) else {}

    def _write_all(self, items: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix='.local-', suffix='.json')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(items, f)
            os.replace(tmp_path, self.path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise

    def get_item(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._read_all()
        items[key] = value
        self._write_all(items)

    def remove_item(self, key: str) -> None:
        items = self._read_all()
        if items.pop(key, None) is not None:
            self._write_all(items)

    def _load_map(self, key: str) -> dict:
        stored = self.get_item(key)
        if not stored:
            return {}
        try:
            mapping = json.loads(stored)
        except (TypeError, json.JSONDecodeError):
            return {}
        return mapping if isinstance(mapping, dict) else {}

    def _store_entry(self, key: str, event_id: str, value) -> None:
        mapping = self._load_map(key)
        if value is None:
            mapping.pop(str(event_id), None)
        else:
            mapping[str(event_id)] = value
        self.set_item(key, json.dumps(mapping))

    def is_attending(self, event_id: str) -> bool:
        return self._load_map(STORAGE_KEY_ATTENDANCE).get(str(event_id)) is True

    def set_attending(self, event_id: str, attending: bool) -> None:
        self._store_entry(STORAGE_KEY_ATTENDANCE, event_id, True if attending else None)

    def is_favorite(self, event_id: str) -> bool:
        return self._load_map(STORAGE_KEY_FAVORITES).get(str(event_id)) is True

    def set_favorite(self, event_id: str, favorite: bool) -> None:
        self._store_entry(STORAGE_KEY_FAVORITES, event_id, True if favorite else None)

    def get_rating(self, event_id: str) -> Optional[int]:
        rating = self._load_map(STORAGE_KEY_RATINGS).get(str(event_id))
        if isinstance(rating, bool) or not isinstance(rating, int) or rating == 0:
            return None
        return rating

    def set_rating(self, event_id: str, rating: Optional[int]) -> None:
        self._store_entry(STORAGE_KEY_RATINGS, event_id, rating)
