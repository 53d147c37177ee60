"""Storage configuration: where the JSON document and uploaded images live."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from . import environment  # noqa: F401

PROJECT_ROOT = Path(__file__).parent.parent.parent

@dataclass
class StorageConfig:
    """
    Storage settings for the API server.

    Fields:
        db_path: Path of the JSON document holding events, categories and ratings
        upload_dir: Directory uploaded images are written to and served from
    """
    db_path: Path = field(default_factory=lambda: Path(
        os.environ.get('EVENTI_DB_PATH', PROJECT_ROOT / 'data' / 'db.json')
    ))
    upload_dir: Path = field(default_factory=lambda: Path(
        os.environ.get('EVENTI_UPLOAD_DIR', PROJECT_ROOT / 'uploads')
    ))

def get_storage_config() -> StorageConfig:
    """Build the storage configuration from the current environment."""
    return StorageConfig()
