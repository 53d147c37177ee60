"""Client data layer configuration."""

import os
from dataclasses import dataclass, field
from pathlib import Path

from . import environment  # noqa: F401

@dataclass
class ClientConfig:
    """
    Settings used by the API client and the page controllers.

    Fields:
        api_base_url: Base URL of the events API
        api_timeout: Request timeout in seconds
        local_state_path: JSON file holding this client's attendance/favorite/rating flags
    """
    api_base_url: str = field(default_factory=lambda: os.environ.get('API_BASE_URL', 'http://localhost:8081'))
    api_timeout: int = field(default_factory=lambda: int(os.environ.get('API_TIMEOUT', '30')))
    local_state_path: Path = field(default_factory=lambda: Path(
        os.environ.get('EVENTI_LOCAL_STATE_PATH', Path.home() / '.eventi' / 'local_state.json')
    ).expanduser())

def get_client_config() -> ClientConfig:
    """Build the client configuration from the current environment."""
    return ClientConfig()
