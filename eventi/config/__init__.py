"""Configuration package.

`environment` must be imported before anything that reads environment variables.
"""

from .environment import ENVIRONMENT_NAME, IS_PRODUCTION_ENVIRONMENT
from .storage import StorageConfig, get_storage_config
from .client import ClientConfig, get_client_config

__all__ = [
    'ENVIRONMENT_NAME',
    'IS_PRODUCTION_ENVIRONMENT',
    'StorageConfig',
    'get_storage_config',
    'ClientConfig',
    'get_client_config',
]
