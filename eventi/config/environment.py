"""Deployment environment.

Importing this module loads `.env` (values already set in the process
environment win), so it has to come before anything that reads settings:

    from eventi.config.environment import ENVIRONMENT_NAME, IS_PRODUCTION_ENVIRONMENT
"""

import logging
import os

from dotenv import load_dotenv

load_dotenv(override=False)

KNOWN_ENVIRONMENTS = ('development', 'production')

def _resolve_environment(raw: str) -> str:
    name = raw.strip().lower()
    if name not in KNOWN_ENVIRONMENTS:
        logging.getLogger(__name__).warning(
            f"ENVIRONMENT={raw!r} is not one of {', '.join(KNOWN_ENVIRONMENTS)}; using development"
        )
        return 'development'
    return name

ENVIRONMENT_NAME = _resolve_environment(os.environ.get('ENVIRONMENT', ''))
IS_PRODUCTION_ENVIRONMENT = ENVIRONMENT_NAME == 'production'

__all__ = ['ENVIRONMENT_NAME', 'IS_PRODUCTION_ENVIRONMENT']
