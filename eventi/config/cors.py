"""CORS configuration for the FastAPI application."""

import os

from .environment import IS_PRODUCTION_ENVIRONMENT

def _production_origins():
    raw = os.environ.get('CORS_ORIGINS', '')
    return [origin.strip().rstrip('/') for origin in raw.split(',') if origin.strip()]

# CORS Origins configuration
ALLOWED_ORIGINS = {
    False: ["*"],                  # Development - allow all
    True: _production_origins(),   # Production - restricted to CORS_ORIGINS
}

ALLOWED_METHODS = [
    "GET",      # Listing and detail reads
    "POST",     # Creation, uploads and aggregation endpoints
    "PUT",
    "PATCH",
    "DELETE",
    "OPTIONS"   # Required for CORS preflight
]

ALLOWED_HEADERS = [
    "Content-Type",
    "Accept",
]

CORS_CONFIG = {
    "allow_origins": ALLOWED_ORIGINS[IS_PRODUCTION_ENVIRONMENT],
    "allow_credentials": False,
    "allow_methods": ALLOWED_METHODS,
    "allow_headers": ALLOWED_HEADERS,
    "expose_headers": [],
    "max_age": 3600,
}
