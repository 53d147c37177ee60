"""Errors surfaced by the client data layer."""

from typing import Dict, Optional

class ClientError(Exception):
    """Base exception for client-side failures."""
    pass

class NetworkFailure(ClientError):
    """The request could not be completed or the server answered with a non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

class NotFound(NetworkFailure):
    """The server answered 404 for the requested record."""

    def __init__(self, message: str):
        super().__init__(message, status_code=404)

class ValidationFailure(ClientError):
    """Client-side form validation failed. `errors` maps field names to messages."""

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(f"{field}: {message}" for field, message in self.errors.items()))
