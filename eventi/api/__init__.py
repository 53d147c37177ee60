"""API service package."""

from .app import create_application

__all__ = ['create_application']
