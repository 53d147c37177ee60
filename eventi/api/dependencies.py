"""FastAPI dependencies shared by the routers."""

from pathlib import Path

from fastapi import Request

from ..db import Database

def get_db(request: Request) -> Database:
    """The store the running application was created with."""
    return request.app.state.db

def get_upload_dir(request: Request) -> Path:
    """Directory uploaded images are written to."""
    return request.app.state.upload_dir
