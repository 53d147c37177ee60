"""Image upload route. Stored files are served back under /uploads."""

import logging
import time
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import JSONResponse

from ..dependencies import get_upload_dir

logger = logging.getLogger(__name__)

router = APIRouter(tags=["uploads"])

def stored_name(original_filename: Optional[str], upload_dir: Path) -> str:
    """`<ms timestamp><original extension>`, bumped while a file of that name exists."""
    ext = Path(original_filename or "").suffix
    stamp = int(time.time() * 1000)
    while (upload_dir / f"{stamp}{ext}").exists():
        stamp += 1
    return f"{stamp}{ext}"

@router.post("/upload")
async def upload_image(
    image: Optional[UploadFile] = File(None),
    upload_dir: Path = Depends(get_upload_dir),
):
    """Store a single image from the multipart field `image` and return its public path."""
    if image is None or not image.filename:
        return JSONResponse(status_code=400, content={"error": "No file uploaded"})

    try:
        content = await image.read()
    finally:
        await image.close()

    upload_dir.mkdir(parents=True, exist_ok=True)
    name = stored_name(image.filename, upload_dir)
    (upload_dir / name).write_bytes(content)
    logger.info(f"Stored upload {image.filename!r} as {name} ({len(content)} bytes)")

    return {"url": f"/uploads/{name}"}
