"""
File Upload Utility - store college media (logo, cover photo) on local disk.

Supported formats:
- Images only (.png, .jpg, .jpeg, .gif, .webp, .svg)

Files land in <upload_dir>/college-admins/ and are served under /uploads.
Max file size comes from settings (5MB by default).
"""

import os
import random
import time
from datetime import datetime
from fastapi import UploadFile, HTTPException

from admissions.core.config import get_settings

MEDIA_SUBDIR = "college-admins"
ALLOWED_EXTENSIONS = {'.png', '.jpg', '.jpeg', '.gif', '.webp', '.svg'}


def get_file_extension(filename: str) -> str:
    """Get lowercase file extension."""
    if '.' not in filename:
        return ''
    return '.' + filename.rsplit('.', 1)[1].lower()


def media_dir() -> str:
    path = os.path.join(get_settings().upload_dir, MEDIA_SUBDIR)
    os.makedirs(path, exist_ok=True)
    return path


def _stored_name(ext: str) -> str:
    return f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}{ext}"


async def save_media_file(file: UploadFile) -> dict:
    """
    Validate and store an uploaded image.

    Args:
        file: FastAPI UploadFile

    Returns:
        Media metadata: {url, filename, size, uploaded_at}

    Raises:
        HTTPException on validation errors
    """
    settings = get_settings()

    if not file.filename:
        raise HTTPException(status_code=400, detail="No filename provided")

    ext = get_file_extension(file.filename)
    is_image = (file.content_type or "").startswith("image/")
    if ext not in ALLOWED_EXTENSIONS or not is_image:
        raise HTTPException(status_code=400, detail="Only image files are allowed")

    content = await file.read()

    if len(content) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum allowed size is {settings.max_upload_mb}MB."
        )

    filename = _stored_name(ext)
    with open(os.path.join(media_dir(), filename), "wb") as out:
        out.write(content)

    return {
        "url": f"/uploads/{MEDIA_SUBDIR}/{filename}",
        "filename": filename,
        "size": len(content),
        "uploaded_at": datetime.utcnow()
    }


def media_from_link(url: str) -> dict:
    """Media metadata for an already hosted file (client sent {url})."""
    return {"url": url, "uploaded_at": datetime.utcnow()}
