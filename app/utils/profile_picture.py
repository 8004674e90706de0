"""Profile picture handling for uploaded images."""
import base64
import logging
import os
import uuid
from typing import Any, Dict, Optional, Union

from fastapi import UploadFile
from fastapi.concurrency import run_in_threadpool

from app.core.config import settings
from app.core.exceptions import ValidationError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024

ProfilePictureValue = Union[str, Dict[str, Any]]


async def build_profile_picture(upload: Optional[UploadFile]) -> Optional[ProfilePictureValue]:
    """
    Turn an uploaded file into the value stored on the member.

    Returns None when nothing was uploaded. In ``inline`` mode the image is
    embedded as base64 with its content type, filename and size; in ``disk``
    mode it is written under ``UPLOAD_DIR`` and its public URL is returned.
    """
    if upload is None or not upload.filename:
        return None

    content = await _read_capped(upload, settings.MAX_FILE_SIZE)

    if settings.PROFILE_PICTURE_STORAGE == "disk":
        return await run_in_threadpool(_store_on_disk, upload.filename, content)

    return {
        "data": base64.b64encode(content).decode("ascii"),
        "contentType": upload.content_type or "application/octet-stream",
        "filename": upload.filename,
        "size": len(content),
    }


async def _read_capped(upload: UploadFile, limit: int) -> bytes:
    """Read the upload in chunks, stopping as soon as it passes ``limit`` bytes."""
    content = bytearray()
    while True:
        chunk = await upload.read(CHUNK_SIZE)
        if not chunk:
            break
        content.extend(chunk)
        if len(content) > limit:
            raise ValidationError(
                f"Profile picture exceeds the {limit // (1024 * 1024)}MB limit"
            )
    return bytes(content)


def _store_on_disk(filename: str, content: bytes) -> str:
    _, ext = os.path.splitext(filename)
    stored_name = f"{uuid.uuid4().hex}{ext.lower()}"
    os.makedirs(settings.UPLOAD_DIR, exist_ok=True)
    with open(os.path.join(settings.UPLOAD_DIR, stored_name), "wb") as f:
        f.write(content)
    logger.info("Stored profile picture %s (%d bytes)", stored_name, len(content))
    return f"{settings.UPLOAD_URL_PREFIX.rstrip('/')}/{stored_name}"
