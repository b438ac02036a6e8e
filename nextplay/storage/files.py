# nextplay/storage/files.py
from __future__ import annotations

import os
import uuid
from typing import Optional

from nextplay.storage.backend import put_photo

PHOTO_FOLDER = "injuries"
ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}


def is_image(content_type: Optional[str], filename: Optional[str]) -> bool:
    if not (content_type or "").startswith("image/"):
        return False
    ext = os.path.splitext(filename or "")[1].lower()
    return not ext or ext in ALLOWED_EXTENSIONS


def save_photo(owner_id: str, filename: Optional[str], data: bytes, content_type: Optional[str] = None) -> str:
    """
    Store an injury photo under the uploader's prefix and return its URL.
    """
    ext = os.path.splitext(filename or "")[1].lower() or ".jpg"
    key = f"{PHOTO_FOLDER}/{owner_id}/{uuid.uuid4().hex}{ext}"
    return put_photo(key, data, content_type=content_type)
