# nextplay/storage/__init__.py
from nextplay.storage.backend import storage_startup, ensure_buckets
from nextplay.storage.files import is_image, save_photo

__all__ = ["storage_startup", "ensure_buckets", "is_image", "save_photo"]
