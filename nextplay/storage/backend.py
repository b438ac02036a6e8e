# nextplay/storage/backend.py
"""
Object storage for injury photos.

STORAGE_BACKEND picks MinIO/S3 (default) or Azure Blob. The client is
built by storage_startup() from the app lifespan; importing this module
never opens a connection.
"""
from __future__ import annotations

import io
import logging
import os
from datetime import timedelta
from typing import Optional
from urllib.parse import urlparse

from nextplay.errors import ServiceUnavailable

logger = logging.getLogger(__name__)

BACKEND = os.getenv("STORAGE_BACKEND", "s3").lower()

S3_ENDPOINT = os.getenv("S3_ENDPOINT", "http://minio:9000")
S3_ACCESS_KEY = os.getenv("S3_ACCESS_KEY", "admin")
S3_SECRET_KEY = os.getenv("S3_SECRET_KEY", "adminadmin")
S3_BUCKET_PHOTOS = os.getenv("S3_BUCKET_PHOTOS", "nextplay-photos")
# lifetime of presigned photo links
PHOTO_URL_DAYS = int(os.getenv("PHOTO_URL_DAYS", "7"))

AZURE_BLOB_CONN_STR = os.getenv("AZURE_BLOB_CONN_STR", "")
AZURE_CONTAINER_PHOTOS = os.getenv("AZURE_CONTAINER_PHOTOS", "nextplay-photos")


class MinioPhotoStore:
    def __init__(self, endpoint: str, access_key: str, secret_key: str, bucket: str):
        from minio import Minio

        url = urlparse(endpoint if "://" in endpoint else f"http://{endpoint}")
        self.client = Minio(
            url.netloc,
            access_key=access_key,
            secret_key=secret_key,
            secure=url.scheme == "https",
        )
        self.bucket = bucket

    def ensure_container(self) -> None:
        if not self.client.bucket_exists(self.bucket):
            self.client.make_bucket(self.bucket)
            logger.info("created photo bucket %s", self.bucket)

    def put(self, key: str, data: bytes, content_type: str) -> str:
        self.client.put_object(self.bucket, key, io.BytesIO(data), len(data), content_type=content_type)
        return self.client.presigned_get_object(self.bucket, key, expires=timedelta(days=PHOTO_URL_DAYS))


class AzurePhotoStore:
    def __init__(self, conn_str: str, container: str):
        from azure.storage.blob import BlobServiceClient

        self.service = BlobServiceClient.from_connection_string(conn_str)
        self.container = container

    def ensure_container(self) -> None:
        from azure.core.exceptions import ResourceExistsError

        try:
            self.service.create_container(self.container)
            logger.info("created photo container %s", self.container)
        except ResourceExistsError:
            logger.debug("photo container %s already exists", self.container)

    def put(self, key: str, data: bytes, content_type: str) -> str:
        from azure.storage.blob import ContentSettings

        blob = self.service.get_blob_client(container=self.container, blob=key)
        blob.upload_blob(data, overwrite=True, content_settings=ContentSettings(content_type=content_type))
        return blob.url


_store = None


def storage_startup() -> None:
    global _store
    if BACKEND == "s3":
        _store = MinioPhotoStore(S3_ENDPOINT, S3_ACCESS_KEY, S3_SECRET_KEY, S3_BUCKET_PHOTOS)
    elif BACKEND == "azure":
        if not AZURE_BLOB_CONN_STR:
            raise RuntimeError("AZURE_BLOB_CONN_STR not set")
        _store = AzurePhotoStore(AZURE_BLOB_CONN_STR, AZURE_CONTAINER_PHOTOS)
    else:
        raise RuntimeError(f"Unknown STORAGE_BACKEND: {BACKEND}")


def _require_store():
    if _store is None:
        raise ServiceUnavailable("Photo storage is not available")
    return _store


def ensure_buckets() -> None:
    _require_store().ensure_container()


def put_photo(key: str, data: bytes, content_type: Optional[str] = None) -> str:
    """Store bytes and return a URL the browser can load."""
    return _require_store().put(key, data, content_type or "application/octet-stream")
