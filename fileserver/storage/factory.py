"""Selects the storage backend configured for this process."""

from __future__ import annotations

from pathlib import Path

from loguru import logger

from fileserver.exceptions import ConfigurationError
from fileserver.settings import StorageSettings
from fileserver.storage import FileStorage
from fileserver.storage.local import LocalStorage
from fileserver.storage.s3 import S3Storage


def create_storage(settings: StorageSettings) -> FileStorage:
    if settings.backend == "local":
        logger.info(
            "Starting file server with local file storage at {location}",
            location=settings.local.location,
        )
        return LocalStorage(Path(settings.local.location), prevent_cleanup=settings.prevent_cleanup)
    if settings.backend == "s3":
        if not settings.s3.bucket_name:
            raise ConfigurationError("S3 bucket name is not configured", {"setting": "storage.s3.bucket_name"})
        logger.info(
            "Starting file server with Amazon S3 file storage in bucket {bucket}",
            bucket=settings.s3.bucket_name,
        )
        return S3Storage(
            settings.s3.bucket_name,
            region=settings.s3.region,
            endpoint_url=settings.s3.endpoint_url,
            prevent_cleanup=settings.prevent_cleanup,
            presign_expires=settings.s3.presign_expires_seconds,
        )
    raise ConfigurationError(f"Unknown storage backend '{settings.backend}'", {"setting": "storage.backend"})


__all__ = ["create_storage"]
