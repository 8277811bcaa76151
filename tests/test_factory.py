"""Tests for storage backend selection."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

from fileserver.settings import StorageSettings
from fileserver.storage.factory import create_storage
from fileserver.storage.local import LocalStorage
from fileserver.storage.s3 import S3Storage


def test_create_local_storage(tmp_path: Path):
    location = tmp_path / "upload"
    storage = create_storage(
        StorageSettings(backend="local", prevent_cleanup=True, local={"location": str(location)})
    )
    assert isinstance(storage, LocalStorage)
    assert storage.root == location
    assert storage.prevent_cleanup is True
    assert location.is_dir()


def test_create_s3_storage(monkeypatch):
    client = MagicMock()
    created = {}

    def fake_create_s3_client(region=None, endpoint_url=None):
        created["region"] = region
        created["endpoint_url"] = endpoint_url
        return client

    monkeypatch.setattr("fileserver.storage.s3.create_s3_client", fake_create_s3_client)

    storage = create_storage(
        StorageSettings(
            backend="s3",
            s3={
                "bucket_name": "files",
                "region": "eu-west-1",
                "endpoint_url": "http://minio:9000",
                "presign_expires_seconds": 120,
            },
        )
    )

    assert isinstance(storage, S3Storage)
    assert storage.bucket == "files"
    assert storage.client is client
    assert storage.presign_expires == 120
    assert storage.prevent_cleanup is False
    assert created == {"region": "eu-west-1", "endpoint_url": "http://minio:9000"}
