from __future__ import annotations

from pathlib import Path

import pytest

from fileserver.settings import Settings
from fileserver.storage.local import LocalStorage


@pytest.fixture()
def local_storage(tmp_path: Path) -> LocalStorage:
    return LocalStorage(tmp_path / "upload")


@pytest.fixture()
def local_app(local_storage: LocalStorage):
    from services.api.main import create_app

    return create_app(settings=Settings(), storage=local_storage)
