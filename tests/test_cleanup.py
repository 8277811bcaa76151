"""Tests for best-effort deletes."""

from __future__ import annotations

import uuid
from pathlib import Path
from unittest.mock import MagicMock

from fileserver.exceptions import NotFoundError, StorageError
from fileserver.storage.cleanup import (
    DeleteOutcome,
    delete_file_best_effort,
    delete_files_best_effort,
)
from fileserver.storage.local import LocalStorage

IDENTIFIER = "00000000-0000-0000-0000-000000000001"
FILENAME = "test.gml"


def test_delete_file_deleted(tmp_path: Path):
    storage = LocalStorage(tmp_path)
    storage.put_file(IDENTIFIER, FILENAME, 6, None, b"payload")
    assert delete_file_best_effort(storage, IDENTIFIER, FILENAME) is DeleteOutcome.DELETED


def test_delete_file_already_absent(tmp_path: Path):
    storage = LocalStorage(tmp_path)
    assert delete_file_best_effort(storage, IDENTIFIER, FILENAME) is DeleteOutcome.ALREADY_ABSENT


def test_delete_file_invalid_parameters_fail_without_touching_storage():
    storage = MagicMock()
    assert delete_file_best_effort(storage, "1" * 1000, FILENAME) is DeleteOutcome.FAILED
    assert delete_file_best_effort(storage, IDENTIFIER, "1" * 1000) is DeleteOutcome.FAILED
    storage.delete_file.assert_not_called()


def test_delete_file_storage_failure():
    storage = MagicMock()
    storage.delete_file.side_effect = StorageError("disk on fire")
    assert delete_file_best_effort(storage, IDENTIFIER, FILENAME) is DeleteOutcome.FAILED


def test_delete_file_retained(tmp_path: Path):
    storage = LocalStorage(tmp_path, prevent_cleanup=True)
    storage.put_file(IDENTIFIER, FILENAME, 6, None, b"payload")
    assert delete_file_best_effort(storage, IDENTIFIER, FILENAME) is DeleteOutcome.RETAINED
    assert (tmp_path / IDENTIFIER / FILENAME).exists()


def test_delete_files_outcomes(tmp_path: Path):
    storage = LocalStorage(tmp_path)
    identifier = "x" + uuid.uuid4().hex
    storage.put_file(identifier, FILENAME, 6, None, b"payload")

    assert delete_files_best_effort(storage, identifier) is DeleteOutcome.DELETED
    assert delete_files_best_effort(storage, identifier) is DeleteOutcome.ALREADY_ABSENT


def test_delete_files_invalid_identifier():
    storage = MagicMock()
    assert delete_files_best_effort(storage, "123") is DeleteOutcome.FAILED
    storage.delete_files.assert_not_called()


def test_delete_files_not_found_from_backend():
    storage = MagicMock()
    storage.delete_files.side_effect = NotFoundError("gone")
    assert delete_files_best_effort(storage, IDENTIFIER) is DeleteOutcome.ALREADY_ABSENT
