"""Tests for the loguru setup."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import pytest
from loguru import logger

from fileserver.logging_config import setup_logging


@pytest.fixture(autouse=True)
def restore_logger():
    yield
    logger.remove()
    logger.add(sys.stderr)


def test_json_log_file(tmp_path: Path):
    log_file = tmp_path / "logs" / "fileserver.log"
    setup_logging(level="INFO", json_format=True, log_file=log_file)

    logger.bind(identifier="123").info("Stored {}", "test.gml")
    logger.debug("Not written at INFO level")
    logger.complete()

    lines = log_file.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    record = json.loads(lines[0])
    assert record["level"] == "INFO"
    assert record["message"] == "Stored test.gml"
    assert record["identifier"] == "123"
    assert "_json" not in record


def test_plain_log_file(tmp_path: Path):
    log_file = tmp_path / "fileserver.log"
    setup_logging(level="DEBUG", log_file=log_file)

    logger.debug("Plain message")
    logger.complete()

    assert "Plain message" in log_file.read_text(encoding="utf-8")
