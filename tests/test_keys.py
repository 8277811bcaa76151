"""Tests for the storage key scheme."""

from pathlib import Path

import pytest

from fileserver.exceptions import InvalidParametersError
from fileserver.storage.keys import (
    FALLBACK_SHARD,
    create_identifier,
    local_directory,
    local_path,
    object_key,
    object_prefix,
    shard_label,
)
from fileserver.validate.parameters import validate_identifier

FILENAME = "test.gml"


def test_object_key_for_hex_identifier_uses_fallback_shard():
    assert object_key("123", FILENAME) == "z/123/test.gml"
    assert object_prefix("123") == "z/123/"


def test_object_key_for_prefixed_identifier_uses_prefix_shard():
    assert object_key("t123", FILENAME) == "t/t123/test.gml"
    assert object_prefix("t123") == "t/t123/"


@pytest.mark.parametrize("first", list("0123456789abcdefABCDEF"))
def test_hex_first_characters_share_fallback_shard(first):
    assert shard_label(first + "0" * 35) == FALLBACK_SHARD


@pytest.mark.parametrize("first", ["g", "t", "x", "Z", "_"])
def test_non_hex_first_character_is_the_shard(first):
    assert shard_label(first + "0" * 32) == first


def test_shard_label_requires_identifier():
    with pytest.raises(InvalidParametersError):
        shard_label("")


def test_prefix_groups_every_file_of_identifier():
    identifier = "00000000-0000-0000-0000-000000000001"
    prefix = object_prefix(identifier)
    assert object_key(identifier, "a.txt").startswith(prefix)
    assert object_key(identifier, "b.txt").startswith(prefix)
    assert object_key(identifier, "a.txt")[len(prefix):] == "a.txt"


def test_local_paths(tmp_path: Path):
    assert local_directory(tmp_path, "123") == tmp_path / "123"
    assert local_path(tmp_path, "123", FILENAME) == tmp_path / "123" / FILENAME


def test_create_identifier_with_prefix_is_valid_job_key():
    identifier = create_identifier("x")
    assert len(identifier) == 33
    assert identifier.startswith("x")
    assert validate_identifier(identifier)
    assert shard_label(identifier) == "x"


def test_create_identifier_is_unique():
    assert create_identifier("j") != create_identifier("j")


@pytest.mark.parametrize("first", ["٣", "३", "Ａ", "ｆ"])
def test_non_ascii_hex_digits_share_fallback_shard(first):
    # Arabic-Indic three, Devanagari three, fullwidth A and fullwidth f.
    assert shard_label(first + "0" * 32) == FALLBACK_SHARD


@pytest.mark.parametrize("first", ["é", "Ｇ", "Δ"])
def test_non_ascii_letters_are_their_own_shard(first):
    assert shard_label(first + "0" * 32) == first
