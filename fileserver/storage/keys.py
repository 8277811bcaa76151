"""Derivation of storage keys from an identifier and a filename.

Object store keys are sharded on the first character of the identifier:
identifiers starting with a non hexadecimal character (job keys such as
``t0123...``) are stored under that character, all plain hexadecimal UUIDs
share the ``z`` shard. All files of one identifier stay listable through a
single prefix.
"""

from __future__ import annotations

import string
import uuid
from pathlib import Path

from fileserver.exceptions import InvalidParametersError

FALLBACK_SHARD = "z"
_HEX_DIGITS = frozenset(string.hexdigits)
# Fullwidth forms of a-f and A-F also count as hexadecimal digits.
_FULLWIDTH_HEX_DIGITS = frozenset("\uff21\uff22\uff23\uff24\uff25\uff26\uff41\uff42\uff43\uff44\uff45\uff46")


def is_hex_digit(char: str) -> bool:
    """Return True if ``char`` has a value in base 16, including non ASCII decimal digits."""
    return char in _HEX_DIGITS or char.isdecimal() or char in _FULLWIDTH_HEX_DIGITS


def shard_label(identifier: str) -> str:
    if not identifier:
        raise InvalidParametersError("Identifier must not be empty")
    first = identifier[0]
    return FALLBACK_SHARD if is_hex_digit(first) else first


def object_prefix(identifier: str) -> str:
    """Return the ``{shard}/{identifier}/`` prefix listing every file of the identifier."""
    return f"{shard_label(identifier)}/{identifier}/"


def object_key(identifier: str, filename: str) -> str:
    return object_prefix(identifier) + filename


def local_directory(base: Path, identifier: str) -> Path:
    return base / identifier


def local_path(base: Path, identifier: str, filename: str) -> Path:
    return local_directory(base, identifier) / filename


def create_identifier(prefix: str = "") -> str:
    """Create a unique identifier: ``prefix`` followed by a UUID4 without dashes.

    With a one character prefix this yields the 33 character job key form.
    """
    return prefix + uuid.uuid4().hex


__all__ = [
    "FALLBACK_SHARD",
    "shard_label",
    "object_prefix",
    "object_key",
    "local_directory",
    "local_path",
    "create_identifier",
]
