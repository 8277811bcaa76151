"""Validation of the identifier and filename path parameters.

Identifiers come in two shapes:

* a standard 36 character UUID (``00000000-0000-0000-0000-000000000001``);
* a 33 character job key: one arbitrary prefix character followed by a UUID
  with the dashes removed (``x0123456789abcdef0123456789abcdef``).

Filenames are only limited in length, plus a path traversal check so the
filesystem backend can safely join them onto a directory.
"""

from __future__ import annotations

import re

from fileserver.exceptions import InvalidParametersError

# Length of standard UUID
UUID_LENGTH = 36
# Length of job key: character prefixed UUID, and dashes removed from UUID.
PREFIXED_UUID_LENGTH = 32 + 1
# Arbitrary maximum length of a filename, to avoid abuse. Exclusive bound.
MAX_FILENAME_LENGTH = 256

_UUID_PATTERN = re.compile(r"[0-9a-fA-F\-]*")
_FORBIDDEN_CHARACTERS = ("/", "\x00")


def validate_identifier(identifier: str | None) -> bool:
    """Return True if ``identifier`` has one of the two accepted UUID shapes."""
    if identifier is None:
        return False
    length = len(identifier)
    if length == UUID_LENGTH:
        return _UUID_PATTERN.fullmatch(identifier) is not None
    if length == PREFIXED_UUID_LENGTH:
        # The prefix character is free-form but ends up as a path segment.
        if identifier[0] in _FORBIDDEN_CHARACTERS:
            return False
        return _UUID_PATTERN.fullmatch(identifier[1:]) is not None
    return False


def validate_filename(filename: str | None) -> bool:
    """Return True if the filename is not None and shorter than 256 characters."""
    return filename is not None and len(filename) < MAX_FILENAME_LENGTH


def is_safe_filename(filename: str) -> bool:
    """Return True if the filename stays a single path segment when joined onto a directory."""
    if filename in ("", ".", ".."):
        return False
    return not any(char in filename for char in _FORBIDDEN_CHARACTERS)


def validate_identifier_parameter(identifier: str | None) -> None:
    if not validate_identifier(identifier):
        raise InvalidParametersError("Invalid parameters", {"identifier": str(identifier)[:64]})


def validate_parameters(identifier: str | None, filename: str | None) -> None:
    """Raise InvalidParametersError unless both identifier and filename are acceptable."""
    validate_identifier_parameter(identifier)
    if not validate_filename(filename) or not is_safe_filename(filename):
        raise InvalidParametersError("Invalid parameters", {"filename": str(filename)[:64]})


__all__ = [
    "UUID_LENGTH",
    "PREFIXED_UUID_LENGTH",
    "MAX_FILENAME_LENGTH",
    "validate_identifier",
    "validate_filename",
    "is_safe_filename",
    "validate_identifier_parameter",
    "validate_parameters",
]
