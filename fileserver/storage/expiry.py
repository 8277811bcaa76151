"""Expiry tags telling the external lifecycle process how long to keep a file."""

from __future__ import annotations

from enum import Enum
from urllib.parse import urlencode

from fileserver.exceptions import InvalidParametersError

TAG_KEY = "expires"


class ExpiryTag(str, Enum):
    # Keep this file for a short period.
    SHORT = "short"
    # Keep this file as long as the legal data retention period allows.
    LEGAL = "legal"
    # Never delete this file.
    NEVER = "never"


def resolve_tag(value: ExpiryTag | str | None) -> ExpiryTag:
    """Return the expiry tag for ``value``, defaulting to NEVER when absent.

    Raises:
        InvalidParametersError: If ``value`` is not one of the known tags.
    """
    if value is None:
        return ExpiryTag.NEVER
    if isinstance(value, ExpiryTag):
        return value
    normalized = value.strip().lower()
    if not normalized:
        return ExpiryTag.NEVER
    try:
        return ExpiryTag(normalized)
    except ValueError as exc:
        raise InvalidParametersError(
            f"Unknown expiry tag '{value}'",
            {"expires": value[:32], "allowed": ", ".join(tag.value for tag in ExpiryTag)},
        ) from exc


def tagging(value: ExpiryTag | str | None) -> str:
    """Return the URL encoded S3 tag set carrying the resolved expiry tag."""
    return urlencode({TAG_KEY: resolve_tag(value).value})


__all__ = ["TAG_KEY", "ExpiryTag", "resolve_tag", "tagging"]
