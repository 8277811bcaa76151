"""Tests for the expiry tag policy."""

import pytest

from fileserver.exceptions import InvalidParametersError
from fileserver.storage.expiry import TAG_KEY, ExpiryTag, resolve_tag, tagging


def test_missing_tag_resolves_to_never():
    assert resolve_tag(None) is ExpiryTag.NEVER
    assert resolve_tag("") is ExpiryTag.NEVER


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("short", ExpiryTag.SHORT),
        ("LEGAL", ExpiryTag.LEGAL),
        (" never ", ExpiryTag.NEVER),
        (ExpiryTag.SHORT, ExpiryTag.SHORT),
    ],
)
def test_known_tags_resolve(value, expected):
    assert resolve_tag(value) is expected


def test_unknown_tag_is_rejected():
    with pytest.raises(InvalidParametersError) as exc_info:
        resolve_tag("sometime")
    assert exc_info.value.details["expires"] == "sometime"


def test_tagging_query_string():
    assert TAG_KEY == "expires"
    assert tagging(None) == "expires=never"
    assert tagging("legal") == "expires=legal"
    assert tagging(ExpiryTag.SHORT) == "expires=short"
