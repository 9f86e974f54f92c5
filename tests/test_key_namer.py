# tests/test_key_namer.py

import re

import pytest

from media.aspect_classifier import Orientation
from storage.key_namer import (
    IDENTIFIER_LENGTH,
    StorageKey,
    extension_for,
    generate_identifier,
    generate_storage_key
)

URLSAFE = re.compile(r"^[A-Za-z0-9_-]+$")


def test_identifier_is_43_urlsafe_characters():
    identifier = generate_identifier()
    assert len(identifier) == IDENTIFIER_LENGTH == 43
    assert URLSAFE.match(identifier)


def test_ten_thousand_keys_are_unique():
    keys = {str(generate_storage_key(Orientation.LANDSCAPE, "mp4")) for _ in range(10_000)}
    assert len(keys) == 10_000


@pytest.mark.parametrize("prefix,expected", [
    (Orientation.LANDSCAPE, "landscape"),
    (Orientation.PORTRAIT, "portrait"),
    (Orientation.OTHER, "other"),
])
def test_key_layout(prefix, expected):
    key = generate_storage_key(prefix, "mp4")
    text = str(key)

    assert text.startswith(f"{expected}/")
    assert text.endswith(".mp4")
    assert StorageKey.parse(text) == key


def test_extension_is_normalized():
    assert generate_storage_key("other", ".MP4").extension == "mp4"


@pytest.mark.parametrize("media_type,extension", [
    ("video/mp4", "mp4"),
    ("Video/MP4; codecs=avc1", "mp4"),
    ("image/jpeg", "jpeg"),
    ("image/png", "png"),
])
def test_extension_for(media_type, extension):
    assert extension_for(media_type) == extension


def test_extension_for_rejects_garbage():
    with pytest.raises(ValueError):
        extension_for("mp4")


@pytest.mark.parametrize("text", ["", "landscape", "landscape/abc", "/abc.mp4", "Land/abc.mp4"])
def test_parse_rejects_non_keys(text):
    with pytest.raises(ValueError):
        StorageKey.parse(text)
