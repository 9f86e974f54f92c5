"""
Storage key naming

Keys look like ``{orientation}/{identifier}.{extension}`` where the identifier
is 32 random bytes, URL-safe base64 without padding (43 characters).
"""

import re
import secrets
from dataclasses import dataclass
from typing import Union

from media.aspect_classifier import Orientation

IDENTIFIER_BYTES = 32
IDENTIFIER_LENGTH = 43

_KEY_RE = re.compile(r"^(?P<prefix>[a-z0-9_-]+)/(?P<identifier>[A-Za-z0-9_-]+)\.(?P<extension>[a-z0-9]+)$")


@dataclass(frozen=True)
class StorageKey:
    prefix: str
    identifier: str
    extension: str

    def __str__(self) -> str:
        return f"{self.prefix}/{self.identifier}.{self.extension}"

    @classmethod
    def parse(cls, text: str) -> "StorageKey":
        match = _KEY_RE.match(text or "")
        if not match:
            raise ValueError(f"Not a storage key: {text!r}")
        return cls(**match.groupdict())


def generate_identifier() -> str:
    return secrets.token_urlsafe(IDENTIFIER_BYTES)


def extension_for(media_type: str) -> str:
    """'video/mp4' -> 'mp4', 'image/jpeg' -> 'jpeg'"""
    base = media_type.split(";", 1)[0].strip().lower()
    _, _, subtype = base.partition("/")
    if not subtype:
        raise ValueError(f"Not a media type: {media_type!r}")
    return subtype


def generate_storage_key(prefix: Union[Orientation, str], extension: str) -> StorageKey:
    """Derive a fresh, never-reused key for an upload"""
    if isinstance(prefix, Orientation):
        prefix = prefix.value
    return StorageKey(
        prefix=prefix,
        identifier=generate_identifier(),
        extension=extension.lstrip(".").lower()
    )
