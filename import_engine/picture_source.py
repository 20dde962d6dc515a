"""
import_engine.picture_source - What kind of reference a picture cell holds.

Classification is kept separate from fetching so every kind can be
tested without touching the network or the filesystem.
"""

from __future__ import annotations

import enum
import re

from import_engine.normalizers import looks_like_image_file

_BASE64_RE = re.compile(r"^[A-Za-z0-9+/=]+$")
_URL_RE = re.compile(r"^https?://", re.IGNORECASE)
RAW_BASE64_MIN_LENGTH = 100


class PictureKind(enum.Enum):
    ALREADY_STORED = "already_stored"
    DATA_URI       = "data_uri"
    REMOTE_URL     = "remote_url"
    PUBLIC_PATH    = "public_path"
    BARE_FILENAME  = "bare_filename"
    RAW_BASE64     = "raw_base64"
    UNRESOLVABLE   = "unresolvable"


def classify(value: str, stored_prefix: str) -> PictureKind:
    """First matching rule wins; see the PictureKind members for the order."""
    value = (value or "").strip()
    if not value:
        return PictureKind.UNRESOLVABLE
    if stored_prefix and value.startswith(stored_prefix):
        return PictureKind.ALREADY_STORED
    if value.startswith("data:"):
        return PictureKind.DATA_URI
    if _URL_RE.match(value):
        return PictureKind.REMOTE_URL
    if value.startswith("/"):
        return PictureKind.PUBLIC_PATH
    if looks_like_image_file(value):
        if "/" in value or "\\" in value:
            return PictureKind.PUBLIC_PATH
        return PictureKind.BARE_FILENAME

    compact = re.sub(r"\s+", "", value)
    if len(compact) > RAW_BASE64_MIN_LENGTH and _BASE64_RE.match(compact):
        return PictureKind.RAW_BASE64
    return PictureKind.UNRESOLVABLE
