"""
import_engine.normalizers - Pure helpers that clean spreadsheet cells.

Spreadsheet authors type quantities as free text ("12 x 1kg"), paste
Excel HYPERLINK formulas into picture columns and so on; everything here
turns such cells into values the row processors can validate.
"""

from __future__ import annotations

import math
import re
from typing import Iterable, Optional

IMAGE_EXTENSIONS = ("png", "jpg", "jpeg", "webp", "gif", "svg", "avif")

_IMAGE_EXT_RE = re.compile(
    r"\.(?:%s)(?:[?#].*)?$" % "|".join(IMAGE_EXTENSIONS), re.IGNORECASE,
)
_HYPERLINK_RE = re.compile(
    r"""^=\s*HYPERLINK\(\s*(?:"([^"]+)"|'([^']+)')[^)]*\)""", re.IGNORECASE,
)
_URL_RE = re.compile(r"^https?://", re.IGNORECASE)
_FIRST_INT_RE = re.compile(r"(\d{1,9})")


def to_number(raw) -> Optional[float]:
    """'1,234.50' → 1234.5; blank or non-numeric → None."""
    if raw is None:
        return None
    s = str(raw).strip()
    if not s:
        return None
    try:
        n = float(s.replace(",", ""))
    except ValueError:
        return None
    return n if math.isfinite(n) else None


def to_positive_int_loose(raw) -> Optional[int]:
    """
    First integer found anywhere in the text, if positive.

    "12 x 1kg" → 12, "Pack of 24 units" → 24, "none" → None, "0" → None.
    """
    if raw is None:
        return None
    s = str(raw).strip()
    if not s:
        return None
    s = s.replace("\u00d7", "x")
    m = _FIRST_INT_RE.search(s)
    if not m:
        return None
    n = int(m.group(1))
    return n if n > 0 else None


def slugify(name: str) -> str:
    """'Dark Chocolate 70%!!' → 'dark-chocolate-70'."""
    s = (name or "").lower().strip()
    s = re.sub(r"[^a-z0-9\s-]", "", s)
    s = re.sub(r"\s+", "-", s)
    s = re.sub(r"-+", "-", s)
    return s.strip("-")


def title_case_from_slug(slug: str) -> str:
    """'dark-chocolate_bars' → 'Dark Chocolate Bars'."""
    words = re.sub(r"[_\-]+", " ", (slug or "").strip()).split()
    return " ".join(w[:1].upper() + w[1:] for w in words)


def normalize_picture(raw: str) -> str:
    """Strip one layer of quotes and unwrap =HYPERLINK("url", "label")."""
    s = (raw or "").strip()
    if not s:
        return ""
    if len(s) >= 2 and s[0] == s[-1] and s[0] in ("'", '"'):
        s = s[1:-1]
    m = _HYPERLINK_RE.match(s)
    if m:
        s = (m.group(1) or m.group(2) or "").strip()
    return s.strip()


def looks_like_image_file(value: str) -> bool:
    return bool(_IMAGE_EXT_RE.search(value or ""))


def find_picture_fallback(cells: Iterable[str]) -> str:
    """
    First cell in column order that looks like a picture reference:
    an absolute URL, a site-relative path, or an image filename.
    """
    for cell in cells:
        value = normalize_picture(str(cell or ""))
        if not value:
            continue
        if _URL_RE.match(value) or value.startswith("/") or looks_like_image_file(value):
            return value
    return ""
