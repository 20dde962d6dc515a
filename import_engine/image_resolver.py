"""
import_engine.image_resolver - Turn a picture cell into image bytes.

Handles data: URIs, remote URLs (with share-link rewriting), paths under
the public asset tree, bare filenames and raw base64.  A cell that cannot
be resolved yields None; the resolver never raises for bad input.
"""

from __future__ import annotations

import base64
import binascii
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence
from urllib.parse import urlparse

import requests

import config
from import_engine.picture_source import PictureKind, classify

logger = logging.getLogger(__name__)

MIME_EXTENSIONS = {
    "image/jpeg":    ".jpg",
    "image/jpg":     ".jpg",
    "image/png":     ".png",
    "image/webp":    ".webp",
    "image/gif":     ".gif",
    "image/svg+xml": ".svg",
    "image/avif":    ".avif",
}

_EXTENSION_MIMES = {
    ".jpg":  "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png":  "image/png",
    ".webp": "image/webp",
    ".gif":  "image/gif",
    ".svg":  "image/svg+xml",
    ".avif": "image/avif",
}

_DATA_URI_RE = re.compile(r"^data:([^;,]+);base64,(.+)$", re.DOTALL)
_DRIVE_FILE_RE = re.compile(r"^https?://drive\.google\.com/file/d/([^/]+)/", re.IGNORECASE)
_DRIVE_OPEN_RE = re.compile(r"^https?://drive\.google\.com/open\?id=([^&]+)", re.IGNORECASE)
_DROPBOX_RE = re.compile(r"^https?://www\.dropbox\.com/", re.IGNORECASE)


@dataclass
class ResolvedImage:
    kind: PictureKind
    data: bytes = b""
    content_type: str = ""
    extension: str = ""
    # Set when the cell value is to be stored as-is (no bytes to write)
    public_path: Optional[str] = None


def extension_for_mime(mime: str) -> str:
    return MIME_EXTENSIONS.get((mime or "").split(";")[0].strip().lower(), "")


def mime_for_extension(ext: str) -> str:
    return _EXTENSION_MIMES.get((ext or "").lower(), "application/octet-stream")


def sniff_image_type(data: bytes) -> Optional[tuple[str, str]]:
    """(mime, extension) from magic bytes, or None when not a known image."""
    if data[:3] == b"\xff\xd8\xff":
        return "image/jpeg", ".jpg"
    if data[:8] == b"\x89PNG\r\n\x1a\n":
        return "image/png", ".png"
    if data[:6] in (b"GIF87a", b"GIF89a"):
        return "image/gif", ".gif"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return "image/webp", ".webp"
    head = data[:200].decode("utf-8", errors="ignore").strip().lower()
    if head.startswith("<svg") or head.startswith("<?xml"):
        return "image/svg+xml", ".svg"
    return None


def direct_download_url(url: str) -> str:
    """Rewrite Dropbox / Google Drive share links to direct downloads."""
    url = url.strip()
    if _DROPBOX_RE.match(url):
        url = re.sub(r"\?dl=0$", "?dl=1", url, flags=re.IGNORECASE)
    m = _DRIVE_FILE_RE.match(url) or _DRIVE_OPEN_RE.match(url)
    if m:
        url = f"https://drive.google.com/uc?export=download&id={m.group(1)}"
    return url


class ImageResolver:
    """
    Resolves picture cells for one entity kind.

    stored_prefix is that kind's public upload prefix; cells already
    pointing there are passed through untouched so re-imports are cheap.
    """

    def __init__(
        self,
        stored_prefix: str,
        *,
        public_dir: Path | None = None,
        search_dirs: Sequence[Path] | None = None,
        timeout: float | None = None,
        keep_unresolved_public_paths: bool | None = None,
    ):
        self.stored_prefix = stored_prefix
        self.public_dir = Path(public_dir or config.PUBLIC_DIR).resolve()
        self.search_dirs = [Path(d) for d in (search_dirs or config.IMAGE_SEARCH_DIRS)]
        self.timeout = timeout if timeout is not None else config.FETCH_TIMEOUT
        self.keep_unresolved_public_paths = (
            config.KEEP_UNRESOLVED_PUBLIC_PATHS
            if keep_unresolved_public_paths is None
            else keep_unresolved_public_paths
        )

    def resolve(self, value: str) -> Optional[ResolvedImage]:
        value = (value or "").strip()
        kind = classify(value, self.stored_prefix)
        handler = {
            PictureKind.ALREADY_STORED: self._already_stored,
            PictureKind.DATA_URI:       self._from_data_uri,
            PictureKind.REMOTE_URL:     self._from_remote_url,
            PictureKind.PUBLIC_PATH:    self._from_public_path,
            PictureKind.BARE_FILENAME:  self._from_bare_filename,
            PictureKind.RAW_BASE64:     self._from_raw_base64,
        }.get(kind)
        if handler is None:
            return None
        return handler(value)

    # ── Per-kind handlers ──────────────────────────────────────────────

    @staticmethod
    def _already_stored(value: str) -> ResolvedImage:
        return ResolvedImage(PictureKind.ALREADY_STORED, public_path=value)

    @staticmethod
    def _from_data_uri(value: str) -> Optional[ResolvedImage]:
        m = _DATA_URI_RE.match(value)
        if not m:
            logger.warning("Malformed data URI (%.40s…)", value)
            return None
        mime = m.group(1).strip().lower()
        try:
            data = base64.b64decode(re.sub(r"\s+", "", m.group(2)))
        except (binascii.Error, ValueError) as exc:
            logger.warning("Undecodable data URI payload: %s", exc)
            return None
        if not data:
            return None
        ext = extension_for_mime(mime)
        if not ext:
            sniffed = sniff_image_type(data)
            ext = sniffed[1] if sniffed else ""
        return ResolvedImage(PictureKind.DATA_URI, data, mime, ext)

    def _from_remote_url(self, value: str) -> Optional[ResolvedImage]:
        url = direct_download_url(value)
        try:
            resp = requests.get(
                url,
                headers={"User-Agent": config.FETCH_USER_AGENT},
                timeout=self.timeout,
                allow_redirects=True,
            )
        except requests.RequestException as exc:
            logger.warning("Image download failed for %s: %s", url, exc)
            return None
        if not 200 <= resp.status_code < 300:
            logger.warning("Image download failed for %s: HTTP %s", url, resp.status_code)
            return None

        data = resp.content
        content_type = (resp.headers.get("Content-Type") or "").split(";")[0].strip().lower()
        ext = os.path.splitext(urlparse(url).path)[1].lower()
        if ext not in _EXTENSION_MIMES:
            ext = extension_for_mime(content_type)
        if not ext:
            sniffed = sniff_image_type(data)
            ext = sniffed[1] if sniffed else ""
        return ResolvedImage(PictureKind.REMOTE_URL, data, content_type, ext)

    def _from_public_path(self, value: str) -> Optional[ResolvedImage]:
        target = self._inside_public_dir(value.lstrip("/\\"))
        if target is not None and _is_file(target):
            return self._read_local(PictureKind.PUBLIC_PATH, target)

        if self.keep_unresolved_public_paths and value.startswith("/"):
            logger.warning("Picture %s not found under %s; keeping the path",
                           value, self.public_dir)
            return ResolvedImage(PictureKind.PUBLIC_PATH, public_path=value)
        logger.warning("Picture %s not found under %s", value, self.public_dir)
        return None

    def _from_bare_filename(self, value: str) -> Optional[ResolvedImage]:
        for directory in self.search_dirs:
            candidate = directory / value
            if _is_file(candidate):
                return self._read_local(PictureKind.BARE_FILENAME, candidate)
        logger.warning("Picture file %s not found in %s", value,
                       ", ".join(str(d) for d in self.search_dirs))
        return None

    @staticmethod
    def _from_raw_base64(value: str) -> Optional[ResolvedImage]:
        try:
            data = base64.b64decode(re.sub(r"\s+", "", value))
        except (binascii.Error, ValueError):
            logger.debug("Cell looked like base64 but did not decode")
            return None
        sniffed = sniff_image_type(data)
        if not sniffed:
            logger.warning("Base64 picture is not a recognised image format")
            return None
        mime, ext = sniffed
        return ResolvedImage(PictureKind.RAW_BASE64, data, mime, ext)

    # ── Private helpers ────────────────────────────────────────────────

    def _inside_public_dir(self, relative: str) -> Optional[Path]:
        try:
            target = (self.public_dir / relative).resolve()
        except (OSError, ValueError) as exc:
            logger.warning("Unusable picture path %r: %s", relative, exc)
            return None
        # Must stay inside the public tree
        if target != self.public_dir and self.public_dir not in target.parents:
            logger.warning("Refusing picture path outside public dir: %s", relative)
            return None
        return target

    @staticmethod
    def _read_local(kind: PictureKind, path: Path) -> Optional[ResolvedImage]:
        try:
            data = path.read_bytes()
        except (OSError, ValueError) as exc:
            logger.warning("Cannot read picture %s: %s", path, exc)
            return None
        ext = path.suffix.lower()
        return ResolvedImage(kind, data, mime_for_extension(ext), ext)


def _is_file(path: Path) -> bool:
    # NUL bytes and over-long names raise instead of answering False
    try:
        return path.is_file()
    except (OSError, ValueError):
        return False
