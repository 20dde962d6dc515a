"""
import_engine.asset_store - Write resolved images under the public tree.

Every call writes a new file; identical images stored twice produce two
files.  Files are never removed by the import pipeline.
"""

from __future__ import annotations

import io
import logging
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

import config
from import_engine.image_resolver import (
    ResolvedImage, extension_for_mime, sniff_image_type,
)

logger = logging.getLogger(__name__)


@dataclass
class StoredAsset:
    public_path: str
    content_type: str = ""
    size_bytes: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None


class AssetStore:
    """One store per entity kind, e.g. AssetStore.for_kind("products")."""

    def __init__(self, root_dir: Path, public_prefix: str):
        self.root_dir = Path(root_dir)
        self.public_prefix = public_prefix.rstrip("/") + "/"

    @classmethod
    def for_kind(cls, kind: str, public_dir: Path | None = None) -> "AssetStore":
        public_dir = Path(public_dir or config.PUBLIC_DIR)
        prefix = f"{config.UPLOADS_URL_PREFIX}/{kind}"
        return cls(public_dir / prefix.lstrip("/"), prefix)

    def store(self, image: ResolvedImage) -> StoredAsset:
        """Persist image bytes and return the public reference."""
        if image.public_path:
            return StoredAsset(public_path=image.public_path,
                               content_type=image.content_type)

        content_type = image.content_type
        ext = image.extension or extension_for_mime(content_type)
        if not ext or not content_type or content_type == "application/octet-stream":
            sniffed = sniff_image_type(image.data)
            if sniffed:
                content_type = content_type if content_type.startswith("image/") else sniffed[0]
                ext = ext or sniffed[1]
        ext = ext or ".bin"

        self.root_dir.mkdir(parents=True, exist_ok=True)
        name = f"{secrets.token_hex(8)}_{int(time.time() * 1000)}{ext.lower()}"
        (self.root_dir / name).write_bytes(image.data)

        width, height = _dimensions(image.data)
        asset = StoredAsset(
            public_path=self.public_prefix + name,
            content_type=content_type or "application/octet-stream",
            size_bytes=len(image.data),
            width=width,
            height=height,
        )
        logger.debug("Stored %s (%d bytes)", asset.public_path, asset.size_bytes)
        return asset


def _dimensions(data: bytes) -> tuple[Optional[int], Optional[int]]:
    # Pillow cannot read SVG (and some AVIF builds); those keep no size.
    try:
        with Image.open(io.BytesIO(data)) as img:
            return img.size
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError):
        return None, None
