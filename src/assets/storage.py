"""Stores uploaded image bytes under the asset dir."""

from __future__ import annotations

import asyncio
import logging
import uuid
from pathlib import Path

from filetype import guess

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = {"png", "jpg", "gif", "webp", "bmp", "tif", "ico", "avif", "heic"}


class AssetRejected(Exception):
    """Uploaded bytes are not an acceptable image."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


def detect_image_format(data: bytes) -> str | None:
    """Detect image type from the file signature; returns a lowercase extension."""
    kind = guess(data)
    if kind and kind.mime.startswith("image/"):
        ext = kind.extension.lower()
        if ext == "jpeg":
            return "jpg"
        return ext
    return None


class AssetStore:
    """Stores images on local disk and hands out URLs under ``/assets/``."""

    def __init__(self, root: Path, public_base_url: str, max_bytes: int) -> None:
        self._root = root
        self._base_url = public_base_url.rstrip("/")
        self._max_bytes = max_bytes

    @property
    def url_prefix(self) -> str:
        return f"{self._base_url}/assets/"

    def validate(self, data: bytes) -> str:
        """Return the detected extension or raise AssetRejected."""
        if not data:
            raise AssetRejected("empty file", 415)
        if len(data) > self._max_bytes:
            raise AssetRejected(f"image larger than {self._max_bytes} bytes", 413)
        ext = detect_image_format(data)
        if ext is None or ext not in ALLOWED_IMAGE_TYPES:
            raise AssetRejected("unsupported image type", 415)
        return ext

    async def save(self, data: bytes) -> str:
        """Persist *data* and return its public URL."""
        ext = self.validate(data)
        filename = f"{uuid.uuid4().hex}.{ext}"
        destination = self._root / filename
        await asyncio.to_thread(self._write, destination, data)
        logger.info("asset stored", extra={"asset": filename, "bytes": len(data)})
        return f"{self.url_prefix}{filename}"

    def _write(self, destination: Path, data: bytes) -> None:
        self._root.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(data)
