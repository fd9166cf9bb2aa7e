"""Image relocation — turns inline bytes or remote URLs into hosted URLs."""

from __future__ import annotations

import base64
import binascii
import logging
import mimetypes
from dataclasses import dataclass
from typing import Protocol
from urllib.parse import unquote_to_bytes

from src.errors import RelocationFailure, RelocationReason, TransportError

logger = logging.getLogger(__name__)

DEFAULT_IMAGE_MIME = "image/png"


@dataclass(frozen=True)
class InlineData:
    data: bytes
    mime_type: str = DEFAULT_IMAGE_MIME


@dataclass(frozen=True)
class RemoteUrl:
    url: str


@dataclass(frozen=True)
class UnsupportedSource:
    """A source with no retrievable bytes, e.g. a ``blob:`` handle."""

    reference: str


ImageSource = InlineData | RemoteUrl | UnsupportedSource


class AssetHost(Protocol):
    """Upload and proxy capabilities used for relocation."""

    async def upload(self, data: bytes, filename: str, mime_type: str) -> str: ...

    async def proxy_image(self, url: str) -> str: ...


def decode_data_uri(uri: str) -> InlineData:
    """Decode a ``data:`` URI into its bytes and declared mime type.

    Raises :class:`RelocationFailure` (unsupported) for malformed URIs.
    """
    if not uri.startswith("data:") or "," not in uri:
        raise RelocationFailure(RelocationReason.UNSUPPORTED, "malformed data URI")
    header, _, payload = uri[len("data:"):].partition(",")
    params = header.split(";")
    mime_type = params[0].strip().lower() or DEFAULT_IMAGE_MIME
    try:
        if "base64" in (p.strip().lower() for p in params[1:]):
            data = base64.b64decode("".join(payload.split()), validate=True)
        else:
            data = unquote_to_bytes(payload)
    except (binascii.Error, ValueError) as exc:
        raise RelocationFailure(RelocationReason.UNSUPPORTED, "undecodable data URI") from exc
    return InlineData(data=data, mime_type=mime_type)


def upload_filename(mime_type: str) -> str:
    ext = mimetypes.guess_extension(mime_type) or ".png"
    if ext in (".jpe", ".jpeg"):
        ext = ".jpg"
    return f"pasted{ext}"


class AssetRelocator:
    """Rehosts image sources through an :class:`AssetHost`.

    Never touches the content tree; callers decide what to do with the URL.
    """

    def __init__(self, host: AssetHost) -> None:
        self._host = host

    async def relocate(self, source: ImageSource) -> str:
        if isinstance(source, InlineData):
            mime_type = source.mime_type or DEFAULT_IMAGE_MIME
            try:
                return await self._host.upload(source.data, upload_filename(mime_type), mime_type)
            except TransportError as exc:
                raise RelocationFailure(RelocationReason.TRANSPORT, str(exc)) from exc
        if isinstance(source, RemoteUrl):
            try:
                return await self._host.proxy_image(source.url)
            except TransportError as exc:
                raise RelocationFailure(RelocationReason.TRANSPORT, str(exc)) from exc
        raise RelocationFailure(RelocationReason.UNSUPPORTED, getattr(source, "reference", repr(source)))
