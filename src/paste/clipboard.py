"""Parse clipboard payloads: HTML, plain text and image file attachments."""

from __future__ import annotations

import logging
import re
import weakref
from dataclasses import dataclass, field
from enum import Enum

from src.paste.content import ContentFragment, Element, find_images, parse_html, text_to_fragment
from src.paste.relocator import InlineData

logger = logging.getLogger(__name__)

_REMOTE_RE = re.compile(r"^https?://", re.IGNORECASE)


@dataclass(frozen=True)
class ClipboardItem:
    """One entry of the clipboard's item list."""

    kind: str  # "file" or "string"
    mime_type: str
    data: bytes | None = None
    name: str = ""


@dataclass(frozen=True)
class ClipboardPayload:
    html: str = ""
    text: str = ""
    items: tuple[ClipboardItem, ...] = ()


class ImageKind(str, Enum):
    INLINE = "inline"
    REMOTE = "remote"
    UNRESOLVED = "unresolved"


@dataclass
class ImageRef:
    node: weakref.ref[Element]
    original_source: str
    kind: ImageKind


@dataclass
class ParsedClipboard:
    tree: ContentFragment | None = None
    pending_images: list[ImageRef] = field(default_factory=list)
    file_images: list[InlineData] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.tree is None and not self.file_images


def classify_source(src: str, hosted_prefixes: tuple[str, ...] = ()) -> ImageKind | None:
    """Return how an image source must be relocated, or ``None`` to leave it."""
    if src.startswith("data:"):
        return ImageKind.INLINE
    if src.startswith("blob:"):
        return ImageKind.UNRESOLVED
    if _REMOTE_RE.match(src):
        if hosted_prefixes and src.startswith(hosted_prefixes):
            return None
        return ImageKind.REMOTE
    return None


def collect_image_refs(tree: ContentFragment, hosted_prefixes: tuple[str, ...] = ()) -> list[ImageRef]:
    """Snapshot every ``img`` that needs relocation, in document order."""
    refs: list[ImageRef] = []
    for img in find_images(tree):
        src = img.attributes.get("src", "")
        kind = classify_source(src, hosted_prefixes)
        if kind is not None:
            refs.append(ImageRef(node=weakref.ref(img), original_source=src, kind=kind))
    return refs


def _file_images(items: tuple[ClipboardItem, ...]) -> list[InlineData]:
    images: list[InlineData] = []
    for item in items:
        if item.kind != "file" or not item.mime_type.startswith("image/"):
            continue
        if item.data is None:
            logger.debug("clipboard file has no bytes, skipping", extra={"mime_type": item.mime_type})
            continue
        images.append(InlineData(data=item.data, mime_type=item.mime_type))
    return images


def parse_clipboard(payload: ClipboardPayload, hosted_prefixes: tuple[str, ...] = ()) -> ParsedClipboard:
    """Decode the payload into a provisional tree plus the images to relocate.

    HTML wins over plain text. File attachments are collected independently
    of either, preserving clipboard order.
    """
    parsed = ParsedClipboard(file_images=_file_images(payload.items))
    if payload.html:
        parsed.tree = parse_html(payload.html)
        parsed.pending_images = collect_image_refs(parsed.tree, hosted_prefixes)
    elif payload.text:
        parsed.tree = text_to_fragment(payload.text)

    logger.debug(
        "clipboard parsed",
        extra={
            "has_html": bool(payload.html),
            "has_text": bool(payload.text),
            "pending_images": len(parsed.pending_images),
            "file_images": len(parsed.file_images),
        },
    )
    return parsed
