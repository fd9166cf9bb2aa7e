"""Builds a paste fragment, relocating its images concurrently."""

from __future__ import annotations

import asyncio
import hashlib
import logging
from dataclasses import dataclass, field

from src.errors import RelocationFailure
from src.paste.clipboard import ImageKind, ImageRef, ParsedClipboard
from src.paste.content import ContentFragment, Element
from src.paste.relocator import AssetRelocator, ImageSource, InlineData, RemoteUrl, UnsupportedSource, decode_data_uri

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssetRecord:
    url: str


@dataclass
class BuildResult:
    fragment: ContentFragment | None
    assets: list[AssetRecord] = field(default_factory=list)


def _source_for(ref: ImageRef) -> ImageSource:
    if ref.kind is ImageKind.INLINE:
        return decode_data_uri(ref.original_source)
    if ref.kind is ImageKind.REMOTE:
        return RemoteUrl(ref.original_source)
    return UnsupportedSource(ref.original_source)


def _digest(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


async def build_fragment(parsed: ParsedClipboard, relocator: AssetRelocator) -> BuildResult:
    """Relocate every image of a parsed paste and assemble the fragment.

    All relocations run concurrently and each one settles on its own: a
    failure keeps the original ``src`` (or drops the file image) and is only
    logged. ``assets`` lists successful URLs in completion order.
    """
    assets: list[AssetRecord] = []

    def log_failure(ref: ImageRef, exc: RelocationFailure) -> None:
        logger.warning(
            "image relocation failed, keeping original source",
            extra={"kind": ref.kind.value, "reason": exc.reason.value, "source": ref.original_source[:100]},
        )

    async def relocate_ref(ref: ImageRef, source: ImageSource) -> None:
        try:
            url = await relocator.relocate(source)
        except RelocationFailure as exc:
            log_failure(ref, exc)
            return
        node = ref.node()
        if node is None:
            logger.debug("image node gone before relocation settled", extra={"url": url})
        else:
            node.attributes["src"] = url
        assets.append(AssetRecord(url=url))

    async def relocate_file(image: InlineData) -> str | None:
        try:
            url = await relocator.relocate(image)
        except RelocationFailure as exc:
            logger.warning(
                "file image relocation failed, dropping it",
                extra={"reason": exc.reason.value, "mime_type": image.mime_type},
            )
            return None
        assets.append(AssetRecord(url=url))
        return url

    targets: list[tuple[ImageRef, ImageSource]] = []
    for ref in parsed.pending_images:
        try:
            targets.append((ref, _source_for(ref)))
        except RelocationFailure as exc:
            log_failure(ref, exc)

    inline_digests = {
        _digest(source.data) for _, source in targets if isinstance(source, InlineData)
    }
    file_images = [
        image for image in parsed.file_images
        if _digest(image.data) not in inline_digests
    ]
    skipped = len(parsed.file_images) - len(file_images)
    if skipped:
        logger.debug("file images already present inline", extra={"skipped": skipped})

    results = await asyncio.gather(
        *(relocate_ref(ref, source) for ref, source in targets),
        *(relocate_file(image) for image in file_images),
    )
    file_urls: list[str | None] = results[len(targets):]

    fragment = parsed.tree or None
    for url in file_urls:
        if url is None:
            continue
        if fragment is None:
            fragment = []
        fragment.append(Element("img", {"src": url, "style": "max-width:100%"}))

    logger.info(
        "fragment built",
        extra={
            "pending_images": len(parsed.pending_images),
            "file_images": len(file_images),
            "relocated": len(assets),
        },
    )
    return BuildResult(fragment=fragment, assets=assets)
