"""Editor-facing paste, publish and load operations."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from src.client.backend import BackendClient
from src.errors import ValidationError
from src.paste.builder import AssetRecord, build_fragment
from src.paste.caret import EditableDocument, insert_fragment
from src.paste.clipboard import ClipboardPayload, parse_clipboard
from src.paste.relocator import AssetRelocator

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 600


@dataclass(frozen=True)
class LoadedPage:
    html: str
    remaining_seconds: int


class PasteSession:
    """Holds one editable document and the assets relocated into it.

    Every call to :meth:`process_paste` is an independent run; concurrent
    runs are not serialized and each inserts at the caret it finds when its
    relocations have settled.
    """

    def __init__(
        self,
        backend: BackendClient,
        document: EditableDocument | None = None,
        hosted_prefixes: tuple[str, ...] | None = None,
    ) -> None:
        self._backend = backend
        self._relocator = AssetRelocator(backend)
        self.document = document if document is not None else EditableDocument()
        self.assets: list[AssetRecord] = []
        if hosted_prefixes is None:
            hosted_prefixes = (f"{backend.base_url}/assets/",)
        self._hosted_prefixes = hosted_prefixes

    async def process_paste(self, payload: ClipboardPayload) -> list[AssetRecord]:
        """Parse, relocate and insert one clipboard payload.

        Returns the asset records of this run (completion order).
        """
        parsed = parse_clipboard(payload, self._hosted_prefixes)
        if parsed.is_empty:
            logger.debug("empty clipboard payload, nothing to insert")
            return []
        result = await build_fragment(parsed, self._relocator)
        if result.fragment:
            insert_fragment(self.document, result.fragment)
        self.assets.extend(result.assets)
        return result.assets

    async def publish(self, ttl_seconds: int = DEFAULT_TTL_SECONDS) -> str:
        """Create a page from the current document; returns its shareable URL."""
        html = self.document.to_html()
        if not html.strip():
            raise ValidationError("document is empty")
        created = await self._backend.create_page(
            html,
            ttl_seconds,
            [asset.url for asset in self.assets],
        )
        share_url = f"{self._backend.base_url}{created.url}"
        logger.info("page published", extra={"page_id": created.id, "ttl_seconds": ttl_seconds})
        return share_url

    async def load_page(self, page_id: str) -> LoadedPage:
        """Fetch a published page; raises PageNotFound / PageExpired."""
        page = await self._backend.get_page(page_id)
        return LoadedPage(html=page.html, remaining_seconds=page.remaining_seconds)
