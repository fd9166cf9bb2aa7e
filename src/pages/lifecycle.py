"""Page lifecycle — create pages with a TTL and read them until they expire."""

from __future__ import annotations

import logging
import math
import uuid
from datetime import datetime, timedelta, timezone
from typing import Callable

from src.api.schemas import PageRecord
from src.cache.redis import PageCache
from src.errors import PageExpired, PageNotFound, StoreUnavailable, ValidationError
from src.paste.content import sanitize_html

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]

_MAX_ID_ATTEMPTS = 3


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _generate_page_id() -> str:
    return uuid.uuid4().hex[:12]


def remaining_seconds(record: PageRecord, now: datetime) -> int:
    return max(0, math.floor((record.expires_at - now).total_seconds()))


class PageLifecycle:
    """Active until ``expires_at``, then Expired for good.

    Expiry is evaluated lazily on every read; nothing is evicted actively.
    """

    def __init__(
        self,
        cache: PageCache,
        max_ttl_seconds: int,
        clock: Clock = _utcnow,
        id_factory: Callable[[], str] = _generate_page_id,
    ) -> None:
        self._cache = cache
        self._max_ttl_seconds = max_ttl_seconds
        self._clock = clock
        self._id_factory = id_factory

    async def create(self, html: str, ttl_seconds: int, assets: list[str] | None = None) -> PageRecord:
        """Persist a new page. Raises ValidationError for empty content or bad TTL."""
        if not html.strip():
            raise ValidationError("html must not be empty")
        if ttl_seconds <= 0 or ttl_seconds > self._max_ttl_seconds:
            raise ValidationError(f"ttl_seconds must be between 1 and {self._max_ttl_seconds}")
        content = sanitize_html(html)
        if not content.strip():
            raise ValidationError("html has no content after sanitizing")

        now = self._clock()
        for _ in range(_MAX_ID_ATTEMPTS):
            record = PageRecord(
                id=self._id_factory(),
                html=content,
                assets=list(assets or []),
                created_at=now,
                ttl_seconds=ttl_seconds,
                expires_at=now + timedelta(seconds=ttl_seconds),
            )
            if await self._cache.add(record):
                logger.info(
                    "page created",
                    extra={"page_id": record.id, "ttl_seconds": ttl_seconds, "assets": len(record.assets)},
                )
                return record
            logger.warning("page id collision, retrying", extra={"page_id": record.id})
        raise StoreUnavailable("could not allocate a page id")

    async def get(self, page_id: str) -> tuple[PageRecord, int]:
        """Return ``(record, remaining_seconds)``; raises PageNotFound / PageExpired."""
        record = await self._cache.get(page_id)
        if record is None:
            raise PageNotFound(page_id)
        now = self._clock()
        if now > record.expires_at:
            logger.debug("page expired", extra={"page_id": page_id})
            raise PageExpired(page_id)
        return record, remaining_seconds(record, now)
