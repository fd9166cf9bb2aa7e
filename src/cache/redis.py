"""Redis page store — get/set page records with a reclamation TTL."""

from __future__ import annotations

import logging

import redis.asyncio as redis
from redis.backoff import ExponentialBackoff
from redis.retry import Retry

from src.api.schemas import PageRecord
from src.errors import StoreUnavailable

logger = logging.getLogger(__name__)

KEY_PREFIX = "page:"


class PageCache:
    """Thin async wrapper around Redis for storing page records.

    Keys carry their own TTL so Redis reclaims storage; expiry as seen by
    readers is decided from ``expires_at`` in the record, not from the key.
    """

    def __init__(self, client: redis.Redis, retention_seconds: int = 86400) -> None:
        self._client = client
        self._retention_seconds = retention_seconds

    async def get(self, page_id: str) -> PageRecord | None:
        """Return the stored record, or ``None`` if the key is absent."""
        try:
            raw = await self._client.get(f"{KEY_PREFIX}{page_id}")
        except redis.RedisError as exc:
            logger.warning("page get failed", extra={"page_id": page_id}, exc_info=True)
            raise StoreUnavailable(str(exc)) from exc
        if raw is None:
            logger.debug("page miss", extra={"page_id": page_id})
            return None
        logger.debug("page hit", extra={"page_id": page_id})
        return PageRecord.model_validate_json(raw)

    async def add(self, record: PageRecord) -> bool:
        """Store *record* unless the id is taken. Returns ``False`` on collision."""
        ttl = record.ttl_seconds + self._retention_seconds
        try:
            created = await self._client.set(
                f"{KEY_PREFIX}{record.id}",
                record.model_dump_json(),
                ex=ttl,
                nx=True,
            )
        except redis.RedisError as exc:
            logger.warning("page set failed", extra={"page_id": record.id}, exc_info=True)
            raise StoreUnavailable(str(exc)) from exc
        logger.debug("page set", extra={"page_id": record.id, "key_ttl": ttl, "stored": bool(created)})
        return bool(created)


async def create_redis_client(redis_url: str) -> redis.Redis:
    # Strip credentials for logging (everything before @ if present)
    safe_url = redis_url.split("@")[-1] if "@" in redis_url else redis_url
    logger.info("connecting to redis", extra={"redis_url": safe_url})
    retry = Retry(ExponentialBackoff(), retries=3)
    return redis.from_url(
        redis_url,
        decode_responses=True,
        socket_connect_timeout=5,
        socket_timeout=5,
        health_check_interval=30,
        retry=retry,
        retry_on_error=[redis.ConnectionError, redis.TimeoutError],
    )
