"""Image proxy: fetch a remote image and rehost it in the asset store."""

from __future__ import annotations

import ipaddress
import logging
from urllib.parse import urlparse

import httpx

from src.assets.storage import AssetRejected, AssetStore

logger = logging.getLogger(__name__)

_VALID_SCHEMES = {"http", "https"}
_MAX_REDIRECTS = 5


class ProxyFetchError(Exception):
    """The remote image could not be fetched."""


def _is_internal_host(hostname: str) -> bool:
    if hostname == "localhost" or hostname.endswith(".localhost"):
        return True
    try:
        address = ipaddress.ip_address(hostname)
    except ValueError:
        return False
    return not address.is_global or address.is_multicast


def validate_image_url(url: str) -> bool:
    """Check that *url* is safe to fetch on behalf of a client.

    Enforces:
    - http or https scheme
    - No embedded credentials (username/password)
    - Non-empty hostname
    - No loopback, private, link-local or reserved IP literals
    """
    parsed = urlparse(url)
    if parsed.scheme not in _VALID_SCHEMES:
        return False
    if parsed.username or parsed.password:
        return False
    hostname = parsed.hostname
    if not hostname:
        return False
    return not _is_internal_host(hostname.lower())


class ImageProxy:
    def __init__(self, client: httpx.AsyncClient, store: AssetStore, max_bytes: int) -> None:
        self._client = client
        self._store = store
        self._max_bytes = max_bytes

    async def rehost(self, url: str) -> str:
        """Download *url* and store it; returns the hosted URL.

        Raises ProxyFetchError on network/HTTP failure and AssetRejected when
        the body is not an acceptable image.
        """
        if url.startswith(self._store.url_prefix):
            return url
        try:
            body = await self._fetch(url)
        except httpx.HTTPError as exc:
            logger.warning("image fetch failed", extra={"url": url[:200]}, exc_info=True)
            raise ProxyFetchError(str(exc)) from exc
        logger.debug("image fetched", extra={"url": url[:200], "bytes": len(body)})
        return await self._store.save(bytes(body))

    async def _fetch(self, url: str) -> bytes:
        """GET *url*, re-validating every redirect target before following it."""
        for _ in range(_MAX_REDIRECTS + 1):
            if not validate_image_url(url):
                raise ProxyFetchError(f"refusing to fetch {url[:200]}")
            async with self._client.stream("GET", url, follow_redirects=False) as resp:
                if resp.is_redirect and resp.next_request is not None:
                    url = str(resp.next_request.url)
                    continue
                resp.raise_for_status()
                body = bytearray()
                async for chunk in resp.aiter_bytes():
                    body.extend(chunk)
                    if len(body) > self._max_bytes:
                        raise AssetRejected(f"image larger than {self._max_bytes} bytes", 413)
                return bytes(body)
        raise ProxyFetchError(f"too many redirects for {url[:200]}")
