"""Async HTTP client for the backend JSON API."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from src.config import ClientSettings, get_client_settings
from src.errors import PageExpired, PageNotFound, TransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CreatedPage:
    id: str
    url: str


@dataclass(frozen=True)
class FetchedPage:
    html: str
    remaining_seconds: int


class BackendClient:
    """Thin async wrapper around the backend's JSON API.

    Any non-success response is raised as :class:`TransportError`, except the
    page lookup statuses 404 and 410, which map to :class:`PageNotFound` and
    :class:`PageExpired`.
    """

    def __init__(self, client: httpx.AsyncClient, base_url: str) -> None:
        self._client = client
        self.base_url = base_url.rstrip("/")

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        try:
            return await self._client.request(method, f"{self.base_url}{path}", **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("backend request failed", extra={"method": method, "path": path}, exc_info=True)
            raise TransportError(f"{method} {path} failed: {exc}") from exc

    @staticmethod
    def _json_or_raise(resp: httpx.Response, action: str, *keys: str) -> dict:
        """Decode a success body and require *keys* in it."""
        if not resp.is_success:
            raise TransportError(f"{action} failed with status {resp.status_code}")
        try:
            data = resp.json()
        except ValueError as exc:
            raise TransportError(f"{action} returned invalid JSON") from exc
        if not isinstance(data, dict) or any(key not in data for key in keys):
            raise TransportError(f"{action} returned an unexpected body")
        return data

    async def upload(self, data: bytes, filename: str, mime_type: str) -> str:
        """Upload one file and return its hosted URL."""
        resp = await self._request(
            "POST",
            "/api/upload",
            files={"file": (filename, data, mime_type)},
        )
        return self._json_or_raise(resp, "upload", "url")["url"]

    async def proxy_image(self, url: str) -> str:
        """Ask the backend to fetch and rehost a remote image."""
        resp = await self._request("GET", "/api/proxy-image", params={"url": url})
        return self._json_or_raise(resp, "proxy", "url")["url"]

    async def create_page(self, html: str, ttl_seconds: int, assets: list[str]) -> CreatedPage:
        resp = await self._request(
            "POST",
            "/api/pages",
            json={"html": html, "ttl_seconds": ttl_seconds, "assets": assets},
        )
        data = self._json_or_raise(resp, "create page", "id", "url")
        return CreatedPage(id=data["id"], url=data["url"])

    async def get_page(self, page_id: str) -> FetchedPage:
        resp = await self._request("GET", f"/api/pages/{page_id}")
        if resp.status_code == 404:
            raise PageNotFound(page_id)
        if resp.status_code == 410:
            raise PageExpired(page_id)
        data = self._json_or_raise(resp, "get page", "html", "remaining_seconds")
        return FetchedPage(html=data["html"], remaining_seconds=data["remaining_seconds"])


def create_backend_client(settings: ClientSettings | None = None) -> BackendClient:
    """Build a client from settings (environment by default).

    The caller owns and closes the underlying httpx client.
    """
    if settings is None:
        settings = get_client_settings()
    client = httpx.AsyncClient(timeout=settings.request_timeout_seconds)
    return BackendClient(client, settings.backend_url)
