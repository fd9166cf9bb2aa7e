"""Fixtures — fake clock, fake asset host, Redis-backed page store, test app."""

import asyncio
from datetime import datetime, timedelta, timezone

import httpx
import pytest
import pytest_asyncio
from fakeredis.aioredis import FakeRedis
from fastapi import FastAPI

from src.api.routes import router
from src.assets.proxy import ImageProxy
from src.assets.storage import AssetStore
from src.cache.redis import PageCache
from src.config import Settings
from src.errors import TransportError
from src.pages.lifecycle import PageLifecycle

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64
GIF_BYTES = b"GIF89a" + b"\x00" * 64
BASE_URL = "http://testserver"
DEFAULT_TTL_SECONDS = 900


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeAssetHost:
    """In-memory upload/proxy capabilities with scripted failures and delays."""

    def __init__(self, fail=(), delays=None, on_call=None) -> None:
        self.fail = set(fail)
        self.delays = delays or {}
        self.on_call = on_call
        self.uploads: list[tuple[bytes, str, str]] = []
        self.proxied: list[str] = []

    async def _settle(self, key):
        if self.on_call is not None:
            self.on_call(key)
        await asyncio.sleep(self.delays.get(key, 0))
        if key in self.fail:
            raise TransportError(f"failed: {key!r}")

    async def upload(self, data: bytes, filename: str, mime_type: str) -> str:
        self.uploads.append((data, filename, mime_type))
        await self._settle(data)
        return f"https://cdn.test/assets/{data.decode(errors='replace')}"

    async def proxy_image(self, url: str) -> str:
        self.proxied.append(url)
        await self._settle(url)
        return f"https://cdn.test/assets/proxied-{len(self.proxied)}"


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc))


@pytest_asyncio.fixture
async def page_cache():
    """PageCache backed by an in-memory FakeRedis instance."""
    client = FakeRedis(decode_responses=True)
    cache = PageCache(client, retention_seconds=3600)
    yield cache
    await client.aclose()


@pytest.fixture
def lifecycle(page_cache: PageCache, clock: FakeClock) -> PageLifecycle:
    return PageLifecycle(page_cache, max_ttl_seconds=86400, clock=clock)


def _upstream(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/cat.png":
        return httpx.Response(200, content=PNG_BYTES, headers={"Content-Type": "image/png"})
    if request.url.path == "/hop.png":
        return httpx.Response(302, headers={"Location": "https://images.test/cat.png"})
    if request.url.path == "/sneaky.png":
        return httpx.Response(302, headers={"Location": "http://127.0.0.1/admin.png"})
    if request.url.path == "/page.html":
        return httpx.Response(200, text="<html>not an image</html>")
    return httpx.Response(404)


@pytest_asyncio.fixture
async def app(lifecycle: PageLifecycle, tmp_path) -> FastAPI:
    app = FastAPI()
    app.include_router(router)
    upstream = httpx.AsyncClient(transport=httpx.MockTransport(_upstream))
    store = AssetStore(tmp_path / "assets", BASE_URL, max_bytes=1024)
    app.state.settings = Settings(default_ttl_seconds=DEFAULT_TTL_SECONDS)
    app.state.lifecycle = lifecycle
    app.state.asset_store = store
    app.state.image_proxy = ImageProxy(upstream, store, max_bytes=1024)
    yield app
    await upstream.aclose()


@pytest_asyncio.fixture
async def http(app: FastAPI):
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url=BASE_URL) as client:
        yield client
