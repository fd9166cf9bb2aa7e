"""FastAPI app entrypoint."""

import logging
from contextlib import asynccontextmanager
from pathlib import Path

import httpx
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from src.api.routes import router
from src.assets.proxy import ImageProxy
from src.assets.storage import AssetStore
from src.cache.redis import PageCache, create_redis_client
from src.config import get_settings
from src.logging_config import setup_logging
from src.pages.lifecycle import PageLifecycle

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()

    # Initialize logging FIRST so all subsequent operations produce JSON logs
    setup_logging(settings.log_level)
    logger.info("starting paste share service")

    asset_dir = Path(settings.asset_dir)
    asset_dir.mkdir(parents=True, exist_ok=True)

    redis_client = await create_redis_client(settings.redis_url)
    cache = PageCache(redis_client, retention_seconds=settings.expired_retention_seconds)
    http_client = httpx.AsyncClient(timeout=settings.proxy_timeout_seconds)
    asset_store = AssetStore(asset_dir, settings.public_base_url, settings.max_upload_bytes)

    # Attach to app state for dependency injection
    app.state.settings = settings
    app.state.lifecycle = PageLifecycle(cache, max_ttl_seconds=settings.max_ttl_seconds)
    app.state.asset_store = asset_store
    app.state.image_proxy = ImageProxy(http_client, asset_store, settings.max_upload_bytes)

    logger.info(
        "paste share service ready",
        extra={
            "public_base_url": settings.public_base_url,
            "asset_dir": str(asset_dir),
            "max_ttl_seconds": settings.max_ttl_seconds,
        },
    )

    yield

    # Cleanup
    logger.info("shutting down paste share service")
    await http_client.aclose()
    await redis_client.aclose()


app = FastAPI(title="Paste Share", lifespan=lifespan)
app.include_router(router)
app.mount(
    "/assets",
    StaticFiles(directory=get_settings().asset_dir, check_dir=False),
    name="assets",
)


@app.get("/health")
async def health():
    return {"status": "ok"}
