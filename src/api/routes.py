"""Upload, image proxy, page create/get and standalone page viewer handlers."""

from __future__ import annotations

import html
import logging

from fastapi import APIRouter, Depends, File, HTTPException, Query, Request, UploadFile, status
from fastapi.responses import HTMLResponse

from src.api.schemas import AssetResponse, CreatePageRequest, CreatePageResponse, PageResponse
from src.assets.proxy import ImageProxy, ProxyFetchError, validate_image_url
from src.assets.storage import AssetRejected, AssetStore
from src.config import Settings
from src.errors import PageExpired, PageNotFound, StoreUnavailable, ValidationError
from src.pages.lifecycle import PageLifecycle

logger = logging.getLogger(__name__)

router = APIRouter()

_VIEWER_TEMPLATE = """<!doctype html>
<html>
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{title}</title>
</head>
<body>
{body}
</body>
</html>
"""


def _get_settings(request: Request) -> Settings:
    return request.app.state.settings


def _get_lifecycle(request: Request) -> PageLifecycle:
    return request.app.state.lifecycle


def _get_asset_store(request: Request) -> AssetStore:
    return request.app.state.asset_store


def _get_image_proxy(request: Request) -> ImageProxy:
    return request.app.state.image_proxy


@router.post("/api/upload", response_model=AssetResponse)
async def upload_asset(
    file: UploadFile = File(...),
    store: AssetStore = Depends(_get_asset_store),
):
    data = await file.read()
    try:
        url = await store.save(data)
    except AssetRejected as exc:
        logger.info("upload rejected", extra={"upload_name": file.filename, "reason": str(exc)})
        raise HTTPException(status_code=exc.status_code, detail=str(exc))
    return AssetResponse(url=url)


@router.get("/api/proxy-image", response_model=AssetResponse)
async def proxy_image(
    url: str = Query(...),
    proxy: ImageProxy = Depends(_get_image_proxy),
):
    if not validate_image_url(url):
        raise HTTPException(status_code=422, detail="url must be an absolute http(s) URL")
    try:
        hosted = await proxy.rehost(url)
    except AssetRejected as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc))
    except ProxyFetchError:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Could not fetch image")
    return AssetResponse(url=hosted)


@router.post("/api/pages", status_code=status.HTTP_201_CREATED, response_model=CreatePageResponse)
async def create_page(
    body: CreatePageRequest,
    lifecycle: PageLifecycle = Depends(_get_lifecycle),
    settings: Settings = Depends(_get_settings),
):
    ttl_seconds = body.ttl_seconds if body.ttl_seconds is not None else settings.default_ttl_seconds
    try:
        record = await lifecycle.create(body.html, ttl_seconds, body.assets)
    except ValidationError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    except StoreUnavailable:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Page store unavailable")
    return CreatePageResponse(id=record.id, url=f"/p/{record.id}", expires_at=record.expires_at)


@router.get("/api/pages/{page_id}", response_model=PageResponse)
async def get_page(
    page_id: str,
    lifecycle: PageLifecycle = Depends(_get_lifecycle),
):
    try:
        record, remaining = await lifecycle.get(page_id)
    except PageNotFound:
        raise HTTPException(status_code=404, detail="Not found")
    except PageExpired:
        raise HTTPException(status_code=410, detail="Expired")
    except StoreUnavailable:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Page store unavailable")
    return PageResponse(html=record.html, remaining_seconds=remaining)


@router.get("/p/{page_id}", response_class=HTMLResponse)
async def view_page(
    page_id: str,
    lifecycle: PageLifecycle = Depends(_get_lifecycle),
):
    """Render a page on its own, without any client application."""
    try:
        record, _ = await lifecycle.get(page_id)
    except PageNotFound:
        return _message_page("Not found", 404)
    except PageExpired:
        return _message_page("Expired", 410)
    except StoreUnavailable:
        return _message_page("Temporarily unavailable", 503)
    return HTMLResponse(_VIEWER_TEMPLATE.format(title="Shared page", body=record.html))


def _message_page(message: str, status_code: int) -> HTMLResponse:
    escaped = html.escape(message)
    return HTMLResponse(
        _VIEWER_TEMPLATE.format(title=escaped, body=f"<p>{escaped}</p>"),
        status_code=status_code,
    )
