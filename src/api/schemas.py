"""Request/response Pydantic models."""

from datetime import datetime

from pydantic import BaseModel, Field


class CreatePageRequest(BaseModel):
    html: str
    ttl_seconds: int | None = Field(default=None, gt=0)
    assets: list[str] = []


class CreatePageResponse(BaseModel):
    id: str
    url: str
    expires_at: datetime


class PageResponse(BaseModel):
    html: str
    remaining_seconds: int


class AssetResponse(BaseModel):
    url: str


class PageRecord(BaseModel):
    """Stored shape of a page. Immutable once written."""

    model_config = {"frozen": True}

    id: str
    html: str
    assets: list[str] = []
    created_at: datetime
    ttl_seconds: int
    expires_at: datetime
