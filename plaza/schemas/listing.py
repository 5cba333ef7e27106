"""Pydantic schemas for classified listings."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from plaza.schemas.common import ActionPayload


class ListingSummary(BaseModel):
    """Listing as shown in lists; omits address and description."""

    id: int
    username: str
    title: str
    price: float
    region_code: Optional[str] = None
    image_url: Optional[str] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class ListingRead(ListingSummary):
    """Full listing detail."""

    user_id: str
    address: str
    description: str


class ListingCreate(ActionPayload):
    """Raw listing fields; trimmed and range-checked by ListingService."""

    title: Optional[str] = None
    address: Optional[str] = None
    price: Any = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    region_code: Optional[str] = None


class ListMyListingsRequest(ActionPayload):
    limit: int = 50


class ListUserListingsRequest(ActionPayload):
    username: Optional[str] = None
    limit: int = 50


class ListAllListingsRequest(ActionPayload):
    limit: int = 50
    region_code: Optional[str] = None
    search: Optional[str] = Field(default=None, max_length=120)


class GetListingRequest(ActionPayload):
    id: Optional[int] = None
