"""Pydantic models for API requests and responses.

Wire format is camelCase; Python attributes are snake_case.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import ConfigDict, Field, field_validator

from wardrobe.models import CamelModel, ClosetItem, ItemDescription, Order, Outfit


class RequestModel(CamelModel):
    """Base for request bodies: camelCase or snake_case keys, trimmed strings."""

    model_config = ConfigDict(str_strip_whitespace=True)


# =============================================================================
# Closet
# =============================================================================


class CreateClosetItemRequest(RequestModel):
    """Request to add an item to the closet."""

    name: str = Field(min_length=1, max_length=200)
    category: str = Field(min_length=1, max_length=100)
    color: Optional[str] = Field(default=None, max_length=100)
    brand: Optional[str] = Field(default=None, max_length=100)
    image_url: Optional[str] = Field(default=None, max_length=2048)
    status: Optional[str] = Field(default=None, max_length=50)


class UpdateClosetItemRequest(RequestModel):
    """Partial update of a closet item. Only fields sent are written."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    category: Optional[str] = Field(default=None, min_length=1, max_length=100)
    color: Optional[str] = Field(default=None, max_length=100)
    brand: Optional[str] = Field(default=None, max_length=100)
    image_url: Optional[str] = Field(default=None, max_length=2048)
    status: Optional[str] = Field(default=None, max_length=50)

    @field_validator("name", "category")
    @classmethod
    def not_null(cls, v: Optional[str]) -> str:
        if v is None:
            raise ValueError("may be omitted but not null")
        return v


class DescribeImageRequest(RequestModel):
    """Photo to describe."""

    image_url: str = Field(min_length=1, max_length=2048)


class GapCheckRequest(RequestModel):
    """Item names making up a desired outfit."""

    outfit: list[str] = Field(default_factory=list, max_length=50)


class GapCheckResult(CamelModel):
    missing_items: list[str]


# =============================================================================
# Outfits
# =============================================================================


class SuggestOutfitsRequest(RequestModel):
    """Request AI outfit suggestions from specific closet items."""

    occasion: str = Field(min_length=1, max_length=200)
    weather: Optional[str] = Field(default=None, max_length=200)
    style: Optional[str] = Field(default=None, max_length=200)
    item_ids: list[str] = Field(min_length=1, max_length=200)
    top_k: int = Field(default=3, ge=1, le=5)
    dare: bool = False


class SaveOutfitRequest(RequestModel):
    """Persist an outfit exactly as composed by the client."""

    title: str = Field(min_length=1, max_length=200)
    item_ids: list[str] = Field(min_length=1, max_length=200)
    occasion: Optional[str] = Field(default=None, max_length=200)
    style: Optional[str] = Field(default=None, max_length=200)
    weather: Optional[str] = Field(default=None, max_length=200)
    reasoning: Optional[str] = Field(default=None, max_length=4000)
    palette: list[str] = Field(default_factory=list, max_length=20)
    photo_url: Optional[str] = Field(default=None, max_length=2048)


class CatalogEntry(CamelModel):
    """Thumbnail info for one item name."""

    photo_url: Optional[str] = None
    category: Optional[str] = None
    color: Optional[str] = None


class ArchivedOutfit(CamelModel):
    """Saved outfit with item names substituted for ids."""

    id: str
    title: str
    items: list[str]
    item_ids: list[str]
    occasion: Optional[str] = None
    style: Optional[str] = None
    weather: Optional[str] = None
    reasoning: Optional[str] = None
    palette: list[str] = Field(default_factory=list)
    preview_photo: Optional[str] = None


class OutfitArchive(CamelModel):
    outfits: list[ArchivedOutfit]
    catalog: dict[str, CatalogEntry]


class OutfitArchiveResponse(CamelModel):
    """Archive envelope; top-level keys mirror ``data`` for older clients."""

    data: OutfitArchive
    outfits: list[ArchivedOutfit]
    catalog: dict[str, CatalogEntry]


# =============================================================================
# Orders
# =============================================================================


class CreateOrderRequest(RequestModel):
    """Place a fulfillment order for an outfit."""

    user_id: str = Field(min_length=1, max_length=200)
    outfit_id: str = Field(min_length=1, max_length=100)
    fulfillment: Literal["delivery", "pickup", "stylist"]
    note: Optional[str] = Field(default=None, max_length=500)
    idempotency_key: str = Field(min_length=1, max_length=200)


# =============================================================================
# Health
# =============================================================================


class HealthResponse(CamelModel):
    status: Literal["ok"] = "ok"
    ts: datetime


__all__ = [
    "ArchivedOutfit",
    "CatalogEntry",
    "ClosetItem",
    "CreateClosetItemRequest",
    "CreateOrderRequest",
    "DescribeImageRequest",
    "GapCheckRequest",
    "GapCheckResult",
    "HealthResponse",
    "ItemDescription",
    "Order",
    "Outfit",
    "OutfitArchive",
    "OutfitArchiveResponse",
    "SaveOutfitRequest",
    "SuggestOutfitsRequest",
    "UpdateClosetItemRequest",
]
