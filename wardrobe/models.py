"""Pydantic models for wardrobe records and AI outputs."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base model serialized with camelCase keys on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ClosetItem(CamelModel):
    """A single garment or accessory in a user's closet.

    An empty owner_user_id marks the item as shared across all users.
    """

    id: str
    name: str
    category: str
    color: Optional[str] = None
    brand: Optional[str] = None
    image_url: Optional[str] = None
    owner_user_id: str = ""
    status: str = "Clean"

    @property
    def is_shared(self) -> bool:
        return not self.owner_user_id

    @property
    def in_laundry(self) -> bool:
        return self.status.strip().lower() == "laundry"


class Outfit(CamelModel):
    """A persisted outfit referencing closet items by id."""

    id: str
    title: str = ""
    items: list[str] = Field(default_factory=list)
    occasion: Optional[str] = None
    style: Optional[str] = None
    weather: Optional[str] = None
    reasoning: Optional[str] = None
    palette: list[str] = Field(default_factory=list)
    preview_photo: Optional[str] = None
    owner_user_id: str = ""


class Order(CamelModel):
    """A fulfillment order placed for an outfit."""

    id: str
    user_id: str
    outfit_id: str
    status: str = "pending"
    fulfillment: str
    note: Optional[str] = None
    idempotency_key: str
    created_at: Optional[datetime] = None


class SuggestedOutfit(BaseModel):
    """One outfit as returned by the completion backend, before persistence."""

    name: str = ""
    items: list[str] = Field(default_factory=list)
    reasoning: str = ""
    palette: list[str] = Field(default_factory=list)
    preview: Optional[str] = None


class ItemDescription(CamelModel):
    """Structured description of a garment photo. Empty strings when unknown."""

    name: str = ""
    category: str = ""
    color: str = ""
    brand: str = ""
