"""Translate store records to wardrobe models and back."""

from typing import Any, Mapping, Optional

from wardrobe.config import Settings
from wardrobe.models import ClosetItem, Order, Outfit
from wardrobe.store.client import Record
from wardrobe.store.fields import FieldResolver


class RecordMapper:
    """Typed views over the three wardrobe tables."""

    def __init__(self, settings: Settings):
        self.closet = FieldResolver(settings.fields.closet)
        self.outfits = FieldResolver(settings.fields.outfits)
        self.orders = FieldResolver(settings.fields.orders)
        self.image_as_attachment = settings.closet_image_as_attachment

    # -------------------------------------------------------------------------
    # Closet items
    # -------------------------------------------------------------------------

    def closet_item(self, record: Record) -> ClosetItem:
        f = record.fields
        return ClosetItem(
            id=record.id,
            name=self.closet.read_str(f, "name"),
            category=self.closet.read_str(f, "category"),
            color=self.closet.read_str(f, "color") or None,
            brand=self.closet.read_str(f, "brand") or None,
            image_url=self.closet.read_url(f, "image_url"),
            owner_user_id=self.closet.read_str(f, "owner_user_id"),
            status=self.closet.read_str(f, "status") or "Clean",
        )

    def closet_fields(self, values: Mapping[str, Any]) -> dict[str, Any]:
        """Store fields for a create/update. Only keys present are written."""
        out = dict(values)
        if "image_url" in out and self.image_as_attachment:
            url = out["image_url"]
            out["image_url"] = [{"url": url}] if url else []
        return self.closet.to_store(out)

    # -------------------------------------------------------------------------
    # Outfits
    # -------------------------------------------------------------------------

    def outfit(self, record: Record) -> Outfit:
        f = record.fields
        return Outfit(
            id=record.id,
            title=self.outfits.read_str(f, "title"),
            items=self.outfits.read_list(f, "item_ids"),
            occasion=self.outfits.read_str(f, "occasion") or None,
            style=self.outfits.read_str(f, "style") or None,
            weather=self.outfits.read_str(f, "weather") or None,
            reasoning=self.outfits.read_str(f, "reasoning") or None,
            palette=self.outfits.read_list(f, "palette"),
            preview_photo=self.outfits.read_url(f, "preview_photo"),
            owner_user_id=self.outfits.read_str(f, "owner_user_id"),
        )

    def outfit_fields(
        self,
        *,
        title: str,
        item_ids: list[str],
        owner_user_id: str,
        occasion: Optional[str] = None,
        style: Optional[str] = None,
        weather: Optional[str] = None,
        reasoning: Optional[str] = None,
        palette: Optional[list[str]] = None,
        preview_photo: Optional[str] = None,
    ) -> dict[str, Any]:
        values: dict[str, Any] = {
            "title": title,
            "item_ids": list(item_ids),
            "owner_user_id": owner_user_id,
        }
        optional = {
            "occasion": occasion,
            "style": style,
            "weather": weather,
            "reasoning": reasoning,
            "preview_photo": preview_photo,
        }
        values.update({k: v for k, v in optional.items() if v})
        if palette:
            values["palette"] = ", ".join(p.strip() for p in palette if p.strip())
        return self.outfits.to_store(values)

    # -------------------------------------------------------------------------
    # Orders
    # -------------------------------------------------------------------------

    def order(self, record: Record) -> Order:
        f = record.fields
        return Order(
            id=record.id,
            user_id=self.orders.read_str(f, "user_id"),
            outfit_id=self.orders.read_str(f, "outfit_id"),
            status=self.orders.read_str(f, "status") or "pending",
            fulfillment=self.orders.read_str(f, "fulfillment"),
            note=self.orders.read_str(f, "note") or None,
            idempotency_key=self.orders.read_str(f, "idempotency_key"),
            created_at=record.created_time,
        )

    def order_fields(self, values: Mapping[str, Any]) -> dict[str, Any]:
        return self.orders.to_store({k: v for k, v in values.items() if v is not None})
