"""Closet item service.

Provides:
- Visibility-scoped listing with optional name search
- Creation owned by the requester
- Owner-only update and delete
- Batched lookup of items by id
- Gap check of desired item names against the visible closet
"""

from typing import Any, Iterable, Optional

from api.exceptions import AuthorizationError, NotFoundError
from wardrobe.logging import get_logger
from wardrobe.models import ClosetItem
from wardrobe.store import (
    Contains,
    RecordMapper,
    RecordNotFoundError,
    RecordStore,
    all_of,
    visible_to,
)

logger = get_logger(__name__)


class ClosetService:
    """Operations on the closet table."""

    def __init__(self, store: RecordStore, mapper: RecordMapper, table: str):
        self.store = store
        self.mapper = mapper
        self.table = table

    async def list_items(
        self,
        user_id: str,
        query: Optional[str] = None,
        limit: int = 100,
    ) -> list[ClosetItem]:
        """Items owned by the user or shared, optionally filtered by name."""
        fields = self.mapper.closet
        name_match = Contains(fields.primary("name"), query) if query else None
        expr = all_of(name_match, visible_to(fields.primary("owner_user_id"), user_id))

        records = await self.store.query(
            self.table, expr, page_size=min(limit, 100), max_records=limit
        )
        return [self.mapper.closet_item(r) for r in records]

    async def get_item(self, item_id: str) -> ClosetItem:
        try:
            record = await self.store.find(self.table, item_id)
        except RecordNotFoundError:
            raise NotFoundError(
                "Closet item not found",
                error_code="ITEM_NOT_FOUND",
                details={"itemId": item_id},
            )
        return self.mapper.closet_item(record)

    async def get_items(self, item_ids: Iterable[str]) -> list[ClosetItem]:
        """Resolve ids in batches. Unknown ids are left out."""
        records = await self.store.find_many(self.table, item_ids)
        return [self.mapper.closet_item(r) for r in records]

    async def create_item(self, user_id: str, values: dict[str, Any]) -> ClosetItem:
        data = {k: v for k, v in values.items() if v is not None}
        data["owner_user_id"] = user_id
        record = await self.store.create(self.table, self.mapper.closet_fields(data))
        logger.info("closet_item_created", item_id=record.id)
        return self.mapper.closet_item(record)

    async def update_item(
        self, user_id: str, item_id: str, changes: dict[str, Any]
    ) -> ClosetItem:
        """Apply a partial update. Owner only.

        Raises:
            NotFoundError: ITEM_NOT_FOUND
            AuthorizationError: FORBIDDEN when the requester is not the owner
        """
        item = await self._get_owned(user_id, item_id)
        # Ownership is not transferable through updates
        changes = {k: v for k, v in changes.items() if k != "owner_user_id"}
        if not changes:
            return item

        record = await self.store.update(
            self.table, item_id, self.mapper.closet_fields(changes)
        )
        logger.info("closet_item_updated", item_id=item_id, fields=sorted(changes))
        return self.mapper.closet_item(record)

    async def delete_item(self, user_id: str, item_id: str) -> None:
        await self._get_owned(user_id, item_id)
        try:
            await self.store.delete(self.table, item_id)
        except RecordNotFoundError:
            raise NotFoundError(
                "Closet item not found",
                error_code="ITEM_NOT_FOUND",
                details={"itemId": item_id},
            )
        logger.info("closet_item_deleted", item_id=item_id)

    async def find_gaps(self, user_id: str, names: Iterable[str]) -> list[str]:
        """Names from ``names`` not matching any visible item (trimmed, case-insensitive)."""
        wanted = [str(n) for n in names if str(n).strip()]
        if not wanted:
            return []
        owned = {
            item.name.strip().lower()
            for item in await self.list_items(user_id, limit=500)
            if item.name
        }
        return [name for name in wanted if name.strip().lower() not in owned]

    async def _get_owned(self, user_id: str, item_id: str) -> ClosetItem:
        item = await self.get_item(item_id)
        if item.owner_user_id != user_id:
            logger.warning("closet_item_forbidden", item_id=item_id)
            raise AuthorizationError(
                "You do not own this closet item",
                details={"itemId": item_id},
            )
        return item
