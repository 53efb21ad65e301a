"""Outfit service.

Provides:
- AI suggestion from chosen closet items, persisted per outfit
- Saving an exact, client-composed outfit
- Archive listing with item names and a thumbnail catalog
- Owner-only deletion
"""

import asyncio
from typing import Sequence

from api.exceptions import AuthorizationError, NotFoundError, ValidationError
from api.models.api_models import (
    ArchivedOutfit,
    CatalogEntry,
    OutfitArchive,
    SaveOutfitRequest,
    SuggestOutfitsRequest,
)
from api.services.closet_service import ClosetService
from wardrobe.ai import OutfitSuggester
from wardrobe.logging import get_logger
from wardrobe.models import ClosetItem, Outfit, SuggestedOutfit
from wardrobe.store import Eq, RecordMapper, RecordNotFoundError, RecordStore

logger = get_logger(__name__)


class OutfitService:
    """Operations on the outfits table."""

    def __init__(
        self,
        store: RecordStore,
        mapper: RecordMapper,
        table: str,
        closet: ClosetService,
        suggester: OutfitSuggester,
    ):
        self.store = store
        self.mapper = mapper
        self.table = table
        self.closet = closet
        self.suggester = suggester

    async def suggest(self, user_id: str, request: SuggestOutfitsRequest) -> list[Outfit]:
        """Generate outfits with the AI client and persist each one.

        Outfits are persisted independently; one failed write does not undo
        the others. The call fails only when every write fails.

        Raises:
            ValidationError: NO_ITEMS when no requested item is usable
            AIServiceError: From the suggestion client
        """
        items = await self.closet.get_items(request.item_ids)
        if not items:
            raise ValidationError(
                "None of the requested closet items exist",
                error_code="NO_ITEMS",
                details={"requested": len(set(request.item_ids))},
            )

        usable = _in_request_order(
            [item for item in items if not item.in_laundry], request.item_ids
        )
        if not usable:
            raise ValidationError(
                "All requested closet items are in the laundry",
                error_code="NO_ITEMS",
                details={"requested": len(set(request.item_ids)), "inLaundry": len(items)},
            )

        suggestions = await self.suggester.generate_outfits(
            usable,
            occasion=request.occasion,
            weather=request.weather,
            style=request.style,
            top_k=request.top_k,
            dare=request.dare,
        )

        results = await asyncio.gather(
            *(self._persist_suggestion(user_id, s, request) for s in suggestions),
            return_exceptions=True,
        )
        saved = [r for r in results if isinstance(r, Outfit)]
        failures = [r for r in results if isinstance(r, BaseException)]
        for failure in failures:
            logger.error("outfit_persist_failed", error=str(failure))
        if failures and not saved:
            raise failures[0]

        logger.info("outfits_generated", count=len(saved), failed=len(failures))
        return saved

    async def save(self, user_id: str, request: SaveOutfitRequest) -> Outfit:
        """Persist an outfit exactly as given after checking every item exists.

        Raises:
            ValidationError: ITEMS_NOT_FOUND with requested/found counts
        """
        requested = list(dict.fromkeys(request.item_ids))
        found = await self.closet.get_items(requested)
        found_ids = {item.id for item in found}
        if len(found_ids) < len(requested):
            raise ValidationError(
                "Some closet items do not exist",
                error_code="ITEMS_NOT_FOUND",
                details={
                    "requested": len(requested),
                    "found": len(found_ids),
                    "missing": [i for i in requested if i not in found_ids],
                },
            )

        fields = self.mapper.outfit_fields(
            title=request.title,
            item_ids=requested,
            owner_user_id=user_id,
            occasion=request.occasion,
            style=request.style,
            weather=request.weather,
            reasoning=request.reasoning,
            palette=request.palette,
            preview_photo=request.photo_url,
        )
        record = await self.store.create(self.table, fields)
        logger.info("outfit_saved", outfit_id=record.id, items=len(requested))
        return self.mapper.outfit(record)

    async def archive(self, user_id: str) -> OutfitArchive:
        """The requester's outfits with item names, plus a name catalog."""
        owner_field = self.mapper.outfits.primary("owner_user_id")
        records = await self.store.query(self.table, Eq(owner_field, user_id))
        outfits = [self.mapper.outfit(r) for r in records]

        all_ids = [item_id for outfit in outfits for item_id in outfit.items]
        items = await self.closet.get_items(all_ids)
        by_id = {item.id: item for item in items}

        archived = []
        for outfit in outfits:
            names = [by_id[i].name for i in outfit.items if i in by_id]
            archived.append(
                ArchivedOutfit(
                    id=outfit.id,
                    title=outfit.title,
                    items=names,
                    item_ids=outfit.items,
                    occasion=outfit.occasion,
                    style=outfit.style,
                    weather=outfit.weather,
                    reasoning=outfit.reasoning,
                    palette=outfit.palette,
                    preview_photo=outfit.preview_photo,
                )
            )

        catalog = {
            item.name: CatalogEntry(
                photo_url=item.image_url,
                category=item.category or None,
                color=item.color,
            )
            for item in items
            if item.name
        }
        return OutfitArchive(outfits=archived, catalog=catalog)

    async def delete(self, user_id: str, outfit_id: str) -> None:
        """Delete an outfit. Owner only.

        Raises:
            NotFoundError: OUTFIT_NOT_FOUND
            AuthorizationError: FORBIDDEN when the requester is not the owner
        """
        outfit = await self._get(outfit_id)
        if outfit.owner_user_id != user_id:
            logger.warning("outfit_forbidden", outfit_id=outfit_id)
            raise AuthorizationError(
                "You do not own this outfit",
                details={"outfitId": outfit_id},
            )
        try:
            await self.store.delete(self.table, outfit_id)
        except RecordNotFoundError:
            raise _outfit_not_found(outfit_id)
        logger.info("outfit_deleted", outfit_id=outfit_id)

    async def exists(self, outfit_id: str) -> bool:
        try:
            await self.store.find(self.table, outfit_id)
        except RecordNotFoundError:
            return False
        return True

    async def _get(self, outfit_id: str) -> Outfit:
        try:
            record = await self.store.find(self.table, outfit_id)
        except RecordNotFoundError:
            raise _outfit_not_found(outfit_id)
        return self.mapper.outfit(record)

    async def _persist_suggestion(
        self,
        user_id: str,
        suggestion: SuggestedOutfit,
        request: SuggestOutfitsRequest,
    ) -> Outfit:
        fields = self.mapper.outfit_fields(
            title=suggestion.name or f"{request.occasion} outfit",
            item_ids=suggestion.items,
            owner_user_id=user_id,
            occasion=request.occasion,
            style=request.style,
            weather=request.weather,
            reasoning=suggestion.reasoning,
            palette=suggestion.palette,
            preview_photo=suggestion.preview,
        )
        record = await self.store.create(self.table, fields)
        return self.mapper.outfit(record)


def _outfit_not_found(outfit_id: str) -> NotFoundError:
    return NotFoundError(
        "Outfit not found",
        error_code="OUTFIT_NOT_FOUND",
        details={"outfitId": outfit_id},
    )


def _in_request_order(
    items: Sequence[ClosetItem], requested: Sequence[str]
) -> list[ClosetItem]:
    """Batch lookups do not preserve order; restore the caller's order."""
    position = {item_id: i for i, item_id in reversed(list(enumerate(requested)))}
    return sorted(items, key=lambda item: position.get(item.id, len(position)))
