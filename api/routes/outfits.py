"""Outfit routes: AI suggestion, exact save, archive, delete."""

from fastapi import APIRouter, Response, status

from api.dependencies import RequesterId, ServicesDep
from api.middleware.metrics import record_outfits
from api.models.api_models import (
    Outfit,
    OutfitArchiveResponse,
    SaveOutfitRequest,
    SuggestOutfitsRequest,
)
from api.responses import ERROR_RESPONSES, DataResponse

router = APIRouter(prefix="/outfits", tags=["outfits"], responses=ERROR_RESPONSES)


@router.post(
    "/suggest",
    response_model=DataResponse[list[Outfit]],
    status_code=status.HTTP_201_CREATED,
)
async def suggest_outfits(
    body: SuggestOutfitsRequest,
    services: ServicesDep,
    user_id: RequesterId,
):
    """Generate outfits from the given items and save them to the archive.

    Errors:
        400 NO_ITEMS: none of the item ids resolve to usable items
        502 OPENAI_ERROR / AI_JSON_PARSE_ERROR / AI_EMPTY_OUTFITS
    """
    outfits = await services.outfits.suggest(user_id, body)
    source = "stub" if services.outfits.suggester.stub else "ai"
    record_outfits(source, len(outfits))
    return DataResponse(data=outfits)


@router.post(
    "/save",
    response_model=DataResponse[Outfit],
    status_code=status.HTTP_201_CREATED,
)
async def save_outfit(
    body: SaveOutfitRequest,
    services: ServicesDep,
    user_id: RequesterId,
):
    """Save an outfit exactly as composed. 400 ITEMS_NOT_FOUND if any id is unknown."""
    outfit = await services.outfits.save(user_id, body)
    return DataResponse(data=outfit)


@router.get("/archive", response_model=OutfitArchiveResponse)
async def outfit_archive(services: ServicesDep, user_id: RequesterId):
    """The requester's saved outfits with item names and a thumbnail catalog."""
    archive = await services.outfits.archive(user_id)
    return OutfitArchiveResponse(
        data=archive,
        outfits=archive.outfits,
        catalog=archive.catalog,
    )


@router.delete(
    "/{outfit_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
async def delete_outfit(
    outfit_id: str,
    services: ServicesDep,
    user_id: RequesterId,
):
    """Delete an outfit the requester owns."""
    await services.outfits.delete(user_id, outfit_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
