"""Closet item routes.

Items are visible to their owner and, when unowned, to everyone. Only the
owner may update or delete an item.
"""

from typing import Annotated, Optional

from fastapi import APIRouter, Query, Response, status

from api.dependencies import RequesterId, ServicesDep
from api.models.api_models import (
    ClosetItem,
    CreateClosetItemRequest,
    DescribeImageRequest,
    ItemDescription,
    UpdateClosetItemRequest,
)
from api.responses import ERROR_RESPONSES, DataResponse

router = APIRouter(prefix="/closet", tags=["closet"], responses=ERROR_RESPONSES)


@router.get("", response_model=DataResponse[list[ClosetItem]])
async def list_closet(
    services: ServicesDep,
    user_id: RequesterId,
    q: Annotated[Optional[str], Query(max_length=100)] = None,
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
):
    """List items owned by the requester or shared, optionally by name substring."""
    query = q.strip() if q else None
    items = await services.closet.list_items(user_id, query or None, limit)
    return DataResponse(data=items)


@router.post(
    "",
    response_model=DataResponse[ClosetItem],
    status_code=status.HTTP_201_CREATED,
)
async def create_closet_item(
    body: CreateClosetItemRequest,
    services: ServicesDep,
    user_id: RequesterId,
):
    """Add an item owned by the requester."""
    item = await services.closet.create_item(user_id, body.model_dump())
    return DataResponse(data=item)


@router.post("/describe", response_model=DataResponse[ItemDescription])
async def describe_closet_photo(body: DescribeImageRequest, services: ServicesDep):
    """Best-effort name/category/color/brand for a garment photo."""
    description = await services.describer.describe(body.image_url)
    return DataResponse(data=description)


@router.put("/{item_id}", response_model=DataResponse[ClosetItem])
async def update_closet_item(
    item_id: str,
    body: UpdateClosetItemRequest,
    services: ServicesDep,
    user_id: RequesterId,
):
    """Partially update an item the requester owns."""
    changes = body.model_dump(exclude_unset=True)
    item = await services.closet.update_item(user_id, item_id, changes)
    return DataResponse(data=item)


@router.delete(
    "/{item_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
)
async def delete_closet_item(
    item_id: str,
    services: ServicesDep,
    user_id: RequesterId,
):
    """Delete an item the requester owns."""
    await services.closet.delete_item(user_id, item_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
