"""FastAPI dependencies shared by the route modules.

Provides:
- get_services: the service container built by create_app()
- get_requester_id: the caller's x-user-id (empty when anonymous)
"""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Request

from api.services.closet_service import ClosetService
from api.services.order_service import OrderService
from api.services.outfit_service import OutfitService
from wardrobe.ai import ImageDescriber
from wardrobe.store import RecordStore


@dataclass
class Services:
    """Everything a request handler needs, constructed once per app."""

    store: RecordStore
    closet: ClosetService
    outfits: OutfitService
    orders: OrderService
    describer: ImageDescriber


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_requester_id(request: Request) -> str:
    """Requester identity used for ownership scoping."""
    return request.headers.get("x-user-id", "").strip()


ServicesDep = Annotated[Services, Depends(get_services)]
RequesterId = Annotated[str, Depends(get_requester_id)]
