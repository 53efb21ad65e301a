"""Gap check: which items of a desired outfit are missing from the closet."""

from fastapi import APIRouter

from api.dependencies import RequesterId, ServicesDep
from api.models.api_models import GapCheckRequest, GapCheckResult
from api.responses import ERROR_RESPONSES, DataResponse

router = APIRouter(tags=["closet"], responses=ERROR_RESPONSES)


@router.post("/gap", response_model=DataResponse[GapCheckResult])
async def check_gaps(body: GapCheckRequest, services: ServicesDep, user_id: RequesterId):
    missing = await services.closet.find_gaps(user_id, body.outfit)
    return DataResponse(data=GapCheckResult(missing_items=missing))
