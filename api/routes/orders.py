"""Order routes.

POST /orders is idempotent on ``idempotencyKey``: a replayed key returns the
original order with 200 instead of creating a second one.
"""

from fastapi import APIRouter, Response, status

from api.dependencies import ServicesDep
from api.models.api_models import CreateOrderRequest, Order
from api.responses import ERROR_RESPONSES, DataResponse

router = APIRouter(prefix="/orders", tags=["orders"], responses=ERROR_RESPONSES)


@router.post(
    "",
    response_model=DataResponse[Order],
    status_code=status.HTTP_201_CREATED,
    responses={200: {"description": "Replayed idempotency key; existing order"}},
)
async def create_order(body: CreateOrderRequest, services: ServicesDep, response: Response):
    order, created = await services.orders.create(body)
    if not created:
        response.status_code = status.HTTP_200_OK
    return DataResponse(data=order)


@router.get("/{order_id}", response_model=DataResponse[Order])
async def get_order(order_id: str, services: ServicesDep):
    order = await services.orders.get(order_id)
    return DataResponse(data=order)
