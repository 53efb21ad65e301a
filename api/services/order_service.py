"""Order service with idempotent creation."""

from api.exceptions import NotFoundError
from api.models.api_models import CreateOrderRequest
from api.services.outfit_service import OutfitService
from wardrobe.logging import get_logger
from wardrobe.models import Order
from wardrobe.store import Eq, RecordMapper, RecordNotFoundError, RecordStore

logger = get_logger(__name__)

INITIAL_STATUS = "pending"


class OrderService:
    """Operations on the orders table."""

    def __init__(
        self,
        store: RecordStore,
        mapper: RecordMapper,
        table: str,
        outfits: OutfitService,
    ):
        self.store = store
        self.mapper = mapper
        self.table = table
        self.outfits = outfits

    async def create(self, request: CreateOrderRequest) -> tuple[Order, bool]:
        """Create an order unless one with the same idempotency key exists.

        Returns:
            (order, created) where created is False for a replayed key

        Raises:
            NotFoundError: OUTFIT_NOT_FOUND when the outfit does not exist
        """
        existing = await self.find_by_idempotency_key(request.idempotency_key)
        if existing:
            logger.info("order_replayed", order_id=existing.id)
            return existing, False

        if not await self.outfits.exists(request.outfit_id):
            raise NotFoundError(
                "Outfit not found",
                error_code="OUTFIT_NOT_FOUND",
                details={"outfitId": request.outfit_id},
            )

        fields = self.mapper.order_fields({
            "user_id": request.user_id,
            "outfit_id": request.outfit_id,
            "status": INITIAL_STATUS,
            "fulfillment": request.fulfillment,
            "note": request.note,
            "idempotency_key": request.idempotency_key,
        })
        record = await self.store.create(self.table, fields)
        logger.info("order_created", order_id=record.id, fulfillment=request.fulfillment)
        return self.mapper.order(record), True

    async def find_by_idempotency_key(self, key: str) -> Order | None:
        key_field = self.mapper.orders.primary("idempotency_key")
        records = await self.store.query(
            self.table, Eq(key_field, key), page_size=1, max_records=1
        )
        return self.mapper.order(records[0]) if records else None

    async def get(self, order_id: str) -> Order:
        try:
            record = await self.store.find(self.table, order_id)
        except RecordNotFoundError:
            raise NotFoundError(
                "Order not found",
                error_code="ORDER_NOT_FOUND",
                details={"orderId": order_id},
            )
        return self.mapper.order(record)
