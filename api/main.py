"""FastAPI backend for the Outfitted wardrobe gateway."""

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware
from openai import AsyncOpenAI

from api.dependencies import Services
from api.error_handlers import register_error_handlers
from api.middleware import (
    ApiKeyMiddleware,
    MetricsMiddleware,
    RateLimitMiddleware,
    RequestContextMiddleware,
    get_metrics,
    get_metrics_content_type,
)
from api.routes import closet, gap, health, orders, outfits
from api.services.closet_service import ClosetService
from api.services.order_service import OrderService
from api.services.outfit_service import OutfitService
from wardrobe import __version__
from wardrobe.ai import ImageDescriber, OutfitSuggester, build_openai_client
from wardrobe.config import Settings
from wardrobe.logging import configure_structlog, get_logger
from wardrobe.resilience import RateLimiter
from wardrobe.store import AirtableStore, RecordMapper, RecordStore

logger = get_logger(__name__)


def build_services(
    settings: Settings,
    store: Optional[RecordStore] = None,
    openai_client: Optional[AsyncOpenAI] = None,
) -> Services:
    """Wire clients and services from settings.

    ``store`` and ``openai_client`` replace the default backends when given.
    """
    if store is None:
        store = AirtableStore(
            api_key=settings.airtable_api_key,
            base_id=settings.airtable_base_id,
            api_url=settings.airtable_api_url,
        )
    if openai_client is None:
        openai_client = build_openai_client(settings)

    mapper = RecordMapper(settings)
    suggester = OutfitSuggester(
        openai_client,
        model=settings.openai_model,
        stub=settings.ai_stub_outfits,
    )
    describer = ImageDescriber(
        openai_client,
        model=settings.openai_vision_model,
        stub=settings.ai_stub_outfits,
    )

    closet_service = ClosetService(store, mapper, settings.table_closet)
    outfit_service = OutfitService(
        store, mapper, settings.table_outfits, closet_service, suggester
    )
    order_service = OrderService(store, mapper, settings.table_orders, outfit_service)

    return Services(
        store=store,
        closet=closet_service,
        outfits=outfit_service,
        orders=order_service,
        describer=describer,
    )


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[RecordStore] = None,
    openai_client: Optional[AsyncOpenAI] = None,
) -> FastAPI:
    """Build the application. Settings are read from the environment if omitted."""
    settings = settings or Settings.from_env()

    missing = settings.missing_credentials()
    if missing:
        logger.warning("missing_configuration", variables=missing)

    services = build_services(settings, store=store, openai_client=openai_client)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            "gateway_started",
            stub_outfits=settings.ai_stub_outfits,
            model=settings.openai_model,
        )
        yield
        await services.store.close()
        logger.info("gateway_stopped")

    app = FastAPI(
        title="Outfitted Gateway API",
        description="Wardrobe inventory, AI outfit suggestions, saved outfits and orders",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.services = services

    # Middleware is added in reverse order of execution
    # Order of execution: CORS -> RequestContext -> Metrics -> ApiKey -> RateLimit -> Route
    if settings.rate_limit_per_minute > 0:
        app.add_middleware(
            RateLimitMiddleware,
            limiter=RateLimiter(
                requests_per_minute=settings.rate_limit_per_minute,
                burst=settings.rate_limit_burst,
            ),
        )

    app.add_middleware(
        ApiKeyMiddleware,
        api_key=settings.api_key,
        require_user_id=settings.require_user_id,
    )

    app.add_middleware(MetricsMiddleware)

    app.add_middleware(RequestContextMiddleware)

    # Outermost so preflight requests never reach auth
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["x-request-id"],
    )

    register_error_handlers(app)

    app.include_router(health.router)
    app.include_router(closet.router, prefix="/api")
    app.include_router(gap.router, prefix="/api")
    app.include_router(outfits.router, prefix="/api")
    app.include_router(orders.router, prefix="/api")

    @app.get("/metrics", include_in_schema=False)
    async def metrics():
        """Prometheus metrics endpoint for scraping."""
        return Response(
            content=get_metrics(),
            media_type=get_metrics_content_type(),
        )

    return app


def create_default_app() -> FastAPI:
    """Application factory for uvicorn (``--factory``) with logging configured."""
    settings = Settings.from_env()
    configure_structlog(json_format=settings.log_json, log_level=settings.log_level)
    return create_app(settings)
