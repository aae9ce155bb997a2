import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.config import get_settings
from app.infrastructure.cache import CacheService
from app.infrastructure.database import engine, initialize_database
from app.infrastructure.logging_config import configure_logging
from app.infrastructure.notifications import PresenceRegistry, WebSocketTransport
from app.infrastructure.sharing import BudgetSharingService
from app.interfaces.api.routes import register_routes

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the tables on startup and release the connection pool on shutdown."""

    initialize_database()
    logger.info("FinFam API started")
    yield
    engine.dispose()


def create_app() -> FastAPI:
    """Build the FastAPI application with its realtime services."""

    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(title="FinFam API", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    transport = WebSocketTransport()
    registry = PresenceRegistry()
    registry.initialize(transport)

    app.state.realtime_transport = transport
    app.state.presence_registry = registry
    app.state.cache = CacheService(settings.cache_ttl_seconds)
    app.state.sharing_service = BudgetSharingService(registry)

    register_routes(app)
    return app


app = create_app()
