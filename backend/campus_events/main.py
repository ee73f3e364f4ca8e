"""
Campus Events API.

Hosts publish events at campus locations and decide on guests' requests to
join; open events are listed from a short-lived Redis memo; a background
sweep closes events that filled up or ended; admins step through live
surveys while subscribers follow along over WebSocket.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from campus_events.core.config import get_settings
from campus_events.core.logging import setup_logging, get_logger
from campus_events.core.metrics import metrics_endpoint
from campus_events.api.router import api_router
from campus_events.api.middleware import RequestLoggingMiddleware
from campus_events.infrastructure.pubsub import PubSub
from campus_events.scheduler import scheduler_running, start_scheduler, stop_scheduler
from campus_events.services.cache_service import get_redis, close_redis, get_cache_stats

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    logger.info(
        "campus_events_starting",
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        sweep_enabled=settings.SWEEP_ENABLED,
    )

    # Survey subscribers live in this process only
    app.state.pubsub = PubSub(max_queue_size=settings.PUBSUB_QUEUE_SIZE)

    if await get_redis() is None:
        logger.warning("redis_disabled", effect="active events recomputed on every read")

    if settings.SWEEP_ENABLED:
        start_scheduler()

    try:
        yield
    finally:
        stop_scheduler()
        app.state.pubsub.close()
        await close_redis()
        logger.info("campus_events_stopped")


def create_app() -> FastAPI:
    application = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="Campus event hosting, guest requests and live surveys",
        lifespan=lifespan,
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    application.add_middleware(RequestLoggingMiddleware)
    application.include_router(api_router)
    return application


app = create_app()


@app.get("/health", tags=["Health"])
async def health_check():
    """Liveness plus the state of the cache, the sweeper and live survey streams."""
    pubsub = getattr(app.state, "pubsub", None)
    return {
        "status": "healthy",
        "version": settings.APP_VERSION,
        "cache": await get_cache_stats(),
        "sweeper": {"enabled": settings.SWEEP_ENABLED, "running": scheduler_running()},
        "live_surveys": len(pubsub.topics) if pubsub else 0,
    }


@app.get("/metrics", include_in_schema=False)
def metrics():
    return metrics_endpoint()


@app.get("/", tags=["Root"])
async def root():
    return {"service": settings.APP_NAME, "version": settings.APP_VERSION, "docs": "/docs"}
