"""
Live TV - FastAPI Backend

Serves the administered playlist URL and the parsed, classified channel list.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from tvlive.config import get_settings
from tvlive.errors import PlaylistFetchError
from tvlive.services.channel_service import ChannelService, get_channel_service
from tvlive.services.settings_store import get_settings_store
from tvlive.routers import channels, settings as settings_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

settings = get_settings()

# Rate limiter
limiter = Limiter(
    key_func=get_remote_address,
    default_limits=[f"{settings.rate_limit_per_minute}/minute"],
)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    logger.info("Starting Live TV Backend...")

    store = await get_settings_store()
    logger.info(f"Settings store initialized (offline={store.offline})")

    if settings.load_on_startup:
        service = get_channel_service()
        url = await store.get_m3u_url()
        try:
            await service.load(url)
        except PlaylistFetchError as e:
            # The API stays up with an empty registry; POST /api/tv/reload retries
            logger.error(f"Initial playlist load failed: {e}")
    else:
        logger.info("Initial playlist load disabled")

    yield

    logger.info("Shutting down Live TV Backend...")


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Live TV playlist and channel API",
    lifespan=lifespan
)

# Add rate limiter
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(settings_router.router)
app.include_router(channels.router)


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": settings.app_version}


@app.get("/api/stats")
async def get_stats(service: ChannelService = Depends(get_channel_service)):
    """Get registry statistics."""
    options = service.registry.populate_filter_options()

    return {
        "playlist_url": service.playlist_url,
        "total_channels": len(service.registry),
        "total_categories": len(options.categories),
        "total_countries": len(options.countries),
    }


# Error handlers
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler."""
    logger.error(f"Unhandled exception: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"}
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "tvlive.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug
    )
