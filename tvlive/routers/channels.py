"""
Live TV channel API endpoints.
"""
from fastapi import APIRouter, Depends, Query, HTTPException
from typing import Optional
import logging

from tvlive.errors import PlaylistFetchError
from tvlive.models.channel import ChannelListResponse, FilterOptions, ReloadResponse
from tvlive.routers.settings import require_admin
from tvlive.services.channel_service import ChannelService, get_channel_service
from tvlive.services.settings_store import SettingsStore, get_settings_store
from tvlive.services.tv_view import LOAD_ERROR_MESSAGE

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/tv", tags=["channels"])


@router.get("/channels", response_model=ChannelListResponse)
async def list_channels(
    category: Optional[str] = Query(None, description="Filter by category (e.g., Sports, News)"),
    country: Optional[str] = Query(None, description="Filter by country label (e.g., Brasil)"),
    search: Optional[str] = Query(None, description="Search in channel names"),
    service: ChannelService = Depends(get_channel_service),
):
    """
    List channels matching every given filter.

    - **category**: Category label from /api/tv/filters
    - **country**: Country label from /api/tv/filters
    - **search**: Case-insensitive search term for channel name
    """
    channels = service.registry.filter(category, country, search)
    return ChannelListResponse(
        channels=channels,
        total=len(channels),
        category=category,
        country=country,
        search=search,
    )


@router.get("/channels/{channel_id}")
async def get_channel(channel_id: str, service: ChannelService = Depends(get_channel_service)):
    """
    Get a single channel.
    """
    channel = service.registry.get(channel_id)
    if not channel:
        raise HTTPException(status_code=404, detail="Channel not found")
    return channel


@router.get("/filters", response_model=FilterOptions)
async def list_filters(service: ChannelService = Depends(get_channel_service)):
    """
    Distinct categories and countries for the filter controls.
    """
    return service.registry.populate_filter_options()


@router.post("/reload", response_model=ReloadResponse)
async def reload_channels(
    admin: str = Depends(require_admin),
    service: ChannelService = Depends(get_channel_service),
    store: SettingsStore = Depends(get_settings_store),
):
    """
    Fetch the administered playlist again and replace the channel registry.
    """
    url = await store.get_m3u_url()
    try:
        await service.load(url)
    except PlaylistFetchError as e:
        logger.error(f"Playlist reload failed: {e}")
        raise HTTPException(status_code=502, detail=LOAD_ERROR_MESSAGE)

    await store.log_admin_action(admin, "RELOAD_PLAYLIST", "playlist", None, {"url": url}, None)

    options = service.registry.populate_filter_options()
    return ReloadResponse(
        url=url,
        channels=len(service.registry),
        categories=len(options.categories),
        countries=len(options.countries),
    )
