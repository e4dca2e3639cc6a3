"""
Playlist settings API endpoints.
Public lookup of the playlist URL plus admin-only read/update.
"""
from fastapi import APIRouter, Depends, Header, HTTPException, Request
from pydantic import BaseModel
from typing import Optional

from tvlive.config import get_settings
from tvlive.errors import InvalidPlaylistUrlError
from tvlive.services.settings_store import SettingsStore, get_settings_store

router = APIRouter(prefix="/api", tags=["settings"])


class M3UUpdateRequest(BaseModel):
    url: Optional[str] = None


def require_admin(x_admin_key: Optional[str] = Header(None, description="Admin API key")) -> str:
    """
    Reject requests without the admin API key.
    Set TVLIVE_ADMIN_API_KEY environment variable to configure.
    """
    settings = get_settings()
    if x_admin_key != settings.admin_api_key:
        raise HTTPException(status_code=401, detail="Invalid or missing admin API key")
    return "admin"


@router.get("/settings/m3u")
async def get_public_m3u_url(store: SettingsStore = Depends(get_settings_store)):
    """
    Get the playlist URL the TV page should load.
    """
    return {"m3u_url": await store.get_m3u_url()}


@router.get("/admin/m3u")
async def get_admin_m3u_url(
    admin: str = Depends(require_admin),
    store: SettingsStore = Depends(get_settings_store),
):
    """
    Get the current playlist URL (admin view).
    """
    return {"m3u_url": await store.get_m3u_url(), "offline": store.offline}


@router.put("/admin/m3u")
async def update_m3u_url(
    body: M3UUpdateRequest,
    request: Request,
    admin: str = Depends(require_admin),
    store: SettingsStore = Depends(get_settings_store),
):
    """
    Replace the playlist URL. The change is recorded in the admin log.
    """
    client_ip = request.client.host if request.client else None
    try:
        url = await store.set_m3u_url(body.url, admin_id=admin, ip_address=client_ip)
    except InvalidPlaylistUrlError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {"message": "Playlist URL updated", "m3u_url": url}


@router.get("/admin/logs")
async def list_admin_logs(
    limit: int = 50,
    admin: str = Depends(require_admin),
    store: SettingsStore = Depends(get_settings_store),
):
    """
    List recent admin actions.
    """
    logs = await store.get_admin_logs(limit)
    return {"logs": logs, "count": len(logs)}
