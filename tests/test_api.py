"""
Tests for the HTTP API: settings endpoints, admin protection and channel listing.
"""
import asyncio

import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import PLAYLIST_URL
from tvlive.config import get_settings
from tvlive.main import app
from tvlive.services.channel_service import ChannelService, get_channel_service
from tvlive.services.playlist_fetcher import PlaylistFetcher
from tvlive.services.settings_store import SettingsStore, get_settings_store


@pytest.fixture
def store(tmp_path):
    store = SettingsStore(db_path=str(tmp_path / "settings.db"), default_m3u_url=PLAYLIST_URL)
    asyncio.run(store.initialize())
    return store


@pytest.fixture
def service(parser, playlist_transport, sample_m3u_content):
    fetcher = PlaylistFetcher(settings_url="", default_url=PLAYLIST_URL, transport=playlist_transport)
    service = ChannelService(fetcher=fetcher, parser=parser)
    service.load_text(sample_m3u_content, PLAYLIST_URL)
    return service


@pytest.fixture
def client(store, service):
    app.dependency_overrides[get_settings_store] = lambda: store
    app.dependency_overrides[get_channel_service] = lambda: service
    # Lifespan is not entered: no startup fetch
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_headers():
    return {"X-Admin-Key": get_settings().admin_api_key}


class TestSettingsEndpoints:

    def test_public_m3u_url(self, client):
        response = client.get("/api/settings/m3u")
        assert response.status_code == 200
        assert response.json() == {"m3u_url": PLAYLIST_URL}

    def test_admin_requires_api_key(self, client):
        assert client.get("/api/admin/m3u").status_code == 401

        response = client.put("/api/admin/m3u", json={"url": "https://x.example.com/a.m3u8"})
        assert response.status_code == 401
        assert "admin api key" in response.json()["detail"].lower()

    def test_admin_update_url(self, client, admin_headers):
        new_url = "https://lists.example.com/other.m3u8"

        response = client.put("/api/admin/m3u", json={"url": new_url}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["m3u_url"] == new_url

        assert client.get("/api/settings/m3u").json()["m3u_url"] == new_url
        assert client.get("/api/admin/m3u", headers=admin_headers).json()["m3u_url"] == new_url

        logs = client.get("/api/admin/logs", headers=admin_headers).json()["logs"]
        assert logs[0]["action"] == "UPDATE_M3U"

    @pytest.mark.parametrize("body", [
        {}, {"url": ""}, {"url": "not-a-url"}, {"url": "http://example.com:abc/list.m3u8"},
    ])
    def test_admin_update_rejects_bad_url(self, client, admin_headers, body):
        response = client.put("/api/admin/m3u", json=body, headers=admin_headers)
        assert response.status_code == 400


class TestChannelEndpoints:

    def test_list_all_channels(self, client):
        data = client.get("/api/tv/channels").json()
        assert data["total"] == 5
        assert data["channels"][0]["id"] == "globo.br"

    def test_list_filtered_channels(self, client):
        data = client.get(
            "/api/tv/channels", params={"category": "Sports", "country": "Brasil", "search": "sport"}
        ).json()
        assert [ch["name"] for ch in data["channels"]] == ["SporTV"]
        assert data["category"] == "Sports"

    def test_get_channel(self, client):
        assert client.get("/api/tv/channels/globo.br").json()["name"] == "Globo SP"
        assert client.get("/api/tv/channels/missing").status_code == 404

    def test_filters(self, client):
        data = client.get("/api/tv/filters").json()
        assert data["categories"] == ["News", "Other", "Sports", "TV-Open"]
        assert data["countries"] == ["Argentina", "Brasil", "Portugal"]

    def test_reload_requires_admin(self, client):
        assert client.post("/api/tv/reload").status_code == 401

    def test_reload(self, client, admin_headers, service):
        service.registry.replace([])

        response = client.post("/api/tv/reload", headers=admin_headers)

        assert response.status_code == 200
        assert response.json() == {"url": PLAYLIST_URL, "channels": 5, "categories": 4, "countries": 3}
        assert len(service.registry) == 5

    def test_reload_failure_keeps_registry(self, client, admin_headers, service):
        service.fetcher = PlaylistFetcher(
            settings_url="",
            default_url=PLAYLIST_URL,
            transport=httpx.MockTransport(lambda request: httpx.Response(500)),
        )

        response = client.post("/api/tv/reload", headers=admin_headers)

        assert response.status_code == 502
        assert len(service.registry) == 5

    def test_stats(self, client):
        data = client.get("/api/stats").json()
        assert data["total_channels"] == 5
        assert data["playlist_url"] == PLAYLIST_URL

    def test_health(self, client):
        assert client.get("/api/health").json()["status"] == "healthy"
