"""
Tests for the settings store (playlist URL persistence and admin log).
"""
import pytest
import pytest_asyncio

from tvlive.errors import InvalidPlaylistUrlError
from tvlive.services.settings_store import SettingsStore, validate_playlist_url

DEFAULT_URL = "https://default.example.com/playlist.m3u8"


@pytest_asyncio.fixture
async def store(tmp_path):
    store = SettingsStore(db_path=str(tmp_path / "data" / "settings.db"), default_m3u_url=DEFAULT_URL)
    await store.initialize()
    return store


class TestSettingsStore:

    @pytest.mark.asyncio
    async def test_default_url_seeded(self, store):
        assert store.offline is False
        assert await store.get_m3u_url() == DEFAULT_URL

    @pytest.mark.asyncio
    async def test_update_url_persists(self, store, tmp_path):
        await store.set_m3u_url("  https://lists.example.com/new.m3u8 ", admin_id="admin")

        reopened = SettingsStore(db_path=store.db_path, default_m3u_url=DEFAULT_URL)
        await reopened.initialize()
        assert await reopened.get_m3u_url() == "https://lists.example.com/new.m3u8"

    @pytest.mark.asyncio
    async def test_update_is_audited(self, store):
        await store.set_m3u_url("https://lists.example.com/new.m3u8", admin_id="admin", ip_address="127.0.0.1")

        logs = await store.get_admin_logs()
        assert logs[0]["action"] == "UPDATE_M3U"
        assert logs[0]["details"] == {"url": "https://lists.example.com/new.m3u8"}
        assert logs[0]["ip_address"] == "127.0.0.1"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("url", [
        "", None, "not a url", "ftp://example.com/list.m3u", "https://", "http://example.com:abc/list.m3u8",
    ])
    async def test_invalid_url_rejected(self, store, url):
        with pytest.raises(InvalidPlaylistUrlError):
            await store.set_m3u_url(url)
        assert await store.get_m3u_url() == DEFAULT_URL

    @pytest.mark.asyncio
    async def test_offline_mode(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        store = SettingsStore(db_path=str(blocker / "settings.db"), default_m3u_url=DEFAULT_URL)
        await store.initialize()

        assert store.offline is True
        assert await store.get_m3u_url() == DEFAULT_URL

        await store.set_m3u_url("https://lists.example.com/offline.m3u8", admin_id="admin")
        assert await store.get_m3u_url() == "https://lists.example.com/offline.m3u8"
        assert (await store.get_admin_logs())[0]["action"] == "UPDATE_M3U"


def test_validate_playlist_url():
    assert validate_playlist_url(" http://example.com/a.m3u ") == "http://example.com/a.m3u"
