"""
Pytest configuration and fixtures for live TV tests.
"""
import pytest
import httpx

from tvlive.errors import AutoplayBlockedError
from tvlive.services.classifier import ChannelClassifier
from tvlive.services.m3u_parser import M3UParser

PLAYLIST_URL = "https://lists.example.com/tv.m3u8"
SETTINGS_URL = "https://api.example.com/api/settings/m3u"


class FakeEngine:
    """Stand-in for the adaptive engine; records calls and emits events on demand."""
    supported = True
    instances: list = []

    def __init__(self, config):
        self.config = config
        self.handlers = {}
        self.sources = []
        self.media = None
        self.recover_calls = 0
        self.destroyed = False
        type(self).instances.append(self)

    @classmethod
    def is_supported(cls):
        return cls.supported

    def on(self, event, callback):
        self.handlers.setdefault(event, []).append(callback)

    def load_source(self, url):
        self.sources.append(url)

    def attach_media(self, video):
        self.media = video

    def recover_media_error(self):
        self.recover_calls += 1

    def destroy(self):
        self.destroyed = True
        self.media = None

    def emit(self, event, data=None):
        for callback in list(self.handlers.get(event, [])):
            callback(event, data)


class FakeVideo:
    """Stand-in for the video element."""

    def __init__(self, native_hls=False, autoplay_allowed=True):
        self.src = ""
        self.native_hls = native_hls
        self.autoplay_allowed = autoplay_allowed
        self.play_calls = 0
        self.handlers = {}

    def can_play_type(self, mime):
        return "maybe" if self.native_hls and mime == "application/vnd.apple.mpegurl" else ""

    def play(self):
        self.play_calls += 1
        if not self.autoplay_allowed:
            raise AutoplayBlockedError("play() failed because the user didn't interact with the document first")

    def on(self, event, callback):
        self.handlers.setdefault(event, []).append(callback)

    def off(self, event, callback):
        self.handlers[event].remove(callback)

    def emit(self, event):
        for callback in list(self.handlers.get(event, [])):
            callback(event)


@pytest.fixture
def engine_factory():
    """Fresh engine class per test so instance tracking does not leak."""
    class Engine(FakeEngine):
        instances = []
    return Engine


@pytest.fixture
def video():
    return FakeVideo()


@pytest.fixture
def parser():
    return M3UParser(ChannelClassifier(home_country="Brasil"))


@pytest.fixture
def sample_m3u_content():
    """Sample playlist covering headers, off-air entries, bad URLs and attributes."""
    return """#EXTM3U
#EXTINF:-1 tvg-id="globo.br" tvg-logo="https://example.com/globo.png" group-title="TV Aberta",Globo SP
https://example.com/globo.m3u8
#EXTINF:-1 group-title="Esportes",[COLOR yellow](CANAIS DE ESPORTES)[/COLOR]
https://example.com/header.m3u8
#EXTINF:-1 group-title="Esportes",SporTV (ON)
https://example.com/sportv.m3u8
#EXTINF:-1 group-title="Esportes",Canal X (OFF)
https://example.com/canalx.m3u8
#EXTINF:-1 tvg-country="Argentina",TyC Sports
https://example.com/tyc.m3u8
#EXTINF:-1,CNN International
not-a-url
#EXTINF:-1 tvg-name="Globo News" group-title="Notícias",GN
https://example.com/globonews.m3u8
#EXTINF:-1,RTP Internacional
http://rtp.example.org/live/rtp.m3u8
#EXTINF:-1,Dangling entry
"""


@pytest.fixture
def sample_m3u_file(sample_m3u_content, tmp_path):
    """Write the sample playlist to a temporary file."""
    m3u_file = tmp_path / "playlist.m3u"
    m3u_file.write_text(sample_m3u_content, encoding="utf-8")
    return m3u_file


@pytest.fixture
def playlist_transport(sample_m3u_content):
    """Mock HTTP transport serving the settings endpoint and the playlist."""
    def handler(request: httpx.Request) -> httpx.Response:
        if str(request.url) == SETTINGS_URL:
            return httpx.Response(200, json={"m3u_url": PLAYLIST_URL})
        return httpx.Response(200, text=sample_m3u_content)
    return httpx.MockTransport(handler)
