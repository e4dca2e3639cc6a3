"""
Playlist fetch service.
Resolves the administered playlist URL and downloads the playlist text.
"""
import httpx
import logging
from typing import Optional

from tvlive.config import get_settings
from tvlive.errors import PlaylistFetchError
from tvlive.services.stream_validator import is_valid_stream

logger = logging.getLogger(__name__)


class PlaylistFetcher:
    """Fetch the M3U playlist over HTTP(S)."""

    USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

    def __init__(
        self,
        settings_url: Optional[str] = None,
        default_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.settings_url = settings_url if settings_url is not None else settings.settings_api_url
        self.default_url = default_url or settings.default_m3u_url
        self.timeout = timeout or settings.fetch_timeout_seconds
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=True,
            headers={"User-Agent": self.USER_AGENT},
            transport=self._transport,
        )

    async def resolve_url(self) -> str:
        """
        Ask the settings endpoint for the current playlist URL.

        Falls back to the default URL when no endpoint is configured or it
        cannot be reached. Never raises.
        """
        if not self.settings_url:
            return self.default_url

        try:
            async with self._client() as client:
                response = await client.get(self.settings_url)
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            logger.warning(f"Settings endpoint unreachable, using default playlist URL: {e}")
            return self.default_url
        except ValueError as e:
            logger.warning(f"Settings endpoint returned invalid JSON, using default playlist URL: {e}")
            return self.default_url

        m3u_url = data.get("m3u_url") if isinstance(data, dict) else None
        if not m3u_url:
            return self.default_url
        if not isinstance(m3u_url, str) or not is_valid_stream(m3u_url.strip()):
            logger.warning(f"Settings endpoint returned an invalid playlist URL, using default: {m3u_url!r}")
            return self.default_url
        m3u_url = m3u_url.strip()

        logger.info(f"Playlist URL loaded from settings: {m3u_url}")
        return m3u_url

    async def fetch(self, url: Optional[str] = None) -> str:
        """
        Download playlist text.

        Args:
            url: Playlist URL; resolved through the settings endpoint when omitted

        Raises:
            PlaylistFetchError: on a malformed URL, transport failure, timeout
                or non-2xx status
        """
        url = url or await self.resolve_url()
        logger.info(f"Fetching playlist from {url}")

        try:
            async with self._client() as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise PlaylistFetchError(url, f"HTTP {e.response.status_code}") from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise PlaylistFetchError(url, str(e) or type(e).__name__) from e
        except TypeError as e:
            raise PlaylistFetchError(str(url), f"Invalid URL: {e}") from e

        logger.info(f"Fetched {len(response.content)} bytes from {url}")
        return response.text
