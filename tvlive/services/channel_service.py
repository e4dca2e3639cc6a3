"""
Channel loading service.
Fetches the playlist, parses it and swaps the result into the registry.
"""
import logging
from typing import Optional

from tvlive.models.channel import Channel
from tvlive.services.m3u_parser import M3UParser
from tvlive.services.playlist_fetcher import PlaylistFetcher
from tvlive.services.registry import ChannelRegistry

logger = logging.getLogger(__name__)


class ChannelService:
    """Fetch -> parse/classify/validate -> registry pipeline."""

    def __init__(
        self,
        fetcher: Optional[PlaylistFetcher] = None,
        parser: Optional[M3UParser] = None,
        registry: Optional[ChannelRegistry] = None,
    ):
        self.fetcher = fetcher or PlaylistFetcher()
        self.parser = parser or M3UParser()
        self.registry = registry if registry is not None else ChannelRegistry()
        self.playlist_url: Optional[str] = None

    async def load(self, url: Optional[str] = None) -> list[Channel]:
        """
        Load the playlist and replace the registry contents.

        Args:
            url: Playlist URL; resolved through the fetcher when omitted

        Returns:
            The parsed channels (possibly empty)

        Raises:
            PlaylistFetchError: if the playlist cannot be downloaded; the
                registry is left untouched in that case
        """
        url = url or await self.fetcher.resolve_url()
        content = await self.fetcher.fetch(url)
        return self.load_text(content, url)

    def load_text(self, content: str, source: Optional[str] = None) -> list[Channel]:
        """Parse already-fetched playlist text into the registry."""
        channels = self.parser.parse(content)
        self.registry.replace(channels)
        self.playlist_url = source

        if not channels:
            logger.warning(f"No channels found in playlist {source or ''}".rstrip())
        else:
            logger.info(f"📺 Loaded {len(channels)} channels from {source or 'playlist text'}")
        return channels


# Singleton
_channel_service: Optional[ChannelService] = None


def get_channel_service() -> ChannelService:
    """Get or create channel service singleton."""
    global _channel_service
    if _channel_service is None:
        _channel_service = ChannelService()
    return _channel_service
