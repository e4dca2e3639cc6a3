"""
Channel registry.
Holds the channels of the current playlist and answers filter/search queries.
"""
from typing import Iterable, Optional
import logging

from tvlive.models.channel import Channel, FilterOptions

logger = logging.getLogger(__name__)


class ChannelRegistry:
    """Session-scoped, read-mostly store of parsed channels."""

    def __init__(self, channels: Optional[Iterable[Channel]] = None):
        self._channels: tuple[Channel, ...] = ()
        self._by_id: dict[str, Channel] = {}
        if channels is not None:
            self.replace(channels)

    def replace(self, channels: Iterable[Channel]):
        """Swap in a new channel set wholesale. Prior contents are discarded, never merged."""
        self._channels = tuple(channels)
        self._by_id = {ch.id: ch for ch in self._channels}
        logger.info(f"Registry now holds {len(self._channels)} channels")

    @property
    def channels(self) -> tuple[Channel, ...]:
        return self._channels

    def __len__(self) -> int:
        return len(self._channels)

    def get(self, channel_id: str) -> Optional[Channel]:
        return self._by_id.get(channel_id)

    def populate_filter_options(self) -> FilterOptions:
        """Distinct sorted categories and countries present in the registry."""
        return FilterOptions(
            categories=sorted({ch.category for ch in self._channels}),
            countries=sorted({ch.country for ch in self._channels}),
        )

    def filter(
        self,
        category: Optional[str] = None,
        country: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[Channel]:
        """
        Channels matching every non-empty criterion, in registry order.

        Args:
            category: exact category label
            country: exact country label
            search: case-insensitive substring of the channel name
        """
        term = (search or '').strip().lower()

        return [
            ch for ch in self._channels
            if (not category or ch.category == category)
            and (not country or ch.country == country)
            and (not term or term in ch.name.lower())
        ]
