"""
Live TV view.

The page-level component: owns the channel registry and the player
controller, reads filter values and writes everything the UI renders into a
ViewState. Mount/unmount bound the lifetime of the player.
"""
import logging
from typing import Any, Optional
from pydantic import BaseModel, Field

from tvlive.errors import PlaylistFetchError
from tvlive.models.channel import Channel, FilterOptions
from tvlive.models.player import Notice, PlayerState
from tvlive.services.channel_service import ChannelService
from tvlive.services.player import PlayerController, PlayerSession

logger = logging.getLogger(__name__)

LOAD_ERROR_MESSAGE = "Could not load the channel list. Please try again later."
NO_MATCHES_MESSAGE = "No channels found. Try adjusting the filters or search."


class ViewState(BaseModel):
    """What the UI surface renders."""
    loading: bool = False
    empty_message: Optional[str] = None
    channels: list[Channel] = Field(default_factory=list)
    channel_count_label: str = "0 channels"
    filter_options: FilterOptions = Field(default_factory=FilterOptions)
    category: str = ""
    country: str = ""
    search: str = ""
    active_channel_id: Optional[str] = None
    now_playing: Optional[Channel] = None
    fullscreen: bool = False
    notifications: list[Notice] = Field(default_factory=list)


class TVView:
    """Live TV page: channel list, filters and the player."""

    def __init__(
        self,
        video: Any,
        engine_factory: Any = None,
        service: Optional[ChannelService] = None,
        engine_config: Optional[dict] = None,
    ):
        self.service = service or ChannelService()
        self.state = ViewState()
        self._video = video
        self._engine_factory = engine_factory
        self._engine_config = engine_config
        self.player = self._new_player()
        self._mounted = False
        self._load_generation = 0

    def _new_player(self) -> PlayerController:
        return PlayerController(
            self._video,
            engine_factory=self._engine_factory,
            engine_config=self._engine_config,
            notify=self._push_notice,
        )

    @property
    def registry(self):
        return self.service.registry

    @property
    def player_state(self) -> PlayerState:
        return self.player.state

    async def mount(self):
        """Load channels and render the initial list."""
        if self.player.closed:
            self.player = self._new_player()
        self._mounted = True
        await self.reload()

    def unmount(self):
        """Destroy the player; late fetch completions no longer touch the view."""
        self._mounted = False
        self._load_generation += 1
        self.player.destroy()

    async def reload(self):
        """Fetch, parse and render the playlist again, replacing the previous channel set."""
        if not self._mounted:
            return

        self._load_generation += 1
        generation = self._load_generation
        self.state.loading = True
        self.state.empty_message = None

        try:
            url = await self.service.fetcher.resolve_url()
            content = await self.service.fetcher.fetch(url)
        except PlaylistFetchError as e:
            logger.error(f"Error loading channels: {e}")
            if generation == self._load_generation:
                self._show_error(LOAD_ERROR_MESSAGE)
            return

        if generation != self._load_generation:
            logger.info("Playlist load superseded by a newer load or an unmount; discarding result")
            return

        channels = self.service.load_text(content, url)
        if not channels:
            self.state.filter_options = FilterOptions()
            self._show_error(LOAD_ERROR_MESSAGE)
            return

        self.state.filter_options = self.registry.populate_filter_options()
        self.state.loading = False
        self.render()

    def set_filters(
        self,
        category: Optional[str] = None,
        country: Optional[str] = None,
        search: Optional[str] = None,
    ):
        """Update whichever filter controls changed and re-render."""
        if category is not None:
            self.state.category = category
        if country is not None:
            self.state.country = country
        if search is not None:
            self.state.search = search
        self.render()

    def clear_search(self):
        self.set_filters(search="")

    def render(self):
        """Write the filtered channel list into the view state."""
        channels = self.registry.filter(self.state.category, self.state.country, self.state.search)
        self.state.channels = channels
        self.state.channel_count_label = f"{len(channels)} {'channel' if len(channels) == 1 else 'channels'}"
        self.state.empty_message = NO_MATCHES_MESSAGE if not channels else None

    def select_channel(self, channel_id: str) -> Optional[PlayerSession]:
        """Play the channel behind a clicked card."""
        if not self._mounted:
            return None

        channel = self.registry.get(channel_id)
        if channel is None:
            logger.warning(f"Selected unknown channel {channel_id}")
            return None

        session = self.player.play(channel)
        self.state.now_playing = channel
        self.state.active_channel_id = channel.id
        self.render()
        return session

    def toggle_fullscreen(self) -> bool:
        self.state.fullscreen = not self.state.fullscreen
        return self.state.fullscreen

    def _show_error(self, message: str):
        self.state.loading = False
        self.state.channels = []
        self.state.channel_count_label = "0 channels"
        self.state.empty_message = message

    def _push_notice(self, notice: Notice):
        self.state.notifications.append(notice)
