"""
Adaptive Player Controller.

Drives one video element through an adaptive-bitrate engine. Engine and
media events are turned into EngineMessage values and fed through `reduce`,
a pure function returning the next state together with the side effect and
notice it implies. The controller only executes those effects.

Engine contract (duck-typed, supplied by the host):
    engine_factory.is_supported() -> bool
    engine = engine_factory(config)
    engine.load_source(url); engine.attach_media(video)
    engine.on(event, callback)  # callback(event, data)
    engine.recover_media_error(); engine.destroy()

Video element contract:
    video.can_play_type(mime) -> str; video.src
    video.play()  # raises AutoplayBlockedError when autoplay is refused
    video.on(event, callback); video.off(event, callback)
"""
import logging
from typing import Any, Callable, Optional

from tvlive.config import get_settings
from tvlive.errors import AutoplayBlockedError
from tvlive.models.channel import Channel
from tvlive.models.player import (
    Action,
    EngineEvents,
    EngineMessage,
    ErrorTypes,
    MANIFEST_LOAD_ERROR,
    MediaEvents,
    MessageKind,
    NOTICES,
    Notice,
    PlayerState,
    Signal,
    Transition,
    now_playing_notice,
)

logger = logging.getLogger(__name__)

HLS_MIME_TYPE = "application/vnd.apple.mpegurl"


def reduce(state: PlayerState, message: EngineMessage, recovery_attempted: bool = False) -> Transition:
    """
    Compute the next player state for a message.

    Args:
        state: Current session state
        message: Engine or media message
        recovery_attempted: Whether the one-shot media recovery was already used

    Returns:
        Transition with the next state, an optional action and an optional notice
    """
    if state in (PlayerState.IDLE, PlayerState.ERRORED):
        return Transition(state=state)

    kind = message.kind

    if kind in (MessageKind.MANIFEST_PARSED, MessageKind.METADATA_LOADED):
        if state == PlayerState.LOADING:
            return Transition(state=PlayerState.LOADING, action=Action.PLAY)
        return Transition(state=state)

    if kind == MessageKind.PLAYBACK_STARTED:
        return Transition(state=PlayerState.PLAYING)

    if kind == MessageKind.AUTOPLAY_BLOCKED:
        return Transition(state=PlayerState.LOADING, notice=NOTICES[Signal.AUTOPLAY_BLOCKED])

    if kind != MessageKind.ENGINE_ERROR or not message.fatal:
        return Transition(state=state)

    if message.type == ErrorTypes.NETWORK_ERROR:
        if message.details == MANIFEST_LOAD_ERROR:
            return Transition(state=PlayerState.ERRORED, notice=NOTICES[Signal.CHANNEL_UNAVAILABLE])
        return Transition(state=PlayerState.ERRORED, notice=NOTICES[Signal.CONNECTIVITY])

    if message.type == ErrorTypes.MEDIA_ERROR:
        if recovery_attempted:
            # The engine's one-shot recovery did not hold; stay stalled
            return Transition(state=PlayerState.RECOVERING)
        return Transition(state=PlayerState.RECOVERING, action=Action.RECOVER_MEDIA)

    return Transition(state=PlayerState.ERRORED, notice=NOTICES[Signal.CANNOT_PLAY])


def prepare_stream_url(url: str) -> str:
    """Normalize a stream URL before playback; Pluto TV needs a few device parameters."""
    stream_url = url.strip()

    if 'pluto.tv' in stream_url:
        stream_url = stream_url.replace('{PSID}', '').replace('appVersion=unknown', 'appVersion=web')

        if 'deviceType' not in stream_url:
            stream_url += ('&' if '?' in stream_url else '?') + 'deviceType=web'
        if 'deviceMake' not in stream_url:
            stream_url += '&deviceMake=Chrome'

    return stream_url


class PlayerSession:
    """Playback attempt for one selected channel."""

    def __init__(self, channel: Channel, url: str):
        self.channel = channel
        self.url = url
        self.state = PlayerState.LOADING
        self.engine: Any = None
        self.native = False
        self.recovery_attempted = False
        self.last_error: Optional[Signal] = None
        self.media_handlers: list[tuple[str, Callable]] = []


class PlayerController:
    """Owns the video element and at most one live engine instance."""

    def __init__(
        self,
        video: Any,
        engine_factory: Any = None,
        engine_config: Optional[dict] = None,
        notify: Optional[Callable[[Notice], None]] = None,
    ):
        self.video = video
        self.engine_factory = engine_factory
        self.engine_config = engine_config if engine_config is not None else get_settings().engine_config()
        self._notify = notify
        self._session: Optional[PlayerSession] = None
        self._closed = False

    @property
    def session(self) -> Optional[PlayerSession]:
        return self._session

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def state(self) -> PlayerState:
        return self._session.state if self._session else PlayerState.IDLE

    @property
    def current_channel(self) -> Optional[Channel]:
        return self._session.channel if self._session else None

    @property
    def engine(self) -> Any:
        return self._session.engine if self._session else None

    def play(self, channel: Channel) -> PlayerSession:
        """
        Start playback of `channel`, tearing down any previous session first.

        Returns:
            The new session
        """
        if self._closed:
            raise RuntimeError("PlayerController has been destroyed")

        self._teardown()

        session = PlayerSession(channel, prepare_stream_url(channel.url))
        self._session = session
        logger.info(f"Loading stream for {channel.name}: {session.url}")
        self._emit(now_playing_notice(channel.name))

        if self.engine_factory is not None and self.engine_factory.is_supported():
            self._attach_engine(session)
        elif self.video.can_play_type(HLS_MIME_TYPE):
            self._attach_native(session)
        else:
            logger.error("Neither adaptive engine nor native HLS playback is available")
            session.state = PlayerState.ERRORED
            session.last_error = Signal.UNSUPPORTED
            self._emit(NOTICES[Signal.UNSUPPORTED])

        return session

    def destroy(self):
        """Tear down the active session; callbacks arriving afterwards are ignored."""
        self._teardown()
        self._closed = True

    def _attach_engine(self, session: PlayerSession):
        engine = self.engine_factory(self.engine_config)
        session.engine = engine

        engine.on(EngineEvents.MANIFEST_PARSED, lambda event, data=None: self._dispatch(
            session, EngineMessage(kind=MessageKind.MANIFEST_PARSED)
        ))
        engine.on(EngineEvents.ERROR, lambda event, data=None: self._on_engine_error(session, data or {}))
        self._listen(session, MediaEvents.PLAYING, lambda *args: self._dispatch(
            session, EngineMessage(kind=MessageKind.PLAYBACK_STARTED)
        ))

        engine.load_source(session.url)
        engine.attach_media(self.video)

    def _attach_native(self, session: PlayerSession):
        session.native = True
        self.video.src = session.url
        self._listen(session, MediaEvents.LOADED_METADATA, lambda *args: self._dispatch(
            session, EngineMessage(kind=MessageKind.METADATA_LOADED)
        ))

    def _listen(self, session: PlayerSession, event: str, callback: Callable):
        self.video.on(event, callback)
        session.media_handlers.append((event, callback))

    def _on_engine_error(self, session: PlayerSession, data: dict):
        message = EngineMessage(
            kind=MessageKind.ENGINE_ERROR,
            type=data.get("type"),
            details=data.get("details"),
            fatal=bool(data.get("fatal")),
        )
        if message.fatal:
            logger.error(f"Fatal engine error on {session.channel.name}: {message.type} / {message.details}")
        else:
            logger.warning(f"Engine warning: {message.details}")
        self._dispatch(session, message)

    def _dispatch(self, session: PlayerSession, message: EngineMessage):
        """Feed a message through the reducer for `session` and run its effects."""
        if self._closed or session is not self._session:
            logger.debug(f"Ignoring {message.kind.value} from a stale session")
            return

        transition = reduce(session.state, message, session.recovery_attempted)
        session.state = transition.state

        if transition.notice is not None:
            if transition.notice.level == "error":
                session.last_error = transition.notice.signal
            if transition.notice.signal == Signal.CHANNEL_UNAVAILABLE:
                logger.warning(f"Channel blocked or offline: {session.channel.name}")
            self._emit(transition.notice)

        if transition.action == Action.PLAY:
            self._start_playback(session)
        elif transition.action == Action.RECOVER_MEDIA:
            logger.warning("Trying to recover from media error...")
            session.recovery_attempted = True
            session.engine.recover_media_error()

    def _start_playback(self, session: PlayerSession):
        try:
            self.video.play()
        except AutoplayBlockedError as e:
            logger.info(f"Autoplay blocked: {e}")
            self._dispatch(session, EngineMessage(kind=MessageKind.AUTOPLAY_BLOCKED))
            return
        self._dispatch(session, EngineMessage(kind=MessageKind.PLAYBACK_STARTED))

    def _teardown(self):
        session = self._session
        if session is None:
            return

        # Detach first so callbacks fired during destroy() see a stale session
        self._session = None

        for event, callback in session.media_handlers:
            self.video.off(event, callback)
        session.media_handlers.clear()

        if session.engine is not None:
            engine, session.engine = session.engine, None
            engine.destroy()
        elif session.native:
            self.video.src = ""

    def _emit(self, notice: Notice):
        if self._notify is not None:
            self._notify(notice)
