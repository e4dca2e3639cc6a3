"""
Player session models.
States, engine messages and user-facing notices exchanged by the player controller.
"""
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict


class PlayerState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    PLAYING = "playing"
    RECOVERING = "recovering"
    ERRORED = "errored"


class EngineEvents:
    """Event names emitted by the adaptive engine."""
    MANIFEST_PARSED = "hlsManifestParsed"
    ERROR = "hlsError"


class ErrorTypes:
    """Error categories reported in engine error payloads."""
    NETWORK_ERROR = "networkError"
    MEDIA_ERROR = "mediaError"
    KEY_SYSTEM_ERROR = "keySystemError"
    MUX_ERROR = "muxError"
    OTHER_ERROR = "otherError"


MANIFEST_LOAD_ERROR = "manifestLoadError"


class MediaEvents:
    """Events emitted by the video element."""
    LOADED_METADATA = "loadedmetadata"
    PLAYING = "playing"


class MessageKind(str, Enum):
    MANIFEST_PARSED = "manifest_parsed"
    METADATA_LOADED = "metadata_loaded"
    ENGINE_ERROR = "engine_error"
    PLAYBACK_STARTED = "playback_started"
    AUTOPLAY_BLOCKED = "autoplay_blocked"


class EngineMessage(BaseModel):
    """A single input to the player reducer."""
    model_config = ConfigDict(frozen=True)

    kind: MessageKind
    type: Optional[str] = None
    details: Optional[str] = None
    fatal: bool = False


class Action(str, Enum):
    """Side effect the controller must perform after a transition."""
    PLAY = "play"
    RECOVER_MEDIA = "recover_media"


class Signal(str, Enum):
    NOW_PLAYING = "now_playing"
    AUTOPLAY_BLOCKED = "autoplay_blocked"
    CHANNEL_UNAVAILABLE = "channel_unavailable"
    CONNECTIVITY = "connectivity"
    CANNOT_PLAY = "cannot_play"
    UNSUPPORTED = "unsupported"


class Notice(BaseModel):
    """Transient in-app notification (toast)."""
    model_config = ConfigDict(frozen=True)

    signal: Signal
    level: str
    message: str


NOTICES = {
    Signal.AUTOPLAY_BLOCKED: Notice(
        signal=Signal.AUTOPLAY_BLOCKED, level="info",
        message="Click the player to start playback",
    ),
    Signal.CHANNEL_UNAVAILABLE: Notice(
        signal=Signal.CHANNEL_UNAVAILABLE, level="error",
        message="Channel unavailable. It may be off the air or blocked.",
    ),
    Signal.CONNECTIVITY: Notice(
        signal=Signal.CONNECTIVITY, level="error",
        message="Connection error. Check your internet connection.",
    ),
    Signal.CANNOT_PLAY: Notice(
        signal=Signal.CANNOT_PLAY, level="error",
        message="This channel cannot be played",
    ),
    Signal.UNSUPPORTED: Notice(
        signal=Signal.UNSUPPORTED, level="error",
        message="Your browser does not support video playback",
    ),
}


def now_playing_notice(channel_name: str) -> Notice:
    return Notice(signal=Signal.NOW_PLAYING, level="success", message=f"Now playing: {channel_name}")


class Transition(BaseModel):
    """Reducer output: next state plus the effect and notice it implies."""
    model_config = ConfigDict(frozen=True)

    state: PlayerState
    action: Optional[Action] = None
    notice: Optional[Notice] = None
