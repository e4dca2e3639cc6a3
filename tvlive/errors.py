"""
Domain exceptions for the live TV subsystem.
"""


class PlaylistFetchError(Exception):
    """The playlist (or the settings endpoint behind it) could not be retrieved."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch playlist {url}: {reason}")


class InvalidPlaylistUrlError(ValueError):
    """A playlist URL submitted for storage is not an absolute http(s) URL."""


class AutoplayBlockedError(Exception):
    """Raised by a video element when the platform refuses to start playback without a user gesture."""
