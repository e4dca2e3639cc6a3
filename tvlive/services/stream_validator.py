"""
Stream URL validation.
Purely syntactic: playability is only known once the player loads the manifest.
"""
from typing import Optional
from urllib.parse import urlsplit

MIN_URL_LENGTH = 10
MIN_HOST_LENGTH = 3


def is_valid_stream(url: Optional[str]) -> bool:
    """Return True if `url` looks like an absolute http(s) stream endpoint."""
    if not url or len(url) < MIN_URL_LENGTH:
        return False

    if not url.startswith(("http://", "https://")):
        return False

    try:
        parts = urlsplit(url)
        # Accessing .port raises ValueError on a malformed port
        parts.port
    except ValueError:
        return False

    hostname = parts.hostname
    if not hostname or len(hostname) < MIN_HOST_LENGTH:
        return False

    return True
