"""
M3U Parser Service.
Parses extended M3U playlists into classified, validated channel records.
"""
import re
from pathlib import Path
from typing import Optional
import logging

from tvlive.models.channel import Channel
from tvlive.services.classifier import ChannelClassifier
from tvlive.services.stream_validator import is_valid_stream

logger = logging.getLogger(__name__)

EXTINF_MARKER = '#EXTINF:'
UNNAMED_CHANNEL = 'Unnamed channel'

# key="value" attributes on the EXTINF line
ATTRIBUTE_PATTERNS = {
    'tvg_id': re.compile(r'tvg-id="([^"]*)"'),
    'tvg_logo': re.compile(r'tvg-logo="([^"]*)"'),
    'group_title': re.compile(r'group-title="([^"]*)"'),
    'tvg_country': re.compile(r'tvg-country="([^"]*)"'),
    'tvg_name': re.compile(r'tvg-name="([^"]*)"'),
}

COLOR_TAG_PATTERN = re.compile(r'\[COLOR[^\]]*\]|\[/COLOR\]', re.IGNORECASE)
ON_MARKER_PATTERN = re.compile(r'\s*\(ON\)\s*', re.IGNORECASE)
OFF_MARKER = '(off)'

# Names that mark a section divider rather than a channel
HEADER_PATTERNS = [
    re.compile(r'^\(.*\)$'),
    re.compile(r'^CANAIS\s+(DE\s+)?', re.IGNORECASE),
    re.compile(r'^TV\s+ABERTA$', re.IGNORECASE),
    re.compile(r'^NOTICIAS$', re.IGNORECASE),
    re.compile(r'^ESPORTES$', re.IGNORECASE),
    re.compile(r'^FILMES$', re.IGNORECASE),
    re.compile(r'^SERIES$', re.IGNORECASE),
    re.compile(r'^INFANTIL$', re.IGNORECASE),
    re.compile(r'^ADULTO$', re.IGNORECASE),
    re.compile(r'^RADIOS?\s*(AM|FM)?', re.IGNORECASE),
    re.compile(r'^WEB\s*TV$', re.IGNORECASE),
    re.compile(r'^TOP\s+MUSICAS$', re.IGNORECASE),
    re.compile(r'^\s*$'),
]


def strip_color_tags(name: str) -> str:
    """Remove [COLOR ...]...[/COLOR] wrapper tags."""
    return COLOR_TAG_PATTERN.sub('', name).strip()


def is_header_line(name: str) -> bool:
    """Check whether a display name is a section header such as '(CANAIS DE FILMES)'."""
    return any(pattern.search(name) for pattern in HEADER_PATTERNS)


class M3UParser:
    """Parse extended M3U playlists."""

    def __init__(self, classifier: Optional[ChannelClassifier] = None):
        self.classifier = classifier or ChannelClassifier()

    def parse(self, content: str) -> list[Channel]:
        """
        Parse playlist text into channels.

        Entries whose name is a section header, that are marked off-air, or
        whose URL line fails validation are dropped. Never raises.

        Args:
            content: Full playlist text

        Returns:
            Channels in playlist order
        """
        channels: list[Channel] = []
        seen_ids: set[str] = set()
        current_info: Optional[dict] = None
        skipped = 0

        for raw_line in (content or '').splitlines():
            line = raw_line.strip()

            if line.startswith(EXTINF_MARKER):
                if current_info is not None:
                    # Previous marker never got a URL line
                    skipped += 1
                current_info = self._parse_extinf(line)
                if current_info is None:
                    skipped += 1

            elif line and not line.startswith('#') and current_info is not None:
                # This is the URL line
                if is_valid_stream(line):
                    channel_id = self._assign_id(current_info['tvg_id'], len(channels), seen_ids)
                    channels.append(self._build_channel(current_info, line, channel_id))
                else:
                    logger.debug(f"Dropping {current_info['name']!r}: invalid stream URL {line!r}")
                    skipped += 1

                current_info = None

        logger.info(f"Parsed {len(channels)} channels ({skipped} entries skipped)")
        return channels

    def parse_file(self, filepath: str | Path) -> list[Channel]:
        """Parse a playlist stored on disk."""
        filepath = Path(filepath)
        if not filepath.exists():
            raise FileNotFoundError(f"M3U file not found: {filepath}")

        logger.info(f"Parsing M3U file: {filepath}")
        return self.parse(filepath.read_text(encoding='utf-8', errors='ignore'))

    def _parse_extinf(self, line: str) -> Optional[dict]:
        """Extract attributes and the display name, or None if the entry must be skipped."""
        attributes = {}
        for key, pattern in ATTRIBUTE_PATTERNS.items():
            match = pattern.search(line)
            attributes[key] = match.group(1) if match else ''

        # Channel name is after the last comma
        name = strip_color_tags(line.split(',')[-1])

        if is_header_line(name):
            return None

        if OFF_MARKER in name.lower():
            return None

        name = ON_MARKER_PATTERN.sub('', name).strip()

        explicit_name = strip_color_tags(attributes['tvg_name'])
        attributes['name'] = explicit_name or name or UNNAMED_CHANNEL
        return attributes

    def _assign_id(self, tvg_id: str, index: int, seen_ids: set[str]) -> str:
        """tvg-id when present, else channel_<index>; suffixed until unique in this pass."""
        channel_id = tvg_id or f"channel_{index}"
        if channel_id in seen_ids:
            channel_id = f"{channel_id}_{index}"
            while channel_id in seen_ids:
                channel_id = f"{channel_id}_"
        seen_ids.add(channel_id)
        return channel_id

    def _build_channel(self, info: dict, url: str, channel_id: str) -> Channel:
        """Classify a completed entry and turn it into a Channel."""
        classification = self.classifier.classify(
            info['group_title'], info['name'], info['tvg_country']
        )
        return Channel(
            id=channel_id,
            name=info['name'],
            logo=info['tvg_logo'],
            category=classification.category,
            country=classification.country,
            url=url,
        )
