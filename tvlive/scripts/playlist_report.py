#!/usr/bin/env python3
"""
Playlist Report Script

Fetches (or reads) an M3U playlist, runs it through the parser and
classifier, and summarizes what the TV page would show:
- Channels per category
- Channels per country
- Optionally the filtered channel list

Usage:
    python -m tvlive.scripts.playlist_report
    python -m tvlive.scripts.playlist_report --file playlist.m3u --category Sports
    python -m tvlive.scripts.playlist_report --url https://example.com/list.m3u8 -o report.json
"""

import asyncio
import argparse
import json
import logging
from collections import Counter
from pathlib import Path
from typing import Optional

from tvlive.errors import PlaylistFetchError
from tvlive.models.channel import Channel
from tvlive.services.channel_service import ChannelService

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def build_report(
    channels: list[Channel],
    matches: list[Channel],
    source: Optional[str],
) -> dict:
    """Summarize parsed channels and the subset matching the filters."""
    return {
        "source": source,
        "total_channels": len(channels),
        "by_category": dict(Counter(ch.category for ch in channels).most_common()),
        "by_country": dict(Counter(ch.country for ch in channels).most_common()),
        "matches": [ch.model_dump() for ch in matches],
    }


def print_summary(report: dict, show_channels: bool):
    """Print a readable summary."""
    print("\n" + "=" * 60)
    print(f"PLAYLIST REPORT: {report['source']}")
    print("=" * 60)
    print(f"Total channels: {report['total_channels']}")

    print("\nBy category:")
    for category, count in report["by_category"].items():
        print(f"  {category:<20} {count:>6}")

    print("\nBy country:")
    for country, count in report["by_country"].items():
        print(f"  {country:<20} {count:>6}")

    print(f"\nMatching channels: {len(report['matches'])}")
    if show_channels:
        for ch in report["matches"]:
            print(f"  [{ch['category']}/{ch['country']}] {ch['name']} -> {ch['url']}")


async def load_channels(service: ChannelService, url: Optional[str], file: Optional[str]) -> Optional[str]:
    """Load the registry from a file or URL; returns the source used."""
    if file:
        service.registry.replace(service.parser.parse_file(file))
        service.playlist_url = file
        return file

    url = url or await service.fetcher.resolve_url()
    await service.load(url)
    return url


async def main(argv: Optional[list[str]] = None):
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Summarize an M3U playlist")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--url", "-u", type=str, default=None, help="Playlist URL (default: configured URL)")
    source.add_argument("--file", "-f", type=str, default=None, help="Local playlist file")
    parser.add_argument("--category", type=str, default=None, help="Filter by category")
    parser.add_argument("--country", type=str, default=None, help="Filter by country")
    parser.add_argument("--search", "-s", type=str, default=None, help="Search channel names")
    parser.add_argument("--list", "-l", action="store_true", help="Print matching channels")
    parser.add_argument("--output", "-o", type=str, default=None, help="Write the JSON report to this path")

    args = parser.parse_args(argv)

    service = ChannelService()
    try:
        source_used = await load_channels(service, args.url, args.file)
    except (PlaylistFetchError, OSError) as e:
        logger.error(str(e))
        print("Report failed - playlist could not be fetched")
        return 1

    channels = list(service.registry.channels)
    matches = service.registry.filter(args.category, args.country, args.search)
    report = build_report(channels, matches, source_used)

    print_summary(report, args.list)

    if args.output:
        Path(args.output).parent.mkdir(parents=True, exist_ok=True)
        with open(args.output, "w", encoding="utf-8") as f:
            json.dump(report, f, indent=2, ensure_ascii=False)
        print(f"\n📄 Full report saved to: {args.output}")

    return 0


if __name__ == "__main__":
    raise SystemExit(asyncio.run(main()))
