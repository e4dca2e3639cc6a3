"""
Tests for the channel registry and filtering.
"""
import itertools

import pytest

from tvlive.models.channel import Channel
from tvlive.services.registry import ChannelRegistry


def make_channel(idx, name, category, country):
    return Channel(
        id=f"ch{idx}",
        name=name,
        category=category,
        country=country,
        url=f"https://example.com/{idx}.m3u8",
    )


@pytest.fixture
def channels():
    return [
        make_channel(1, "Globo SP", "TV-Open", "Brasil"),
        make_channel(2, "SporTV Globo", "Sports", "Brasil"),
        make_channel(3, "Premiere GLOBO", "Sports", "Brasil"),
        make_channel(4, "ESPN", "Sports", "Brasil"),
        make_channel(5, "Globo Sports Intl", "Sports", "Portugal"),
        make_channel(6, "GloboNews", "News", "Brasil"),
        make_channel(7, "TyC Sports", "Sports", "Argentina"),
    ]


@pytest.fixture
def registry(channels):
    return ChannelRegistry(channels)


class TestChannelRegistry:

    def test_filter_composition(self, registry, channels):
        """Result is exactly the channels satisfying all three predicates."""
        result = registry.filter(category="Sports", country="Brasil", search="globo")

        expected = [
            ch for ch in channels
            if ch.category == "Sports" and ch.country == "Brasil" and "globo" in ch.name.lower()
        ]
        assert result == expected
        assert [ch.id for ch in result] == ["ch2", "ch3"]
        assert len({ch.id for ch in result}) == len(result)

    @pytest.mark.parametrize("category,country,search", list(itertools.product(
        [None, "", "Sports", "News"], [None, "Brasil", "Argentina"], [None, "", "globo", "SPORTS"]
    )))
    def test_filter_matches_predicates(self, registry, channels, category, country, search):
        result = registry.filter(category, country, search)
        for ch in channels:
            matches = (
                (not category or ch.category == category)
                and (not country or ch.country == country)
                and (not search or search.lower() in ch.name.lower())
            )
            assert (ch in result) == matches

    def test_no_criteria_returns_everything(self, registry, channels):
        assert registry.filter() == channels

    def test_search_matches_name_only(self, registry):
        assert registry.filter(search="brasil") == []

    def test_filter_is_pure(self, registry, channels):
        before = list(registry.channels)
        registry.filter(category="Sports")
        registry.filter(search="espn")
        assert list(registry.channels) == before == channels

    def test_populate_filter_options(self, registry):
        options = registry.populate_filter_options()
        assert options.categories == ["News", "Sports", "TV-Open"]
        assert options.countries == ["Argentina", "Brasil", "Portugal"]

    def test_replace_is_wholesale(self, registry):
        registry.replace([make_channel(99, "Only One", "Other", "Brasil")])

        assert len(registry) == 1
        assert registry.get("ch1") is None
        assert registry.get("ch99").name == "Only One"

    def test_empty_registry(self):
        registry = ChannelRegistry()
        assert len(registry) == 0
        assert registry.filter(category="Sports") == []
        assert registry.populate_filter_options().categories == []
