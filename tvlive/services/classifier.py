"""
Channel Classifier Service.
Assigns a category and a country to playlist entries using keyword heuristics.

Both axes are resolved through ordered rule tables of (predicate, value)
pairs: the first predicate that matches wins. Misclassification is harmless,
so nothing here raises.
"""
import re
from typing import Callable, Optional
import logging

from tvlive.config import get_settings
from tvlive.models.channel import Category, Classification

logger = logging.getLogger(__name__)

Predicate = Callable[[str], bool]
Rule = tuple[Predicate, str]


def contains_any(*keywords: str) -> Predicate:
    """Predicate matching when any keyword is a substring of the (lowercased) text."""
    def predicate(text: str) -> bool:
        return any(keyword in text for keyword in keywords)
    return predicate


def contains_word(*words: str) -> Predicate:
    """Predicate matching when any of `words` appears as a whole word."""
    pattern = re.compile(r'\b(?:' + '|'.join(re.escape(w) for w in words) + r')\b')

    def predicate(text: str) -> bool:
        return pattern.search(text) is not None
    return predicate


# Group-title labels (Portuguese and English synonyms), matched as substrings.
GROUP_RULES: list[Rule] = [
    (contains_any('tv aberta', 'canal aberto', 'canais abertos', 'abertos', 'abertas'), Category.TV_OPEN.value),
    (contains_any('noticias', 'notícias', 'jornalismo', 'news'), Category.NEWS.value),
    (contains_any('esportes', 'esporte', 'sports', 'sport'), Category.SPORTS.value),
    (contains_any('filmes', 'filme', 'movies', 'cinema', 'cine'), Category.MOVIES.value),
    (contains_any('series', 'série'), Category.SERIES.value),
    (contains_any('infantil', 'kids', 'desenhos'), Category.KIDS.value),
    (contains_any('documentarios', 'documentário', 'documentary'), Category.DOCUMENTARY.value),
    (contains_any('religioso', 'religiosos', 'gospel'), Category.RELIGIOUS.value),
    (contains_any('musica', 'música', 'music'), Category.MUSIC.value),
    (contains_any('variedades'), Category.VARIETY.value),
    (contains_any('entretenimento'), Category.ENTERTAINMENT.value),
    (contains_any('adulto', 'adult', '+18'), Category.ADULT.value),
    (contains_any('radio', 'rádio'), Category.RADIO.value),
    (contains_any('web tv', 'webtv'), Category.WEBTV.value),
]

# Fallback when the group is empty or unknown: keywords in the channel name.
NAME_RULES: list[Rule] = [
    (contains_any('news', 'noticias', 'cnn', 'jornal'), Category.NEWS.value),
    (contains_any('sport', 'espn', 'futebol', 'combate'), Category.SPORTS.value),
    (contains_any('music', 'mtv', 'musica'), Category.MUSIC.value),
    (contains_any('kids', 'cartoon', 'nick', 'disney', 'infantil'), Category.KIDS.value),
    (contains_any('movie', 'cine', 'film', 'hbo', 'telecine'), Category.MOVIES.value),
    (contains_any('document', 'discovery', 'nat geo', 'history'), Category.DOCUMENTARY.value),
    (contains_any('canção nova', 'aparecida', 'rede vida', 'gospel'), Category.RELIGIOUS.value),
    (contains_any('globo', 'sbt', 'record', 'band', 'redetv'), Category.TV_OPEN.value),
]

# Brazilian state abbreviations, matched as whole words ("Globo SP", "EPTV MG").
BRAZILIAN_STATES = (
    'sp', 'rj', 'mg', 'ba', 'rs', 'pr', 'sc', 'pe', 'ce', 'pa', 'ma', 'go', 'pb', 'am',
    'es', 'rn', 'al', 'pi', 'mt', 'ms', 'se', 'ro', 'to', 'ac', 'ap', 'rr', 'df',
)

BRAZILIAN_BROADCASTERS = (
    'globo', 'sbt', 'record', 'band', 'redetv', 'cultura', 'tv brasil', 'canção nova',
    'aparecida', 'rede vida', 'jovem pan', 'cbn',
)

FOREIGN_RULES: list[Rule] = [
    (lambda name: contains_any('portugal')(name) or contains_word('tvi', 'rtp', 'sic')(name), 'Portugal'),
    (contains_any('usa', 'american', 'cnn', 'fox news'), 'EUA'),
    (contains_any('france', 'tf1', 'france 2'), 'França'),
    (contains_any('espanha', 'spain', 'antena 3'), 'Espanha'),
]


def first_match(rules: list[Rule], text: str) -> Optional[str]:
    """Evaluate `rules` in order and return the value of the first matching predicate."""
    for predicate, value in rules:
        if predicate(text):
            return value
    return None


class ChannelClassifier:
    """Resolve category and country for playlist entries."""

    def __init__(self, home_country: Optional[str] = None):
        self.home_country = home_country or get_settings().home_country
        self.country_rules: list[Rule] = [
            (contains_word(*BRAZILIAN_STATES), self.home_country),
            (contains_any(*BRAZILIAN_BROADCASTERS), self.home_country),
            *FOREIGN_RULES,
        ]

    def detect_category(self, declared_group: str, channel_name: str) -> str:
        """Group label first, then name keywords, then Other."""
        group = (declared_group or '').strip().lower()
        if group:
            category = first_match(GROUP_RULES, group)
            if category:
                return category

        name = (channel_name or '').lower()
        return first_match(NAME_RULES, name) or Category.OTHER.value

    def detect_country(self, channel_name: str, declared_country: str = '') -> str:
        """Declared tvg-country wins, then name heuristics, then the home country."""
        if declared_country and declared_country.strip():
            return declared_country.strip()

        name = (channel_name or '').lower()
        return first_match(self.country_rules, name) or self.home_country

    def classify(self, declared_group: str, channel_name: str, declared_country: str = '') -> Classification:
        """
        Classify a channel.

        Args:
            declared_group: group-title attribute from the playlist (may be empty)
            channel_name: normalized display name
            declared_country: tvg-country attribute from the playlist (may be empty)

        Returns:
            Classification with category and country
        """
        return Classification(
            category=self.detect_category(declared_group, channel_name),
            country=self.detect_country(channel_name, declared_country),
        )
