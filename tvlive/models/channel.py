"""
Channel data models.
Maps to the entries of an extended M3U playlist.
"""
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class Category(str, Enum):
    """Fixed channel taxonomy."""
    TV_OPEN = "TV-Open"
    NEWS = "News"
    SPORTS = "Sports"
    MOVIES = "Movies"
    SERIES = "Series"
    KIDS = "Kids"
    DOCUMENTARY = "Documentary"
    RELIGIOUS = "Religious"
    MUSIC = "Music"
    VARIETY = "Variety"
    ENTERTAINMENT = "Entertainment"
    ADULT = "Adult"
    RADIO = "Radio"
    WEBTV = "WebTV"
    OTHER = "Other"


class Channel(BaseModel):
    """One playable channel parsed from a playlist."""
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    logo: str = ""
    category: str = Category.OTHER.value
    country: str
    url: str


class Classification(BaseModel):
    """Result of the category/country heuristics for one channel."""
    category: str
    country: str


class FilterOptions(BaseModel):
    """Distinct filter values present in the registry."""
    categories: list[str] = Field(default_factory=list)
    countries: list[str] = Field(default_factory=list)


# Response models for API
class ChannelListResponse(BaseModel):
    """Filtered channel list response."""
    channels: list[Channel]
    total: int
    category: Optional[str] = None
    country: Optional[str] = None
    search: Optional[str] = None


class ReloadResponse(BaseModel):
    """Outcome of a playlist (re)load."""
    url: str
    channels: int
    categories: int
    countries: int
