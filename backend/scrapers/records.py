"""
Raw records produced by extraction.

These are ephemeral: built from one rendered chronicle page and handed
straight to the reconciler, never persisted as-is.
"""
from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional

from constants import Rarity


@dataclass
class RawUser:
    username: str
    avatar_url: Optional[str] = None


@dataclass
class RawUserRating:
    user: RawUser
    rating: Optional[float] = None  # None when the page shows no numeric note


@dataclass
class RawGenre:
    title: str
    link: str


@dataclass
class RawMediaLink:
    src: str
    type: str


@dataclass
class RawCutVideo:
    id: int
    title: str
    average_rating: float
    media_links: List[RawMediaLink]


@dataclass
class RawEscaleVideo:
    id: int
    title: str
    page_link: str
    publication_date: date


@dataclass
class RawNanaroscopeVideo:
    season_episode_code: str
    tagline: str


@dataclass
class RawReview:
    """Everything extracted from one chronicle page."""
    link: str
    title: str
    directors: List[str]
    origin_countries: List[str]
    runtime_minutes: int
    rarity: Rarity
    average_rating: float
    author: RawUser
    genre: RawGenre
    subgenre: RawGenre
    poster_url: str
    original_title: Optional[str] = None
    alternative_titles: Optional[List[str]] = None
    release_year: Optional[int] = None
    creation_year: Optional[int] = None
    user_ratings: List[RawUserRating] = field(default_factory=list)
    cut_videos: List[RawCutVideo] = field(default_factory=list)
    escale_videos: List[RawEscaleVideo] = field(default_factory=list)
    nanaroscope_videos: List[RawNanaroscopeVideo] = field(default_factory=list)

    @property
    def lookup_title(self) -> str:
        """Title used for the TMDB search."""
        return self.original_title or self.title


class UpsertOutcome(Enum):
    INSERTED = "inserted"
    UPDATED = "updated"


@dataclass
class ReviewOutcome:
    """Per-item summary returned by the orchestrator."""
    title: str
    id: int
    link: str
    outcome: UpsertOutcome
    release_year: Optional[int] = None
    average_rating: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "release_year": self.release_year,
            "average_rating": self.average_rating,
            "id": self.id,
            "link": self.link,
            "outcome": self.outcome.name,
        }
