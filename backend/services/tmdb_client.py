"""
TMDB API Client - external movie identifiers and details

TMDB API Documentation: https://developer.themoviedb.org/reference

Authentication:
- Bearer token (TMDB_TOKEN), read access is enough

Endpoints:
- Search: GET /search/movie?query=...&year=...
- Details: GET /movie/{id}?append_to_response=alternative_titles,credits,keywords,release_dates

Caching:
- Details are cached under (endpoint, id, language) with a TTL
- Every live call rewrites the cache entry; ignore_cache forces a live call

Usage:
    from services.tmdb_client import TMDBClient

    client = TMDBClient(token, cache)
    movie_id = client.resolve_id("Samurai Cop", 1991)
    details = client.fetch_details(movie_id)
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import requests

from constants import TMDB_CACHE_NAMESPACE
from scrapers.errors import MetadataLookupError, NotFoundError
from utils.cache_key import build_query_cache_key

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration
# =============================================================================

TMDB_BASE_URL = "https://api.themoviedb.org/3"
DEFAULT_LANGUAGE = "fr-FR"
DETAILS_APPEND = "alternative_titles,credits,keywords,release_dates"
REQUEST_TIMEOUT_SECONDS = 30


@dataclass
class MovieSearchResult:
    id: int
    title: str
    original_title: Optional[str] = None
    release_date: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MovieSearchResult":
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            original_title=data.get("original_title"),
            release_date=data.get("release_date") or None,
        )


@dataclass
class MovieDetails:
    id: int
    title: str
    original_title: Optional[str] = None
    imdb_id: Optional[str] = None
    overview: Optional[str] = None
    release_date: Optional[str] = None
    runtime: Optional[int] = None
    origin_country: List[str] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MovieDetails":
        keywords = (data.get("keywords") or {}).get("keywords") or []
        return cls(
            id=data["id"],
            title=data.get("title", ""),
            original_title=data.get("original_title"),
            imdb_id=data.get("imdb_id"),
            overview=data.get("overview"),
            release_date=data.get("release_date") or None,
            runtime=data.get("runtime"),
            origin_country=data.get("origin_country") or [],
            keywords=[k["name"] for k in keywords if k.get("name")],
            raw=data,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "original_title": self.original_title,
            "imdb_id": self.imdb_id,
            "overview": self.overview,
            "release_date": self.release_date,
            "runtime": self.runtime,
            "origin_country": self.origin_country,
            "keywords": self.keywords,
        }


class TMDBClient:
    """
    TMDB v3 client.

    Features:
    - Title/year search, first result wins
    - Details with TTL cache shared with the page cache backend
    """

    def __init__(
        self,
        token: str,
        cache,
        cache_ttl: int,
        language: str = DEFAULT_LANGUAGE,
        session: Optional[requests.Session] = None,
    ):
        """
        Args:
            token: TMDB bearer token
            cache: Cache backend with get/set/expire
            cache_ttl: Seconds a details answer stays cached
            language: Default response language
        """
        if not token:
            raise MetadataLookupError(
                "TMDB_TOKEN not found. Set TMDB_TOKEN environment variable."
            )
        self.cache = cache
        self.cache_ttl = cache_ttl
        self.language = language
        self._session = session or requests.Session()
        self._session.headers.update({
            "Authorization": f"Bearer {token}",
            "Accept": "application/json",
        })

    def _get(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{TMDB_BASE_URL}{path}"
        logger.debug(f"GET {url} {params}")
        try:
            response = self._session.get(url, params=params, timeout=REQUEST_TIMEOUT_SECONDS)
        except requests.exceptions.RequestException as e:
            raise MetadataLookupError(f"Error fetching {path}: {e}")

        if response.status_code == 404:
            raise NotFoundError(f"TMDB resource {path} not found")
        if not response.ok:
            raise MetadataLookupError(
                f"Error fetching {path}: HTTP {response.status_code} {response.text[:200]}"
            )
        return response.json()

    # =========================================================================
    # Search
    # =========================================================================

    def search_movie(
        self,
        query: str,
        year: Optional[int] = None,
        language: Optional[str] = None,
    ) -> List[MovieSearchResult]:
        params = {
            "query": query,
            "include_adult": "true",
            "language": language or self.language,
        }
        if year:
            params["year"] = year

        data = self._get("/search/movie", params)
        logger.debug(f"Search answer: {data}")
        return [MovieSearchResult.from_dict(r) for r in data.get("results") or []]

    def resolve_id(self, title: str, year: Optional[int] = None) -> int:
        """
        TMDB id of the first search result.

        Raises:
            NotFoundError: If the search returns nothing.
        """
        results = self.search_movie(title, year=year)
        if not results:
            year_text = f' and year "{year}"' if year else ""
            raise NotFoundError(f'Movie with query "{title}"{year_text} not found.')

        logger.debug(f"Movie ID: {results[0].id}")
        return results[0].id

    # =========================================================================
    # Details
    # =========================================================================

    def details_cache_key(self, movie_id: int, language: str) -> str:
        return build_query_cache_key(
            f"{TMDB_CACHE_NAMESPACE}:movie",
            {"id": movie_id, "language": language},
        )

    def fetch_details(
        self,
        movie_id: int,
        ignore_cache: bool = False,
        language: Optional[str] = None,
    ) -> MovieDetails:
        language = language or self.language
        key = self.details_cache_key(movie_id, language)

        if not ignore_cache:
            cached = self.cache.get(key)
            if cached is not None:
                logger.debug(f"Cache hit {key}")
                return MovieDetails.from_dict(json.loads(cached))

        data = self._get(
            f"/movie/{movie_id}",
            {"append_to_response": DETAILS_APPEND, "language": language},
        )
        logger.debug(f"Movie details answer: {data}")

        self.cache.set(key, json.dumps(data))
        self.cache.expire(key, self.cache_ttl)
        return MovieDetails.from_dict(data)
