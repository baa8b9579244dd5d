"""
Review Reconciler - turns a RawReview into storage-ready fields.

Each sub-entity is resolved with connect-or-create on its natural key:

    users       -> username
    genres      -> title (nested inside the subgenre create)
    subgenres   -> title
    cut videos  -> site id
    escale      -> episode number
    nanaroscope -> S##E## code

The poster goes through the PosterStore, the TMDB id through the metadata
client. Ratings are returned separately because they replace the review's
previous set once the review row exists.
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from models.genre import Genre, Subgenre
from models.user import User
from models.video import CutVideo, EscaleVideo, NanaroscopeVideo
from scrapers.errors import NotFoundError
from scrapers.records import (
    RawCutVideo,
    RawEscaleVideo,
    RawGenre,
    RawNanaroscopeVideo,
    RawReview,
    RawUser,
    RawUserRating,
)

logger = logging.getLogger(__name__)


@dataclass
class ReviewInput:
    """Review columns plus the rating set to install after the upsert."""
    fields: Dict[str, Any]
    ratings: List[Tuple[User, float]] = field(default_factory=list)


class ReviewReconciler:
    """Resolves sub-entities of a scraped review."""

    def __init__(self, store, poster_store, image_fetcher, metadata_client=None):
        """
        Args:
            store: ReviewStore
            poster_store: PosterStore for the poster image
            image_fetcher: ImageFetcher for user avatars
            metadata_client: TMDBClient, or None to skip the TMDB lookup
        """
        self.store = store
        self.poster_store = poster_store
        self.image_fetcher = image_fetcher
        self.metadata_client = metadata_client

    # =========================================================================
    # Sub-entities
    # =========================================================================

    def resolve_user(self, raw: RawUser) -> User:
        def create_fields():
            # Avatar is only downloaded for users we have never seen
            avatar = self.image_fetcher.fetch(raw.avatar_url) if raw.avatar_url else None
            return {"avatar": avatar}

        return self.store.connect_or_create(User, {"username": raw.username}, create_fields)

    def resolve_subgenre(self, subgenre: RawGenre, genre: RawGenre) -> Subgenre:
        def create_fields():
            parent = self.store.connect_or_create(
                Genre, {"title": genre.title}, {"link": genre.link}
            )
            return {"link": subgenre.link, "genre": parent}

        return self.store.connect_or_create(Subgenre, {"title": subgenre.title}, create_fields)

    def resolve_cut_video(self, raw: RawCutVideo) -> CutVideo:
        return self.store.connect_or_create(CutVideo, {"id": raw.id}, {
            "title": raw.title,
            "average_rating": raw.average_rating,
            "media_links": [{"src": link.src, "type": link.type} for link in raw.media_links],
        })

    def resolve_escale_video(self, raw: RawEscaleVideo) -> EscaleVideo:
        return self.store.connect_or_create(EscaleVideo, {"id": raw.id}, {
            "title": raw.title,
            "page_link": raw.page_link,
            "publication_date": raw.publication_date,
        })

    def resolve_nanaroscope_video(self, raw: RawNanaroscopeVideo) -> NanaroscopeVideo:
        return self.store.connect_or_create(
            NanaroscopeVideo,
            {"season_episode_code": raw.season_episode_code},
            {"tagline": raw.tagline},
        )

    def resolve_ratings(self, user_ratings: List[RawUserRating]) -> List[Tuple[User, float]]:
        """(user, value) pairs, skipping entries without a numeric rating."""
        ratings = []
        for entry in user_ratings:
            if not isinstance(entry.rating, (int, float)):
                logger.debug(f"Skipping rating of {entry.user.username}: {entry.rating!r}")
                continue
            ratings.append((self.resolve_user(entry.user), float(entry.rating)))
        return ratings

    def resolve_poster(self, poster_url: str) -> str:
        return self.poster_store.store_from_url(poster_url)

    def resolve_external_id(self, raw: RawReview) -> Optional[int]:
        """TMDB id of the movie, None when TMDB has no match."""
        if self.metadata_client is None:
            return None
        try:
            return self.metadata_client.resolve_id(raw.lookup_title, raw.release_year)
        except NotFoundError as e:
            logger.info(f"No TMDB match for {raw.link}: {e}")
            return None

    # =========================================================================
    # Whole review
    # =========================================================================

    def resolve(self, raw: RawReview) -> ReviewInput:
        # Poster last: nothing after it can fail and strand the file.
        tmdb_id = self.resolve_external_id(raw)
        ratings = self.resolve_ratings(raw.user_ratings)
        fields = {
            "title": raw.title,
            "original_title": raw.original_title,
            "alternative_titles": raw.alternative_titles,
            "directors": raw.directors,
            "release_year": raw.release_year,
            "creation_year": raw.creation_year,
            "origin_countries": raw.origin_countries,
            "runtime_minutes": raw.runtime_minutes,
            "rarity": raw.rarity,
            "average_rating": raw.average_rating,
            "author": self.resolve_user(raw.author),
            "subgenre": self.resolve_subgenre(raw.subgenre, raw.genre),
            "cut_videos": [self.resolve_cut_video(v) for v in raw.cut_videos],
            "escale_videos": [self.resolve_escale_video(v) for v in raw.escale_videos],
            "nanaroscope_videos": [self.resolve_nanaroscope_video(v) for v in raw.nanaroscope_videos],
            "poster_filename": self.resolve_poster(raw.poster_url),
            "tmdb_id": tmdb_id,
        }
        return ReviewInput(fields=fields, ratings=ratings)
