"""
Review Store - storage interface over the SQLAlchemy session.

Operations:
- find_by_link / list_links
- upsert(link, fields): create if absent, full-field update otherwise
- delete_ratings_for_review / replace_ratings
- connect_or_create(model, natural_key, defaults): look up by natural key,
  create only if absent

Create collisions surface as ConflictError, updates/deletes of unknown rows
as NotFoundError. The session is committed by the caller.
"""
import logging
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Union

from sqlalchemy.exc import IntegrityError

from models.review import Rating, Review
from models.user import User
from scrapers.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)

Defaults = Union[Dict[str, Any], Callable[[], Dict[str, Any]], None]


class ReviewStore:
    """Persistence for reviews and their sub-entities."""

    def __init__(self, db_session):
        """
        Args:
            db_session: SQLAlchemy database session
        """
        self.db_session = db_session

    # =========================================================================
    # Reviews
    # =========================================================================

    def find_by_link(self, link: str) -> Optional[Review]:
        return self.db_session.query(Review).filter_by(link=link).first()

    def get(self, review_id: int) -> Optional[Review]:
        return self.db_session.get(Review, review_id)

    def list_links(self) -> List[str]:
        return [row.link for row in self.db_session.query(Review.link).all()]

    def upsert(self, link: str, fields: Dict[str, Any]) -> Review:
        """
        Create the review for link, or overwrite every given field.

        A new row gets identical created_at/updated_at; any later save
        moves updated_at, even when no field value changed.
        """
        now = datetime.utcnow()
        existing = self.find_by_link(link)

        if existing:
            for name, value in fields.items():
                setattr(existing, name, value)
            existing.updated_at = now
            self._flush(f"Review {link}")
            logger.debug(f"Updated review: {link}")
            return existing

        review = Review(link=link, created_at=now, updated_at=now, **fields)
        self.db_session.add(review)
        self._flush(f"Review {link}")
        logger.debug(f"Created review: {link}")
        return review

    def update(self, link: str, fields: Dict[str, Any]) -> Review:
        """Update an existing review only."""
        review = self.find_by_link(link)
        if review is None:
            raise NotFoundError(f"Review not found: {link}")
        return self.upsert(link, fields)

    def delete_review(self, link: str) -> Review:
        review = self.find_by_link(link)
        if review is None:
            raise NotFoundError(f"Review not found: {link}")
        self.db_session.delete(review)
        self.db_session.flush()
        return review

    def count_poster_references(self, poster_filename: str, exclude_link: Optional[str] = None) -> int:
        query = self.db_session.query(Review).filter(Review.poster_filename == poster_filename)
        if exclude_link:
            query = query.filter(Review.link != exclude_link)
        return query.count()

    # =========================================================================
    # Ratings
    # =========================================================================

    def delete_ratings_for_review(self, link: str) -> int:
        """Delete every rating of the review at link. Returns the row count."""
        review = self.find_by_link(link)
        if review is None:
            return 0

        deleted = (
            self.db_session.query(Rating)
            .filter(Rating.review_id == review.id)
            .delete(synchronize_session="fetch")
        )
        self.db_session.expire(review, ["ratings"])
        logger.debug(f"Deleted {deleted} ratings of {link}")
        return deleted

    def replace_ratings(self, review: Review, ratings: Iterable[Tuple[User, float]]) -> List[Rating]:
        """
        Replace the review's ratings with the given (user, value) set.

        A user listed twice keeps its last value.
        """
        self.delete_ratings_for_review(review.link)

        by_user: Dict[str, Tuple[User, float]] = {}
        for user, value in ratings:
            by_user[user.username] = (user, value)

        created = []
        for user, value in by_user.values():
            rating = Rating(review=review, user=user, value=value)
            self.db_session.add(rating)
            created.append(rating)

        self._flush(f"Ratings of {review.link}")
        return created

    # =========================================================================
    # Sub-entities
    # =========================================================================

    def find(self, model, **natural_key):
        return self.db_session.query(model).filter_by(**natural_key).first()

    def connect_or_create(self, model, natural_key: Dict[str, Any], defaults: Defaults = None):
        """
        Return the row matching natural_key, creating it if absent.

        Args:
            model: Model class
            natural_key: Unique column(s) identifying the row
            defaults: Extra create fields, or a callable producing them
                      (only evaluated when a row has to be created)

        Raises:
            ConflictError: If the insert collides with an existing row
        """
        existing = self.find(model, **natural_key)
        if existing is not None:
            return existing

        fields = defaults() if callable(defaults) else dict(defaults or {})
        instance = model(**natural_key, **fields)
        self.db_session.add(instance)
        self._flush(f"{model.__name__} {natural_key}")
        logger.debug(f"Created {model.__name__}: {natural_key}")
        return instance

    def _flush(self, what: str) -> None:
        try:
            self.db_session.flush()
        except IntegrityError as e:
            self.db_session.rollback()
            raise ConflictError(f"{what} already exists: {e.orig}") from e

    # =========================================================================
    # Transaction
    # =========================================================================

    def commit(self) -> None:
        self.db_session.commit()

    def rollback(self) -> None:
        self.db_session.rollback()
