"""
Ingestion Orchestrator - Coordinates discovery, extraction and upsert.

Responsibilities:
1. Discovers chronicle links on the index page (cache-aware)
2. Filters them against the links already stored
3. Drives fetch -> extract -> reconcile -> upsert for each candidate
4. Classifies each upsert as INSERTED or UPDATED
5. Tracks batch runs in ingestion_runs

Processing is strictly sequential: one page at a time, with a blocking
delay between items. Any error on an item aborts the rest of the batch;
items already committed stay committed.
"""
import logging
import time
from enum import Enum
from typing import Any, Dict, List, Optional

from .base import BaseScraper
from .errors import AssetStorageError, ExtractionError
from .models import IngestionRun
from .records import ReviewOutcome, UpsertOutcome

logger = logging.getLogger(__name__)


class BatchState(Enum):
    DISCOVERING = "discovering"
    FILTERING = "filtering"
    FETCHING_ITEM = "fetching_item"
    RECONCILING = "reconciling"
    UPSERTING = "upserting"
    DONE = "done"
    ABORTED = "aborted"


def classify_outcome(review) -> UpsertOutcome:
    """INSERTED while the row has never been saved twice."""
    return UpsertOutcome.UPDATED if review.was_updated else UpsertOutcome.INSERTED


class ReviewIngestionOrchestrator:
    """
    Main orchestrator for chronicle ingestion.

    Coordinates:
    - RenderCache for the index and chronicle pages
    - The site scraper for link discovery and field extraction
    - ReviewReconciler for sub-entities, poster and TMDB id
    - ReviewStore for the upsert and the rating replacement
    """

    def __init__(
        self,
        render_cache,
        scraper: BaseScraper,
        reconciler,
        store,
        poster_store=None,
        page_ttl: Optional[int] = None,
        sleep=time.sleep,
    ):
        """
        Initialize orchestrator.

        Args:
            render_cache: RenderCache used for every page load
            scraper: Site scraper (NanarlandScraper)
            reconciler: ReviewReconciler
            store: ReviewStore (its session is committed per item)
            poster_store: PosterStore, used to drop posters no review references
            page_ttl: Cache TTL for rendered pages (render cache default if None)
            sleep: Blocking pause between items
        """
        self.render_cache = render_cache
        self.scraper = scraper
        self.reconciler = reconciler
        self.store = store
        self.poster_store = poster_store
        self.page_ttl = page_ttl
        self.sleep = sleep
        self.state: Optional[BatchState] = None

    @property
    def db_session(self):
        return self.store.db_session

    def _enter(self, state: BatchState):
        logger.debug(f"Batch state: {self.state.value if self.state else None} -> {state.value}")
        self.state = state

    # =========================================================================
    # Discovery
    # =========================================================================

    def discover_links(self, ignore_cache: bool = False) -> List[str]:
        """Every chronicle link listed on the index page, in page order."""
        self._enter(BatchState.DISCOVERING)
        url = self.scraper.index_url
        document = self.render_cache.load(url, ttl=self.page_ttl, ignore_cache=ignore_cache)
        try:
            links = self.scraper.extract_links(document)
        except ExtractionError as e:
            raise e.with_url(url)
        logger.info(f"Found {len(links)} links on {url}")
        return links

    def select_candidates(self, links: List[str], update: bool = False) -> List[str]:
        """
        Links to process.

        Without update, links already stored are skipped so a rerun only
        picks up new chronicles.
        """
        self._enter(BatchState.FILTERING)
        if update:
            return list(links)

        existing = set(self.store.list_links())
        candidates = [link for link in links if link not in existing]
        logger.info(f"{len(existing)} links already stored, {len(candidates)} new")
        return candidates

    # =========================================================================
    # Single item
    # =========================================================================

    def _process(self, link: str, ignore_cache: bool) -> ReviewOutcome:
        self._enter(BatchState.FETCHING_ITEM)
        document = self.render_cache.load(link, ttl=self.page_ttl, ignore_cache=ignore_cache)
        try:
            raw = self.scraper.extract(document)
        except ExtractionError as e:
            raise e.with_url(link)

        self._enter(BatchState.RECONCILING)
        review_input = self.reconciler.resolve(raw)
        new_poster = review_input.fields.get("poster_filename")

        self._enter(BatchState.UPSERTING)
        try:
            previous = self.store.find_by_link(link)
            previous_poster = previous.poster_filename if previous else None

            review = self.store.upsert(link, review_input.fields)
            self.store.replace_ratings(review, review_input.ratings)
            stale_poster = self._stale_poster(previous_poster, review.poster_filename, link)
            self.store.commit()
        except Exception:
            self.store.rollback()
            self._discard_poster(new_poster)
            raise

        self._remove_poster(stale_poster)

        outcome = ReviewOutcome(
            title=review.title,
            id=review.id,
            link=review.link,
            outcome=classify_outcome(review),
            release_year=review.release_year,
            average_rating=review.average_rating,
        )
        logger.info(f"{outcome.outcome.name} {outcome.title} ({outcome.link})")
        return outcome

    # =========================================================================
    # Posters (files are only removed once the database agrees)
    # =========================================================================

    def _stale_poster(self, old: Optional[str], new: Optional[str], link: str) -> Optional[str]:
        """The previous poster if no other review references it anymore."""
        if self.poster_store is None or not old or old == new:
            return None
        if self.store.count_poster_references(old, exclude_link=link):
            return None
        return old

    def _remove_poster(self, filename: Optional[str]):
        if not filename or not self.poster_store.exists(filename):
            return
        try:
            self.poster_store.delete(filename)
        except AssetStorageError as e:
            logger.warning(f"Poster {filename} left on disk: {e}")
            return
        logger.info(f"Removed unreferenced poster {filename}")

    def _discard_poster(self, filename: Optional[str]):
        """After a rollback, drop a poster stored for the failed item."""
        if self.poster_store is None or not filename:
            return
        if self.store.count_poster_references(filename):
            return
        self._remove_poster(filename)

    def fetch_and_upsert_review(self, link: str, ignore_cache: bool = False) -> ReviewOutcome:
        """
        Ingest a single chronicle.

        Raises:
            IngestionError: Any failure, after rolling back the item
        """
        try:
            outcome = self._process(link, ignore_cache)
        except Exception:
            self._enter(BatchState.ABORTED)
            self.store.rollback()
            raise
        self._enter(BatchState.DONE)
        return outcome

    # =========================================================================
    # Batch
    # =========================================================================

    def fetch_and_upsert_reviews(
        self,
        delay: float,
        max_count: Optional[int] = None,
        update: bool = False,
        ignore_cache: bool = False,
        triggered_by: str = "manual",
    ) -> List[ReviewOutcome]:
        """
        Ingest every candidate chronicle.

        Args:
            delay: Seconds to wait between two items
            max_count: Process at most this many candidates
            update: Reprocess links already stored
            ignore_cache: Render every page live
            triggered_by: 'manual', 'cli' or 'api'

        Returns:
            Outcomes in processing order
        """
        run = IngestionRun(
            scraper_name=self.scraper.SCRAPER_NAME,
            source_domain=self.scraper.SOURCE_DOMAIN,
            config_snapshot={
                "delay": delay,
                "max_count": max_count,
                "update": update,
                "ignore_cache": ignore_cache,
            },
            triggered_by=triggered_by,
        )
        run.start()
        self.db_session.add(run)
        self.db_session.commit()

        stats: Dict[str, Any] = {
            "links_discovered": 0,
            "candidates": 0,
            "items_inserted": 0,
            "items_updated": 0,
        }
        outcomes: List[ReviewOutcome] = []
        current_link = None

        try:
            links = self.discover_links(ignore_cache=ignore_cache)
            stats["links_discovered"] = len(links)

            candidates = self.select_candidates(links, update=update)
            if max_count is not None:
                candidates = candidates[:max_count]
            stats["candidates"] = len(candidates)

            for index, link in enumerate(candidates):
                current_link = link
                logger.info(f"[{index + 1}/{len(candidates)}] {link}")
                outcome = self._process(link, ignore_cache)
                outcomes.append(outcome)

                if outcome.outcome == UpsertOutcome.INSERTED:
                    stats["items_inserted"] += 1
                else:
                    stats["items_updated"] += 1

                if index < len(candidates) - 1 and delay > 0:
                    self.sleep(delay)

        except Exception as e:
            self._enter(BatchState.ABORTED)
            logger.error(f"Batch {run.run_id} aborted on {current_link}: {e}")
            self.store.rollback()
            run.fail(e, stats=stats, failed_link=current_link)
            self.db_session.commit()
            raise

        self._enter(BatchState.DONE)
        run.complete(stats)
        self.db_session.commit()
        logger.info(
            f"Batch {run.run_id} done: {stats['items_inserted']} inserted, "
            f"{stats['items_updated']} updated"
        )
        return outcomes

    # =========================================================================
    # Maintenance
    # =========================================================================

    def delete_review(self, link: str):
        """Delete a stored review and its poster if no other review uses it."""
        review = self.store.delete_review(link)
        stale_poster = self._stale_poster(review.poster_filename, None, link)
        try:
            self.store.commit()
        except Exception:
            self.store.rollback()
            raise
        self._remove_poster(stale_poster)
        return review

    def get_recent_runs(self, limit: int = 20) -> List[IngestionRun]:
        return (
            self.db_session.query(IngestionRun)
            .order_by(IngestionRun.created_at.desc())
            .limit(limit)
            .all()
        )
