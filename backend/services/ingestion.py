"""
Ingestion wiring - builds the pipeline once per process from app config.

One BrowserHandle is shared by every render; it launches Chromium lazily on
the first cache miss and is released exactly once at interpreter exit. The
cache backend (Redis or in-memory) is chosen here, at startup.

Collaborators can be injected (tests pass a fake renderer, an in-memory
cache and a stub image fetcher).
"""
import atexit
import logging
from dataclasses import dataclass
from typing import Optional

from flask import Flask, current_app

from models.database import db
from scrapers.adapters import NanarlandScraper
from scrapers.browser import BrowserHandle
from scrapers.cache import build_cache
from scrapers.orchestrator import ReviewIngestionOrchestrator
from scrapers.render_cache import RenderCache
from services.image_fetcher import ImageFetcher
from services.poster_store import PosterStore
from services.review_reconciler import ReviewReconciler
from services.review_store import ReviewStore
from services.tmdb_client import TMDBClient

logger = logging.getLogger(__name__)

EXTENSION_KEY = "nanar_ingest"


@dataclass
class IngestionServices:
    cache: object
    renderer: object
    render_cache: RenderCache
    scraper: NanarlandScraper
    image_fetcher: object
    poster_store: PosterStore
    tmdb_client: Optional[TMDBClient]
    store: ReviewStore
    reconciler: ReviewReconciler
    orchestrator: ReviewIngestionOrchestrator


def init_ingestion(
    app: Flask,
    renderer=None,
    cache=None,
    image_fetcher=None,
    tmdb_client=None,
) -> IngestionServices:
    """Build the ingestion services and register them on the app."""
    config = app.config

    if cache is None:
        cache = build_cache(config.get('REDIS_URL'))

    if renderer is None:
        renderer = BrowserHandle(
            executable_path=config.get('CHROMIUM_PATH'),
            timeout_ms=config['RENDER_TIMEOUT_MS'],
        )
        atexit.register(renderer.release)

    if image_fetcher is None:
        image_fetcher = ImageFetcher(
            timeout=config['IMAGE_FETCH_TIMEOUT'],
            max_retries=config['IMAGE_FETCH_RETRIES'],
            backoff_seconds=config['IMAGE_FETCH_BACKOFF_SECONDS'],
            max_redirects=config['IMAGE_FETCH_MAX_REDIRECTS'],
        )

    if tmdb_client is None and config.get('TMDB_TOKEN'):
        tmdb_client = TMDBClient(
            token=config['TMDB_TOKEN'],
            cache=cache,
            cache_ttl=config['TMDB_CACHE_TTL_SECONDS'],
            language=config['TMDB_LANGUAGE'],
        )
    if tmdb_client is None:
        logger.warning("TMDB_TOKEN not set, reviews will be stored without tmdb_id")

    poster_store = PosterStore(config['STORAGE_PATH'], config['POSTER_DIR'], image_fetcher)
    poster_store.init_storage_directory()

    render_cache = RenderCache(renderer, cache, default_ttl=config['PAGE_CACHE_TTL_SECONDS'])
    scraper = NanarlandScraper(config['NANARLAND_BASE_URL'])
    store = ReviewStore(db.session)
    reconciler = ReviewReconciler(store, poster_store, image_fetcher, tmdb_client)
    orchestrator = ReviewIngestionOrchestrator(
        render_cache,
        scraper,
        reconciler,
        store,
        poster_store=poster_store,
        page_ttl=config['PAGE_CACHE_TTL_SECONDS'],
    )

    services = IngestionServices(
        cache=cache,
        renderer=renderer,
        render_cache=render_cache,
        scraper=scraper,
        image_fetcher=image_fetcher,
        poster_store=poster_store,
        tmdb_client=tmdb_client,
        store=store,
        reconciler=reconciler,
        orchestrator=orchestrator,
    )
    app.extensions[EXTENSION_KEY] = services
    logger.info(f"Ingestion ready (cache={type(cache).__name__}, base={scraper.base_url})")
    return services


def get_ingestion() -> IngestionServices:
    """Services of the current app."""
    return current_app.extensions[EXTENSION_KEY]
