"""
Root pytest configuration for backend tests.

Provides:
- Shared fixtures (app, client, db_session, ingestion)
- Fakes for the browser, the image fetcher and TMDB
"""

import sys
from pathlib import Path
from unittest.mock import MagicMock

# Add backend directory to Python path so imports like
# `from models.database import db` and `from scrapers.dom import ...` work
backend_dir = Path(__file__).parent.parent
tests_dir = Path(__file__).parent
for path in (backend_dir, tests_dir):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

import pytest

from scrapers.cache import MemoryCache
from nanarland_pages import (
    INDEX_URL,
    FakeImageFetcher,
    FakeRenderer,
    chronicle_link,
    index_html,
)


@pytest.fixture
def renderer():
    return FakeRenderer({INDEX_URL: index_html([chronicle_link("samurai-cop")])})


@pytest.fixture
def image_fetcher():
    return FakeImageFetcher()


@pytest.fixture
def memory_cache():
    return MemoryCache()


@pytest.fixture
def tmdb_client():
    client = MagicMock()
    client.resolve_id.return_value = 9999
    return client


@pytest.fixture
def app(tmp_path, renderer, image_fetcher, memory_cache, tmdb_client):
    """Create test Flask application on in-memory SQLite."""
    from app import create_app
    from config import TestConfig
    from models.database import db

    class _Config(TestConfig):
        STORAGE_PATH = str(tmp_path / "storage")

    app = create_app(
        _Config,
        renderer=renderer,
        cache=memory_cache,
        image_fetcher=image_fetcher,
        tmdb_client=tmdb_client,
    )
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()


@pytest.fixture
def db_session(app):
    from models.database import db
    return db.session


@pytest.fixture
def ingestion(app):
    from services.ingestion import get_ingestion
    return get_ingestion()
