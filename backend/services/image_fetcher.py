"""
Image Fetcher - downloads poster and avatar bytes.

Retry policy:
- 10s timeout per request, at most 5 redirect hops
- 3 retries (4 attempts in total) with a fixed pause between attempts
- Past the budget a TransientFetchError is raised; callers treat it as fatal

Usage:
    from services.image_fetcher import ImageFetcher

    fetcher = ImageFetcher()
    data = fetcher.fetch("https://www.nanarland.com/images/poster.jpg")
"""

import logging
import time
from typing import Callable

import requests

from scrapers.errors import TransientFetchError

logger = logging.getLogger(__name__)


# =============================================================================
# Configuration
# =============================================================================

DEFAULT_TIMEOUT_SECONDS = 10
DEFAULT_MAX_RETRIES = 3
DEFAULT_BACKOFF_SECONDS = 1.0
DEFAULT_MAX_REDIRECTS = 5


class ImageFetcher:
    """HTTP client for remote images with a fixed retry budget."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        max_retries: int = DEFAULT_MAX_RETRIES,
        backoff_seconds: float = DEFAULT_BACKOFF_SECONDS,
        max_redirects: int = DEFAULT_MAX_REDIRECTS,
        session: requests.Session = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.timeout = timeout
        self.max_retries = max_retries
        self.backoff_seconds = backoff_seconds
        self._sleep = sleep
        self._session = session or requests.Session()
        self._session.max_redirects = max_redirects
        self._session.headers.update({
            "User-Agent": "NanarIngest/1.0 (movie review archive)",
            "Accept": "image/avif,image/webp,image/*,*/*;q=0.8",
        })

    def fetch(self, url: str) -> bytes:
        """
        Download url and return the body bytes.

        Raises:
            TransientFetchError: If every attempt failed.
        """
        attempts = self.max_retries + 1
        last_error = None

        for attempt in range(attempts):
            try:
                response = self._session.get(url, timeout=self.timeout)
                response.raise_for_status()
                logger.debug(f"Fetched image {url} ({len(response.content)} bytes)")
                return response.content
            except requests.exceptions.RequestException as e:
                last_error = e
                if attempt < attempts - 1:
                    logger.warning(
                        f"Image fetch attempt {attempt + 1}/{attempts} failed for {url}: {e}. "
                        f"Retrying in {self.backoff_seconds}s"
                    )
                    self._sleep(self.backoff_seconds)

        logger.error(f"Impossible to fetch image: {url} ({last_error})")
        raise TransientFetchError(url, attempts, last_error)
