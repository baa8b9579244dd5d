"""
Render Cache - rendered pages backed by the key/value cache.

On a hit the document is rebuilt from the cached HTML without touching the
browser. On a miss (or when ignore_cache is set) the page is rendered live
and the cache entry is rewritten with a fresh TTL. Cache errors propagate.
"""
import logging
from typing import Optional

from constants import PAGE_CACHE_NAMESPACE
from utils.cache_key import derive_page_cache_key

from .dom import HtmlDocument
from .utils.hashing import compute_raw_html_hash

logger = logging.getLogger(__name__)


class RenderCache:
    """Cache-aware page loader."""

    def __init__(self, renderer, cache, default_ttl: int, namespace: str = PAGE_CACHE_NAMESPACE):
        """
        Args:
            renderer: Object with render(url) -> html (BrowserHandle)
            cache: Cache backend with get/set/expire
            default_ttl: Seconds a rendered page stays cached
            namespace: Cache key prefix
        """
        self.renderer = renderer
        self.cache = cache
        self.default_ttl = default_ttl
        self.namespace = namespace
        self._stats = {"hits": 0, "misses": 0}

    @property
    def stats(self):
        return dict(self._stats)

    def cache_key(self, url: str) -> str:
        return derive_page_cache_key(url, self.namespace)

    def load(
        self,
        url: str,
        cache_key: Optional[str] = None,
        ttl: Optional[int] = None,
        ignore_cache: bool = False,
    ) -> HtmlDocument:
        """
        Return the document for url, from cache when possible.

        Args:
            url: Canonical page URL
            cache_key: Key to use (derived from url when omitted)
            ttl: Expiry in seconds for a freshly rendered page
            ignore_cache: Skip the cache read and force a live render
        """
        key = cache_key or self.cache_key(url)
        ttl = self.default_ttl if ttl is None else ttl

        if not ignore_cache:
            cached = self.cache.get(key)
            if cached is not None:
                self._stats["hits"] += 1
                logger.debug(f"Cache hit {key}")
                return HtmlDocument(url, cached)

        self._stats["misses"] += 1
        html = self.renderer.render(url)
        self.cache.set(key, html)
        self.cache.expire(key, ttl)
        logger.debug(
            f"Cached {key} for {ttl}s (sha256 {compute_raw_html_hash(html)[:12]})"
        )
        return HtmlDocument(url, html)
