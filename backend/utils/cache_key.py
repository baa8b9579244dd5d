"""
Cache key helpers.

Provides stable, normalized cache key construction to avoid drift between callers.
"""

from datetime import date, datetime
import re
from typing import Any, Dict, Iterable, Optional
from urllib.parse import quote, urlsplit


# Trailing document extension stripped from page paths (".html", ".htm", ".php")
_DOCUMENT_SUFFIX = re.compile(r"\.(?:html?|php)$", re.IGNORECASE)

KEY_DELIMITER = ":"


def _normalize_cache_value(value: Any) -> Any:
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return ",".join(str(_normalize_cache_value(v)) for v in value)
    return value


def normalize_cache_params(
    params: Dict[str, Any],
    *,
    include_keys: Optional[Iterable[str]] = None,
) -> Dict[str, Any]:
    """
    Normalize params for cache keys.

    - Skips empty values
    - Sorts keys for stability
    - Normalizes dates and sequences
    """
    allowed = set(include_keys) if include_keys is not None else None
    filtered: Dict[str, Any] = {}
    for key, value in params.items():
        if allowed is not None and key not in allowed:
            continue
        if value in (None, "", [], {}):
            continue
        filtered[key] = _normalize_cache_value(value)
    return {k: filtered[k] for k in sorted(filtered.keys())}


def build_query_cache_key(
    prefix: str,
    params: Dict[str, Any],
    *,
    include_keys: Optional[Iterable[str]] = None
) -> str:
    normalized = normalize_cache_params(params, include_keys=include_keys)
    param_str = "&".join(f"{k}={v}" for k, v in normalized.items())
    return f"{prefix}:{param_str}"


def derive_page_cache_key(url: str, namespace: str) -> str:
    """
    Build the cache key of a rendered page from its canonical URL.

    Scheme and host are dropped so the key does not depend on which mirror
    or protocol served the page; the document extension is dropped and path
    separators become the key delimiter:

        https://www.nanarland.com/chroniques/a/b/samurai-cop.html
        -> nanarland:chroniques:a:b:samurai-cop

    Segments are percent-escaped so a delimiter inside a segment cannot
    merge two paths. A query string, when present, is kept so distinct
    documents keep distinct keys.
    """
    parts = urlsplit(url)
    path = _DOCUMENT_SUFFIX.sub("", parts.path).strip("/")
    segments = [quote(segment, safe="") for segment in path.split("/")]
    key = f"{namespace}{KEY_DELIMITER}{KEY_DELIMITER.join(segments)}"
    if parts.query:
        key = f"{key}?{parts.query}"
    return key
