"""
Utility modules for the backend.
"""
from .cache_key import build_query_cache_key, derive_page_cache_key, normalize_cache_params

__all__ = [
    'build_query_cache_key',
    'derive_page_cache_key',
    'normalize_cache_params',
]
