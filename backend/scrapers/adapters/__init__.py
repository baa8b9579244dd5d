"""Site adapters."""

from .nanarland import NanarlandScraper

__all__ = ["NanarlandScraper"]
