"""
Scraping Package

Chronicle ingestion infrastructure with:
- Shared headless browser handle and rendered-page cache
- Selector-driven field extraction per site
- Sequential batch orchestration with run tracking
"""

from .base import BaseScraper
from .orchestrator import BatchState, ReviewIngestionOrchestrator

__all__ = [
    "BaseScraper",
    "BatchState",
    "ReviewIngestionOrchestrator",
]
