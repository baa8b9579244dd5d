"""
Base Scraper - Abstract template for site extractors.

A scraper knows one site's page structure: where the index lists the
chronicle links and how a chronicle page maps onto a RawReview. It never
fetches anything itself; the orchestrator hands it rendered documents.
"""
from abc import ABC, abstractmethod
from typing import List
from urllib.parse import urljoin

from .dom import HtmlDocument
from .records import RawReview


class BaseScraper(ABC):
    """
    Abstract base class for all scrapers.

    Subclasses must implement:
    - extract_links(): Chronicle URLs listed on the index page
    - extract(): Parse a chronicle page into a RawReview

    Subclasses should set class attributes:
    - SCRAPER_NAME: Unique scraper identifier
    - SOURCE_DOMAIN: Primary domain being scraped
    - INDEX_PATH: Path of the page listing every item
    """

    SCRAPER_NAME: str = "base"
    SOURCE_DOMAIN: str = ""
    INDEX_PATH: str = "/"

    def __init__(self, base_url: str):
        """
        Args:
            base_url: Scheme + host the relative links are resolved against
        """
        self.base_url = base_url.rstrip("/")

    @property
    def index_url(self) -> str:
        return self.absolute_url(self.INDEX_PATH)

    def absolute_url(self, href: str) -> str:
        return urljoin(self.base_url + "/", href)

    @abstractmethod
    def extract_links(self, document: HtmlDocument) -> List[str]:
        """
        Absolute URLs of every item listed on the index page.

        Args:
            document: Rendered index page
        """
        pass

    @abstractmethod
    def extract(self, document: HtmlDocument) -> RawReview:
        """
        Parse an item page.

        Args:
            document: Rendered item page

        Raises:
            ExtractionError: If a required field is missing or malformed
        """
        pass
