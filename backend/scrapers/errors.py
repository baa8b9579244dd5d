"""
Ingestion error taxonomy.

Every failure raised by the scraping, storage and enrichment layers derives
from IngestionError so callers can tell them apart up to the API edge, which
is the only place where they get flattened into a generic internal error.
"""
from typing import Optional


class IngestionError(Exception):
    """Base exception for ingestion errors."""
    pass


class NotFoundError(IngestionError):
    """An expected-absent record: no TMDB match, unknown review link..."""
    pass


class ConflictError(IngestionError):
    """A natural-key collision while creating a row."""
    pass


class ExtractionError(IngestionError):
    """A required field is missing or malformed on a rendered page."""

    def __init__(self, message: str, url: Optional[str] = None, raw_text: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.url = url
        self.raw_text = raw_text

    def with_url(self, url: str) -> "ExtractionError":
        """Attach the page URL if the parser that raised did not know it."""
        if self.url is None:
            self.url = url
        return self

    def __str__(self):
        parts = [self.message]
        if self.url:
            parts.append(f"url={self.url}")
        if self.raw_text is not None:
            parts.append(f"raw={self.raw_text!r}")
        return " | ".join(parts)


class RenderError(IngestionError):
    """The headless browser could not render a page."""

    def __init__(self, url: str, cause: Exception):
        super().__init__(f"Failed to render {url}: {cause}")
        self.url = url
        self.cause = cause


class TransientFetchError(IngestionError):
    """A network fetch kept failing after every retry."""

    def __init__(self, url: str, attempts: int, cause: Optional[Exception] = None):
        super().__init__(f"Impossible to fetch {url} after {attempts} attempts: {cause}")
        self.url = url
        self.attempts = attempts
        self.cause = cause


class AssetStorageError(IngestionError):
    """A poster file could not be written or removed."""
    pass


class MetadataLookupError(IngestionError):
    """TMDB answered with an error other than "no result"."""
    pass
