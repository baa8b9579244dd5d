"""Scraper/Ingestion SQLAlchemy Models."""

from .ingestion_run import IngestionRun

__all__ = [
    "IngestionRun",
]
