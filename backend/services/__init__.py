"""Ingestion services: storage, reconciliation, assets, TMDB and wiring."""
