"""
API package - HTTP edge of the ingestion service.

This package provides:
- Request param models (pydantic)
- Global middleware (request_id, error_envelope)
"""
