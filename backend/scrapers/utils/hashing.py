"""
Content Hashing for Asset Storage

Provides deterministic hashing of binary content for:
- Content-addressed file names
- Deduplication of identical downloads
"""
import hashlib


def compute_content_hash(data: bytes) -> str:
    """
    Compute SHA256 hash of raw bytes.

    Args:
        data: Binary content (e.g. image bytes)

    Returns:
        64-character hex SHA256 hash
    """
    return hashlib.sha256(data).hexdigest()


def compute_raw_html_hash(html: str) -> str:
    """
    Compute hash of raw HTML content.

    Normalizes whitespace for consistent hashing.

    Args:
        html: Raw HTML string

    Returns:
        64-character hex SHA256 hash
    """
    normalized = " ".join(html.split())
    return hashlib.sha256(normalized.encode("utf-8")).hexdigest()
