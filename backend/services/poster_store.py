"""
Poster Store - content-addressed image files on local disk.

Files are named <sha256-hex>.<ext> under STORAGE_PATH/POSTER_DIR. The name
depends on the bytes only, so storing the same image twice lands on the
same file and the second write is skipped.
"""
import logging
import os
from pathlib import Path
from typing import Optional
from urllib.parse import urlsplit

from scrapers.errors import AssetStorageError
from scrapers.utils.hashing import compute_content_hash

logger = logging.getLogger(__name__)

# Extension used when the URL path has none
DEFAULT_EXTENSION = "bin"


def extension_from_url(url: str) -> str:
    """Lower-cased extension of the URL path, without the dot."""
    suffix = Path(urlsplit(url).path).suffix
    return suffix[1:].lower() if suffix else DEFAULT_EXTENSION


class PosterStore:
    """Content-addressed poster storage."""

    def __init__(self, storage_path: str, poster_dir: str, image_fetcher):
        """
        Args:
            storage_path: Root storage directory
            poster_dir: Poster sub-directory
            image_fetcher: Object with fetch(url) -> bytes
        """
        self.directory = Path(storage_path) / poster_dir
        self.image_fetcher = image_fetcher

    def init_storage_directory(self) -> None:
        """Create the poster directory (recursive, idempotent)."""
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create storage directory: {e}")
            raise AssetStorageError(f"Failed to create storage directory {self.directory}: {e}")

    def filename_for(self, data: bytes, extension: str) -> str:
        return f"{compute_content_hash(data)}.{extension.lstrip('.').lower()}"

    def path_for(self, filename: str) -> Path:
        return self.directory / filename

    def exists(self, filename: str) -> bool:
        return self.path_for(filename).is_file()

    def store(self, data: bytes, extension: str) -> str:
        """
        Persist bytes and return the asset filename.

        Raises:
            AssetStorageError: If the file cannot be written.
        """
        filename = self.filename_for(data, extension)
        path = self.path_for(filename)

        if path.is_file():
            logger.debug(f"Poster already stored at {path}")
            return filename

        tmp_path = path.with_name(f".{filename}.tmp")
        try:
            tmp_path.write_bytes(data)
            os.replace(tmp_path, path)
        except OSError as e:
            logger.error(f"Failed to save poster file: {e}")
            raise AssetStorageError(f"Failed to save poster file {path}: {e}")

        logger.debug(f"Saved poster at {path}")
        return filename

    def store_from_url(self, url: str) -> str:
        """Download an image and store it."""
        data = self.image_fetcher.fetch(url)
        return self.store(data, extension_from_url(url))

    def delete(self, filename: str) -> None:
        """
        Remove a stored poster.

        Raises:
            AssetStorageError: If the file cannot be removed.
        """
        path = self.path_for(filename)
        try:
            path.unlink()
        except OSError as e:
            logger.error(f"Failed to delete poster file: {e}")
            raise AssetStorageError(f"Failed to delete poster file {path}: {e}")
        logger.debug(f"Deleted poster at {path}")

    def read(self, filename: str) -> Optional[bytes]:
        path = self.path_for(filename)
        return path.read_bytes() if path.is_file() else None
