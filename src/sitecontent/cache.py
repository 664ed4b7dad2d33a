"""Directory-backed key-value cache for the last known-good document.

Behaves like browser local storage: string values under string keys,
``get_item`` returns None for a missing key, and writes raise OSError
when the underlying storage is unavailable (permissions, full disk).
Each key is stored as ``<directory>/<key>.json``.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)

STORAGE_KEY = "siteContent"
DEFAULT_CACHE_DIR = Path.home() / ".cache" / "sitecontent"


class LocalCache:
    """Persistent string store keyed by name."""

    def __init__(self, directory: Path | str = DEFAULT_CACHE_DIR) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get_item(self, key: str) -> str | None:
        """Return the stored value for *key*, or None if absent."""
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def has_item(self, key: str) -> bool:
        """True if *key* holds a non-empty value, decodable or not."""
        path = self._path(key)
        return path.is_file() and path.stat().st_size > 0

    def set_item(self, key: str, value: str) -> None:
        """Store *value* under *key*, replacing any previous value.

        The write goes to a temp file first so a crash never leaves a
        half-written entry behind.
        """
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
            os.replace(tmp, self._path(key))
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    def remove_item(self, key: str) -> None:
        """Delete *key*; a missing key is not an error."""
        self._path(key).unlink(missing_ok=True)
        logger.debug("Removed cache entry %s", key)

    def check_available(self) -> None:
        """Raise OSError if the cache directory cannot be used."""
        self.directory.mkdir(parents=True, exist_ok=True)
        if not os.access(self.directory, os.R_OK | os.W_OK):
            raise PermissionError(f"Cache directory not accessible: {self.directory}")
