"""
Persistent result cache for build and test runs.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from ..core.exceptions import CacheError
from ..core.logging import get_logger

logger = get_logger(__name__)


def compute_key(command: str, sources: list[str]) -> str:
    """
    Build the cache key for a command and its project sources.

    The key is the literal command text followed by every source joined with
    newlines. No hashing or normalization: a hit requires byte-identical input.
    """
    return command + "\n".join(sources)


def encode_outcome(exit_code: int, stderr: str) -> str:
    return json.dumps([exit_code, stderr])


def decode_outcome(value: str) -> tuple[int, str]:
    try:
        exit_code, stderr = json.loads(value)
    except (TypeError, ValueError) as e:
        raise CacheError(f"malformed cached outcome: {e}") from e
    return int(exit_code), str(stderr)


class ResultCache:
    """
    Durable key/value store for build outcomes.

    Entries are written once and never expire or get evicted. The whole store
    is a JSON object on disk, rewritten atomically after each new entry so it
    survives process restarts. With ``path=None`` the cache lives in memory only.
    """

    def __init__(self, path: Path | None = None):
        """
        Initialize the cache.

        Args:
            path: JSON file backing the cache. Loaded now if it exists.
        """
        self.path = Path(path) if path is not None else None
        self._entries: dict[str, str] = {}
        self._hits = 0
        self._misses = 0
        if self.path is not None and self.path.exists():
            self._entries = self._load(self.path)

    @staticmethod
    def _load(path: Path) -> dict[str, str]:
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise CacheError(f"cannot read {path}: {e}") from e
        if not isinstance(data, dict):
            raise CacheError(f"{path} does not contain a JSON object")
        logger.debug("Loaded %d cached results from %s", len(data), path)
        return {str(key): str(value) for key, value in data.items()}

    def get(self, key: str) -> str | None:
        """Return the cached value or None."""
        value = self._entries.get(key)
        if value is None:
            self._misses += 1
        else:
            self._hits += 1
        return value

    def set(self, key: str, value: str) -> bool:
        """
        Store a value under a new key.

        Returns:
            True if stored, False if the key already had a value (kept as is)
        """
        if key in self._entries:
            return False
        self._entries[key] = value
        self._persist()
        return True

    def _persist(self) -> None:
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".cache-", dir=self.path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(self._entries, f)
            os.replace(tmp_name, self.path)
        except OSError as e:
            Path(tmp_name).unlink(missing_ok=True)
            raise CacheError(f"cannot write {self.path}: {e}") from e

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def stats(self) -> dict[str, Any]:
        """Get cache statistics."""
        total = self._hits + self._misses
        return {
            "size": len(self._entries),
            "hits": self._hits,
            "misses": self._misses,
            "hit_rate": self._hits / total if total > 0 else 0.0,
            "path": str(self.path) if self.path else None,
        }
