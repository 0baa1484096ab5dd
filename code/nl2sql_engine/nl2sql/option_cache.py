"""
TTL cache for option lists.

Entries are keyed by ``(source_type, system_id, config_hash)``. Expired
entries are evicted when read, and a put always overwrites (last write
wins). Only single dict operations are used, so no lock is taken.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from .schema_model import OptionItem

logger = logging.getLogger(__name__)

CacheKey = tuple[str, str, str]


class OptionsCache:
    """In-memory option list cache with TTL support."""

    def __init__(self, ttl_minutes: int = 30):
        self._cache: dict[CacheKey, tuple[list[OptionItem], datetime]] = {}
        self._ttl = timedelta(minutes=ttl_minutes)

    def get(self, key: CacheKey) -> Optional[list[OptionItem]]:
        """Retrieve cached options if not expired."""
        entry = self._cache.get(key)
        if entry is None:
            return None

        options, timestamp = entry
        if datetime.now() - timestamp < self._ttl:
            return list(options)

        self._cache.pop(key, None)
        logger.debug(f"Evicted expired options for key={key}")
        return None

    def put(self, key: CacheKey, options: list[OptionItem]) -> None:
        """Store options with the current timestamp."""
        self._cache[key] = (list(options), datetime.now())

    def invalidate(self, key: Optional[CacheKey] = None) -> None:
        """Invalidate specific key or entire cache."""
        if key is None:
            self._cache.clear()
        else:
            self._cache.pop(key, None)

    def get_cache_stats(self) -> dict:
        """Return cache statistics."""
        now = datetime.now()
        valid_entries = sum(
            1 for _, ts in list(self._cache.values()) if now - ts < self._ttl
        )
        return {
            "total_entries": len(self._cache),
            "valid_entries": valid_entries,
            "expired_entries": len(self._cache) - valid_entries,
        }
