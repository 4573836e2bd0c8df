"""In-memory cache of healed locators.

Maps the fingerprint of an original (broken) locator to the replacement
locator that last worked for it. Entries live for the lifetime of the
process; there is no expiry and nothing is persisted.
"""

import threading

from ..locators import LocatorDescriptor
from ..logging import get_logger
from .cache_types import CacheStats

logger = get_logger(__name__)


class HealedLocatorCache:
    """Thread-safe map from original locator to healed replacement.

    All operations take an internal lock, so callers never need external
    locking. Writes are last-writer-wins: when two healings of the same
    locator race, the one that completes last determines the cached value.

    Example:
        >>> cache = HealedLocatorCache()
        >>> cache.put(original, healed)
        >>> cache.get(original) == healed
        True
        >>> cache.invalidate(original)
        >>> cache.get(original) is None
        True
    """

    def __init__(self) -> None:
        """Initialize an empty cache."""
        self._entries: dict[str, LocatorDescriptor] = {}
        self._lock = threading.Lock()

        # Runtime statistics
        self._hits = 0
        self._misses = 0
        self._puts = 0
        self._invalidations = 0

    def get(self, original: LocatorDescriptor) -> LocatorDescriptor | None:
        """Look up the healed replacement for a locator.

        Args:
            original: Original locator.

        Returns:
            The cached replacement, or None.
        """
        with self._lock:
            healed = self._entries.get(original.fingerprint)
            if healed is None:
                self._misses += 1
            else:
                self._hits += 1
        return healed

    def put(self, original: LocatorDescriptor, healed: LocatorDescriptor) -> None:
        """Store a replacement, overwriting any existing entry.

        Args:
            original: Original locator.
            healed: Replacement locator that was verified to work.
        """
        with self._lock:
            previous = self._entries.get(original.fingerprint)
            self._entries[original.fingerprint] = healed
            self._puts += 1

        if previous is not None and previous != healed:
            logger.info(
                "cache_overwritten", original=str(original), previous=str(previous), healed=str(healed)
            )
        else:
            logger.info("cache_updated", original=str(original), healed=str(healed))

    def invalidate(self, original: LocatorDescriptor) -> None:
        """Remove the entry for a locator. No-op if absent.

        Args:
            original: Original locator.
        """
        with self._lock:
            removed = self._entries.pop(original.fingerprint, None)
            if removed is not None:
                self._invalidations += 1

        if removed is not None:
            logger.info("cache_invalidated", original=str(original), stale=str(removed))

    def clear(self) -> int:
        """Remove all entries.

        Returns:
            Number of entries cleared.
        """
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.info("cache_cleared", entries=count)
        return count

    def snapshot(self) -> dict[str, LocatorDescriptor]:
        """Return a copy of the current fingerprint -> locator mapping."""
        with self._lock:
            return dict(self._entries)

    def get_stats(self) -> CacheStats:
        """Get cache statistics.

        Returns:
            CacheStats with current statistics.
        """
        with self._lock:
            return CacheStats(
                total_entries=len(self._entries),
                hits=self._hits,
                misses=self._misses,
                puts=self._puts,
                invalidations=self._invalidations,
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, original: object) -> bool:
        if not isinstance(original, LocatorDescriptor):
            return False
        with self._lock:
            return original.fingerprint in self._entries
