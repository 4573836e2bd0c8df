"""Data types for the healed-locator cache."""

from dataclasses import dataclass


@dataclass
class CacheStats:
    """Statistics about cache usage."""

    total_entries: int
    """Total number of entries in cache."""

    hits: int
    """Total cache hits since startup."""

    misses: int
    """Total cache misses since startup."""

    puts: int
    """Total stores (including overwrites) since startup."""

    invalidations: int
    """Total invalidations of existing entries since startup."""

    @property
    def hit_rate(self) -> float:
        """Calculate hit rate as percentage."""
        total = self.hits + self.misses
        return (self.hits / total * 100) if total > 0 else 0.0
