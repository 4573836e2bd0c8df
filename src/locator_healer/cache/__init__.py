"""Process-lifetime cache of healed locators.

Example:
    >>> from locator_healer.cache import HealedLocatorCache
    >>>
    >>> cache = HealedLocatorCache()
    >>> cache.put(original, healed)
    >>> cache.get(original)
    LocatorDescriptor(strategy=<LocatorStrategy.ID: 'id'>, value='login_btn')
"""

from .cache_types import CacheStats
from .healed_locator_cache import HealedLocatorCache

__all__ = ["CacheStats", "HealedLocatorCache"]
