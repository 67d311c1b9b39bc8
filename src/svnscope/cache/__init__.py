"""Result cache exports."""

from svnscope.cache.manager import CacheManager, duration_to_seconds

__all__ = ["CacheManager", "duration_to_seconds"]
