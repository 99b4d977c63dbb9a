"""LRU-cached settings loaders.

Settings are loaded and validated once, then cached for the lifetime of the
process.

Testing:
    In tests, clear the cache to force reload:
    get_pagination_settings.cache_clear()

    Or pass an explicit instance:
    engine = PaginationEngine(..., settings=PaginationSettings(max_page_size=5))
"""

from __future__ import annotations

from functools import lru_cache

from .logs import LoggingSettings
from .pagination import PaginationSettings


@lru_cache(maxsize=1)
def get_logging_settings() -> LoggingSettings:
    """Get cached logging settings.

    Returns:
        Validated and frozen LoggingSettings instance.
    """
    return LoggingSettings()


@lru_cache(maxsize=1)
def get_pagination_settings() -> PaginationSettings:
    """Get cached pagination settings.

    Returns:
        Validated and frozen PaginationSettings instance.
    """
    return PaginationSettings()


def clear_all_caches() -> None:
    """Clear every settings cache (used by tests)."""
    get_logging_settings.cache_clear()
    get_pagination_settings.cache_clear()
