"""Pydantic Settings v2 configuration.

Settings are split by domain and read from environment variables:

    PAGINATION_*   pagination limits and probe concurrency
    LOG_*          logging level and format

Import settings via cached loaders:
    from keyset_relay.core.settings import get_pagination_settings

    settings = get_pagination_settings()
    print(settings.max_page_size)
"""

from __future__ import annotations

from .loader import clear_all_caches, get_logging_settings, get_pagination_settings
from .logs import LoggingSettings
from .pagination import PaginationSettings

__all__ = [
    "LoggingSettings",
    "PaginationSettings",
    "clear_all_caches",
    "get_logging_settings",
    "get_pagination_settings",
]
