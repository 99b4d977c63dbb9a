"""Pagination settings.

Environment variables use PAGINATION_ prefix.
Example: PAGINATION_MAX_PAGE_SIZE=100, PAGINATION_CONCURRENT_PROBES=false
"""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PaginationSettings(BaseSettings):
    """Pagination configuration settings.

    Attributes:
        max_page_size: Largest accepted ``first``/``last``; None disables the cap.
        default_page_size: Page size the HTTP dependency applies when a request
            gives neither ``first`` nor ``last``; None leaves the page unbounded.
        concurrent_probes: Run the main fetch and the page-info probes
            concurrently in ``PaginationEngine.resolve()``.

    Example:
        settings = PaginationSettings(max_page_size=100)
        engine = PaginationEngine(args, executor=executor, sort=sort, settings=settings)
    """

    max_page_size: int | None = Field(
        default=None,
        ge=1,
        le=100_000,
        description="Maximum allowed first/last (None for no cap)",
    )
    default_page_size: int | None = Field(
        default=None,
        ge=1,
        le=100_000,
        description="Page size applied by the HTTP dependency when no count is given",
    )
    concurrent_probes: bool = Field(
        default=True,
        description="Resolve edges and page info flags concurrently",
    )

    model_config = SettingsConfigDict(
        env_prefix="PAGINATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
        extra="ignore",
    )
