"""Pagination result schemas.

This module provides two response shapes built from one engine result:

1. Relay Connection:
   - Edges with cursors and nodes
   - PageInfo with navigation flags and boundary cursors
   - Serialises with camelCase aliases (``pageInfo.hasNextPage``)

2. Simple REST style:
   - Just items, next/previous cursors and a has_more flag

Both are produced by ``PaginationEngine.resolve()``; ``CursorPage`` via
``Connection.to_cursor_page()``.
"""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")

_RELAY_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    arbitrary_types_allowed=True,
    frozen=True,
)


class PageInfo(BaseModel):
    """Pagination metadata following the Relay cursor connection spec.

    Attributes:
        has_previous_page: Whether rows exist before this page
        has_next_page: Whether rows exist after this page
        start_cursor: Cursor of the first edge in this page
        end_cursor: Cursor of the last edge in this page
    """

    model_config = _RELAY_CONFIG

    has_previous_page: bool = Field(description="Whether previous items exist")
    has_next_page: bool = Field(description="Whether more items exist")
    start_cursor: str | None = Field(default=None, description="Cursor of the first item")
    end_cursor: str | None = Field(default=None, description="Cursor of the last item")


class Edge(BaseModel, Generic[T]):
    """A node together with the cursor of its position."""

    model_config = _RELAY_CONFIG

    node: T = Field(description="The data item")
    cursor: str = Field(description="Cursor for this item")


class Connection(BaseModel, Generic[T]):
    """Relay connection: edges plus page info.

    Client navigation:
        # First page
        first=10

        # Next page (end_cursor of the previous response)
        first=10, after=<page_info.end_cursor>

        # Previous page (start_cursor of the current response)
        last=10, before=<page_info.start_cursor>
    """

    model_config = _RELAY_CONFIG

    edges: list[Edge[T]] = Field(default_factory=list, description="List of edges (items with cursors)")
    page_info: PageInfo = Field(description="Pagination metadata")

    @property
    def nodes(self) -> list[T]:
        """Nodes without their edge wrappers."""
        return [edge.node for edge in self.edges]

    def to_cursor_page(self) -> CursorPage[T]:
        """Convert to the simple REST-style page."""
        return CursorPage(
            items=self.nodes,
            next_cursor=self.page_info.end_cursor if self.page_info.has_next_page else None,
            prev_cursor=self.page_info.start_cursor if self.page_info.has_previous_page else None,
            has_more=self.page_info.has_next_page,
        )


class CursorPage(BaseModel, Generic[T]):
    """Simple REST-style cursor pagination response.

    Attributes:
        items: Rows in this page
        next_cursor: Pass as ``after`` to fetch the next page (None if no more)
        prev_cursor: Pass as ``before`` to fetch the previous page (None at start)
        has_more: Whether more rows exist after this page
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    items: list[T] = Field(default_factory=list, description="List of items")
    next_cursor: str | None = Field(default=None, description="Cursor to fetch next page")
    prev_cursor: str | None = Field(default=None, description="Cursor to fetch previous page")
    has_more: bool = Field(default=False, description="Whether more items exist")


__all__ = ["Connection", "CursorPage", "Edge", "PageInfo"]
