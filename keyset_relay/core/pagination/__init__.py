"""Keyset (seek) pagination with the Relay cursor connection contract.

This package provides cursor-based pagination that is:
- Stable: Results don't shift when rows are inserted between pages
- Performant: Uses indexed seeks instead of OFFSET scans
- Store-agnostic: Any ``OrderedQueryExecutor`` can serve the rows

Usage:
    from keyset_relay.core.pagination import PaginationEngine, SortSpec, eq

    engine = PaginationEngine(
        {"first": 10, "after": cursor},
        executor=executor,
        sort=SortSpec.of(("created_at", "asc"), ("slug", "asc")),
        where=eq("category", "Foo"),
    )
    connection = await engine.resolve()
    connection.page_info.has_next_page

The cursor encodes the sort field values of a row. Cursors are opaque
strings that clients pass back unchanged.
"""

from keyset_relay.core.pagination.arguments import FIRST_AND_LAST_MESSAGE, ConnectionArguments
from keyset_relay.core.pagination.cursor import CursorCodec, CursorKey, extract_key
from keyset_relay.core.pagination.engine import EngineState, PaginationEngine, paginate
from keyset_relay.core.pagination.predicates import (
    TRUE,
    And,
    Comparison,
    KeysetDirection,
    Operator,
    Or,
    Predicate,
    TruePredicate,
    and_,
    eq,
    keyset_predicate,
    or_,
)
from keyset_relay.core.pagination.protocol import OrderedQueryExecutor
from keyset_relay.core.pagination.schemas import Connection, CursorPage, Edge, PageInfo
from keyset_relay.core.pagination.sorting import SortDirection, SortField, SortSpec

__all__ = [
    "FIRST_AND_LAST_MESSAGE",
    "TRUE",
    "And",
    "Comparison",
    "Connection",
    "ConnectionArguments",
    "CursorCodec",
    "CursorKey",
    "CursorPage",
    "Edge",
    "EngineState",
    "KeysetDirection",
    "Operator",
    "Or",
    "OrderedQueryExecutor",
    "PageInfo",
    "PaginationEngine",
    "Predicate",
    "SortDirection",
    "SortField",
    "SortSpec",
    "TruePredicate",
    "and_",
    "eq",
    "extract_key",
    "keyset_predicate",
    "or_",
    "paginate",
]
