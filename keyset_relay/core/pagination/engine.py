"""Keyset pagination engine implementing the Relay connection contract.

One engine serves one page request. Construction validates the arguments,
decodes the cursors and builds the range predicate without touching the
data source. The fetch and the two page-info probes each run at most once
and are cached, so awaiting ``edges()`` or ``has_next_page()`` again never
re-queries.

States:
    CONSTRUCTED -> PREDICATE_BUILT -> FETCHED -> RESOLVED

Backward paging:
    ``last=n`` fetches the first n rows of the *reversed* order and reverses
    them in memory, so the page is the tail of the range in forward order.

Example:
    engine = PaginationEngine(
        {"first": 10, "after": cursor},
        executor=SqlAlchemyExecutor(session, Post),
        sort=SortSpec.of(("created_at", "asc"), ("slug", "asc")),
    )
    connection = await engine.resolve()
    for edge in connection.edges:
        print(edge.node.slug, edge.cursor)
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from keyset_relay.core.exceptions import InvalidArgumentError
from keyset_relay.core.pagination.arguments import ConnectionArguments
from keyset_relay.core.pagination.cursor import CursorCodec, CursorKey, KeyExtractor, extract_key
from keyset_relay.core.pagination.predicates import (
    KeysetDirection,
    Predicate,
    and_,
    keyset_predicate,
)
from keyset_relay.core.pagination.schemas import Connection, Edge, PageInfo
from keyset_relay.core.pagination.sorting import SortSpec
from keyset_relay.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from keyset_relay.core.pagination.protocol import OrderedQueryExecutor
    from keyset_relay.core.settings.pagination import PaginationSettings

logger = logging.getLogger(__name__)
_lazy = get_lazy_logger(__name__)


class EngineState(StrEnum):
    """Lifecycle of a pagination engine."""

    CONSTRUCTED = "constructed"
    PREDICATE_BUILT = "predicate_built"
    FETCHED = "fetched"
    RESOLVED = "resolved"


def _identity(row: Any) -> Any:
    return row


class PaginationEngine[T]:
    """Derive predicate, order and limit from Relay arguments and resolve a page.

    Args:
        arguments: ``ConnectionArguments`` or a mapping with any of
            ``first``, ``last``, ``after``, ``before``
        executor: Data source implementing ``OrderedQueryExecutor``
        sort: Sort specification (a ``SortSpec`` or a ``{field: direction}`` mapping)
        where: Base filter ANDed with the cursor bounds
        extract_key: Reads the cursor key of a row; defaults to field lookup
        resolve_node: Maps a fetched row to the edge node; defaults to identity
        settings: Pagination settings; defaults to the cached environment settings

    Raises:
        InvalidArgumentError: ``first`` and ``last`` both given, a negative
            count, or a count above ``settings.max_page_size``
        MalformedCursorError: ``after`` or ``before`` does not decode to a key
            with one value per sort field
    """

    def __init__(
        self,
        arguments: ConnectionArguments | Mapping[str, Any],
        *,
        executor: OrderedQueryExecutor[T],
        sort: SortSpec | Mapping[str, Any],
        where: Predicate | None = None,
        extract_key: KeyExtractor = extract_key,
        resolve_node: Callable[[T], Any] = _identity,
        settings: PaginationSettings | None = None,
    ) -> None:
        self._state = EngineState.CONSTRUCTED

        if not isinstance(arguments, ConnectionArguments):
            arguments = ConnectionArguments.from_mapping(arguments)
        if not isinstance(sort, SortSpec):
            sort = SortSpec.from_mapping(sort)
        if settings is None:
            from keyset_relay.core.settings import get_pagination_settings

            settings = get_pagination_settings()

        self.arguments = arguments
        self.sort = sort
        self.where = where
        self.executor = executor
        self.settings = settings
        self._extract_key = extract_key
        self._resolve_node = resolve_node

        self.limit = arguments.limit
        max_size = settings.max_page_size
        if max_size is not None and self.limit is not None and self.limit > max_size:
            raise InvalidArgumentError(
                f"Requested page size {self.limit} exceeds the maximum of {max_size}",
                extra={"limit": self.limit, "max_page_size": max_size},
            )

        self.after_key: CursorKey | None = None
        self.before_key: CursorKey | None = None
        bounds: list[Predicate] = []
        if arguments.after is not None:
            self.after_key = CursorCodec.decode(arguments.after, arity=len(sort))
            bounds.append(keyset_predicate(sort, self.after_key, KeysetDirection.AFTER))
        if arguments.before is not None:
            self.before_key = CursorCodec.decode(arguments.before, arity=len(sort))
            bounds.append(keyset_predicate(sort, self.before_key, KeysetDirection.BEFORE))

        self.predicate = and_(*bounds, where)
        self.order = sort.reversed() if arguments.is_backward else sort
        self._memo: dict[str, asyncio.Future[Any]] = {}
        self._connection: Connection[Any] | None = None
        self._state = EngineState.PREDICATE_BUILT

        logger.debug(
            "Pagination engine constructed",
            extra={
                "operation": "pagination.construct",
                "sort": str(sort),
                "limit": self.limit,
                "backward": arguments.is_backward,
                "has_after": self.after_key is not None,
                "has_before": self.before_key is not None,
            },
        )
        _lazy.debug(lambda: f"pagination predicate: {self.predicate!r}")

    @property
    def state(self) -> EngineState:
        return self._state

    def _once(self, slot: str, factory: Callable[[], Awaitable[Any]]) -> asyncio.Future[Any]:
        """Start ``factory`` on first use and hand out the same future afterwards."""
        future = self._memo.get(slot)
        if future is None:
            future = asyncio.ensure_future(factory())
            self._memo[slot] = future
        return future

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    def resolve_node(self, row: T) -> Any:
        return self._resolve_node(row)

    def resolve_cursor(self, row: T) -> str:
        return CursorCodec.encode(self._extract_key(row, self.sort))

    async def rows(self) -> list[T]:
        """Fetched rows in forward order (one query, cached)."""
        return await self._once("rows", self._query)

    async def _query(self) -> list[T]:
        rows = list(await self.executor.fetch(self.predicate, self.order, self.limit))
        if self.arguments.is_backward:
            rows.reverse()
        self._state = EngineState.FETCHED
        logger.debug(
            "Page fetched",
            extra={"operation": "pagination.fetch", "rows": len(rows), "limit": self.limit},
        )
        return rows

    async def edges(self) -> list[Edge[Any]]:
        """Edges for the fetched rows, in forward order."""
        return await self._once("edges", self._build_edges)

    async def _build_edges(self) -> list[Edge[Any]]:
        rows = await self.rows()
        return [Edge(node=self.resolve_node(row), cursor=self.resolve_cursor(row)) for row in rows]

    # ------------------------------------------------------------------
    # Page info
    # ------------------------------------------------------------------

    async def has_next_page(self) -> bool:
        return await self._once("has_next_page", self._resolve_has_next_page)

    async def has_previous_page(self) -> bool:
        return await self._once("has_previous_page", self._resolve_has_previous_page)

    async def _resolve_has_next_page(self) -> bool:
        first = self.arguments.first
        if first is not None:
            result = await self._limit_exceeded(first)
        elif self.before_key is not None:
            result = await self._any_beyond(self.before_key, KeysetDirection.AFTER)
        else:
            result = False
        logger.debug(
            "Resolved has_next_page",
            extra={"operation": "pagination.probe", "flag": "has_next_page", "result": result},
        )
        return result

    async def _resolve_has_previous_page(self) -> bool:
        last = self.arguments.last
        if last is not None:
            result = await self._limit_exceeded(last)
        elif self.after_key is not None:
            result = await self._any_beyond(self.after_key, KeysetDirection.BEFORE)
        else:
            result = False
        logger.debug(
            "Resolved has_previous_page",
            extra={"operation": "pagination.probe", "flag": "has_previous_page", "result": result},
        )
        return result

    async def _limit_exceeded(self, limit: int) -> bool:
        # Bounded at limit + 1 so the store never counts the whole range
        count = await self.executor.count_up_to(self.predicate, limit + 1)
        return count > limit

    async def _any_beyond(self, key: CursorKey, direction: KeysetDirection) -> bool:
        predicate = and_(keyset_predicate(self.sort, key, direction), self.where)
        return await self.executor.count_up_to(predicate, 1) > 0

    async def page_info(self) -> PageInfo:
        edges = await self.edges()
        return PageInfo(
            has_next_page=await self.has_next_page(),
            has_previous_page=await self.has_previous_page(),
            start_cursor=edges[0].cursor if edges else None,
            end_cursor=edges[-1].cursor if edges else None,
        )

    # ------------------------------------------------------------------
    # Full resolution
    # ------------------------------------------------------------------

    async def resolve(self) -> Connection[Any]:
        """Resolve edges and page info into a cached ``Connection``.

        The fetch and both probes run concurrently unless
        ``settings.concurrent_probes`` is disabled.
        """
        if self._connection is not None:
            return self._connection

        if self.settings.concurrent_probes:
            # Wait for all three so no failed sibling is left unretrieved
            results = await asyncio.gather(
                self.edges(),
                self.has_next_page(),
                self.has_previous_page(),
                return_exceptions=True,
            )
            for result in results:
                if isinstance(result, BaseException):
                    raise result
        page_info = await self.page_info()
        connection: Connection[Any] = Connection(edges=await self.edges(), page_info=page_info)

        if self._connection is None:
            self._connection = connection
            self._state = EngineState.RESOLVED
            _lazy.debug(
                lambda: (
                    f"pagination.resolve: {len(connection.edges)} edges, "
                    f"has_next={page_info.has_next_page}, has_previous={page_info.has_previous_page}"
                )
            )
        return self._connection


async def paginate[T](
    arguments: ConnectionArguments | Mapping[str, Any],
    *,
    executor: OrderedQueryExecutor[T],
    sort: SortSpec | Mapping[str, Any],
    where: Predicate | None = None,
    **options: Any,
) -> Connection[Any]:
    """Build an engine and resolve it in one call.

    Example:
        connection = await paginate(
            {"first": 20},
            executor=InMemoryExecutor(posts),
            sort=SortSpec.parse("created_at,slug"),
        )
    """
    engine: PaginationEngine[T] = PaginationEngine(
        arguments, executor=executor, sort=sort, where=where, **options
    )
    return await engine.resolve()


__all__ = ["EngineState", "PaginationEngine", "paginate"]
