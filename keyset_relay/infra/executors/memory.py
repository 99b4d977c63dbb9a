"""In-memory ordered query executor.

Evaluates predicates directly against Python objects or mappings. Useful for
small in-process collections, fixtures and tests; large data sets belong in
a store with indexes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from itertools import islice

from keyset_relay.core.pagination.cursor import default_field_getter
from keyset_relay.core.pagination.predicates import FieldGetter, Predicate
from keyset_relay.core.pagination.sorting import SortSpec

logger = logging.getLogger(__name__)


class InMemoryExecutor[T]:
    """Serve ordered, filtered reads from a list of rows.

    Args:
        rows: Rows to serve; copied on construction
        getter: Reads a field from a row; defaults to attribute or key lookup

    Example:
        executor = InMemoryExecutor([{"id": 1}, {"id": 2}])
        rows = await executor.fetch(TRUE, SortSpec.of(("id", "desc")), limit=1)
        # [{"id": 2}]
    """

    def __init__(self, rows: Iterable[T], getter: FieldGetter = default_field_getter) -> None:
        self._rows: list[T] = list(rows)
        self._getter = getter
        self.fetch_calls = 0
        self.count_calls = 0

    def _matching(self, predicate: Predicate) -> Iterable[T]:
        return (row for row in self._rows if predicate.matches(row, self._getter))

    async def fetch(
        self,
        predicate: Predicate,
        order: SortSpec,
        limit: int | None = None,
    ) -> Sequence[T]:
        self.fetch_calls += 1
        rows = list(self._matching(predicate))
        # Stable sorts applied from the least significant field keep ties ordered
        for field in reversed(order.fields):
            rows.sort(key=lambda row: self._getter(row, field.name), reverse=field.is_descending)
        if limit is not None:
            rows = rows[:limit]
        logger.debug(
            "In-memory fetch",
            extra={"operation": "memory.fetch", "rows": len(rows), "limit": limit},
        )
        return rows

    async def count_up_to(self, predicate: Predicate, bound: int) -> int:
        self.count_calls += 1
        return sum(1 for _ in islice(self._matching(predicate), bound))

    def __len__(self) -> int:
        return len(self._rows)


__all__ = ["InMemoryExecutor"]
