"""Ordered query executor capability.

The pagination engine never talks to a store directly. It hands a predicate,
an order and a limit to an executor and gets rows back. Concrete adapters
(in-memory, SQLAlchemy, document store) live in
``keyset_relay.infra.executors`` and implement this protocol structurally;
they do not need to inherit from anything.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from keyset_relay.core.pagination.predicates import Predicate
    from keyset_relay.core.pagination.sorting import SortSpec


@runtime_checkable
class OrderedQueryExecutor[T](Protocol):
    """Runs ordered, filtered, limited reads against a data source."""

    async def fetch(
        self,
        predicate: Predicate,
        order: SortSpec,
        limit: int | None = None,
    ) -> Sequence[T]:
        """Return rows matching ``predicate`` sorted by ``order``.

        Args:
            predicate: Row filter
            order: Sort order with directions already resolved
            limit: Maximum number of rows; None for no limit
        """
        ...

    async def count_up_to(self, predicate: Predicate, bound: int) -> int:
        """Return ``min(number of matching rows, bound)``.

        Implementations must not scan past ``bound`` matching rows.
        """
        ...


__all__ = ["OrderedQueryExecutor"]
