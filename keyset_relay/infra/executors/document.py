"""Document-store ordered query executor.

Compiles predicates into Mongo-style filter documents:

    Comparison("created_at", GT, t1)   {"created_at": {"$gt": t1}}
    And((a, b))                        {"$and": [a, b]}
    Or((a, b))                         {"$or": [a, b]}
    TRUE                               {}

and runs them against an async collection with the Motor / PyMongo async
API: ``find(filter, sort=..., limit=...)`` returning a cursor with
``to_list(length)``, and ``count_documents(filter, limit=...)``.

Usage:
    from pymongo import AsyncMongoClient
    from pymongo.errors import PyMongoError

    collection = AsyncMongoClient()["blog"]["posts"]
    executor = DocumentExecutor(collection, driver_errors=(PyMongoError,))
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any, Protocol

from keyset_relay.core.exceptions import DataSourceError
from keyset_relay.core.pagination.predicates import (
    And,
    Comparison,
    Operator,
    Or,
    Predicate,
    TruePredicate,
)
from keyset_relay.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from keyset_relay.core.pagination.sorting import SortSpec

_lazy = get_lazy_logger(__name__)

MONGO_OPERATORS: dict[Operator, str] = {
    Operator.EQ: "$eq",
    Operator.NE: "$ne",
    Operator.GT: "$gt",
    Operator.GE: "$gte",
    Operator.LT: "$lt",
    Operator.LE: "$lte",
}


class AsyncCollection(Protocol):
    """The subset of an async Mongo collection the executor relies on."""

    def find(self, filter: dict[str, Any], *args: Any, **kwargs: Any) -> Any: ...

    async def count_documents(self, filter: dict[str, Any], **kwargs: Any) -> int: ...


def compile_filter(predicate: Predicate) -> dict[str, Any]:
    """Translate a predicate tree into a Mongo filter document."""
    if isinstance(predicate, TruePredicate):
        return {}
    if isinstance(predicate, Comparison):
        return {predicate.field: {MONGO_OPERATORS[predicate.op]: predicate.value}}
    if isinstance(predicate, And):
        return {"$and": [compile_filter(part) for part in predicate.parts]}
    if isinstance(predicate, Or):
        if not predicate.parts:
            # $or rejects an empty list
            return {"$expr": False}
        return {"$or": [compile_filter(part) for part in predicate.parts]}
    raise TypeError(f"Unsupported predicate type: {type(predicate).__name__}")


def compile_sort(order: SortSpec) -> list[tuple[str, int]]:
    """Translate a sort spec into ``(field, 1|-1)`` pairs."""
    return [(field.name, -1 if field.is_descending else 1) for field in order]


class DocumentExecutor:
    """Run keyset queries against an async document collection.

    Args:
        collection: Motor or PyMongo async collection
        driver_errors: Exception types to re-raise as ``DataSourceError``;
            anything else propagates unchanged
    """

    def __init__(
        self,
        collection: AsyncCollection,
        *,
        driver_errors: tuple[type[Exception], ...] = (),
    ) -> None:
        self.collection = collection
        self.driver_errors = driver_errors

    async def fetch(
        self,
        predicate: Predicate,
        order: SortSpec,
        limit: int | None = None,
    ) -> Sequence[dict[str, Any]]:
        document = compile_filter(predicate)
        options: dict[str, Any] = {"sort": compile_sort(order)}
        if limit is not None:
            if limit == 0:
                # Mongo treats limit=0 as "no limit"
                return []
            options["limit"] = limit

        try:
            cursor = self.collection.find(document, **options)
            docs = await cursor.to_list(length=None)
        except self.driver_errors as e:
            raise DataSourceError(
                "Failed to fetch documents",
                extra={"operation": "document.fetch"},
            ) from e

        _lazy.debug(lambda: f"document.fetch: filter={document!r} limit={limit} -> {len(docs)} docs")
        return docs

    async def count_up_to(self, predicate: Predicate, bound: int) -> int:
        if bound <= 0:
            return 0
        document = compile_filter(predicate)
        try:
            count = await self.collection.count_documents(document, limit=bound)
        except self.driver_errors as e:
            raise DataSourceError(
                "Failed to count documents",
                extra={"operation": "document.count_up_to"},
            ) from e
        return min(int(count), bound)


__all__ = ["DocumentExecutor", "compile_filter", "compile_sort"]
