"""SQLAlchemy ordered query executor.

Compiles predicates into SQLAlchemy clauses and runs them through an
``AsyncSession``. The keyset predicate for ORDER BY created_at DESC, id ASC
with cursor at (t1, id1) becomes:

    WHERE (created_at < t1) OR (created_at = t1 AND id > id1)

which lets the database seek through a composite index instead of scanning
an OFFSET.

Usage:
    executor = SqlAlchemyExecutor(session, Post, select(Post).where(Post.is_published))
    engine = PaginationEngine({"first": 20}, executor=executor, sort=sort)
    connection = await engine.resolve()
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

from sqlalchemy import ColumnElement, Select, and_, false, func, or_, select, true
from sqlalchemy.exc import SQLAlchemyError

from keyset_relay.core.exceptions import DataSourceError, InvalidArgumentError
from keyset_relay.core.pagination.predicates import And, Comparison, Or, Predicate, TruePredicate
from keyset_relay.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession
    from sqlalchemy.orm import InstrumentedAttribute

    from keyset_relay.core.pagination.sorting import SortSpec

_lazy = get_lazy_logger(__name__)


def compile_predicate(
    predicate: Predicate,
    column_for: Callable[[str], ColumnElement[Any] | InstrumentedAttribute[Any]],
) -> ColumnElement[bool]:
    """Translate a predicate tree into a SQLAlchemy boolean clause.

    Args:
        predicate: Predicate to compile
        column_for: Resolves a field name to a column

    Returns:
        Boolean clause usable in ``Select.where``
    """
    if isinstance(predicate, TruePredicate):
        return true()
    if isinstance(predicate, Comparison):
        # Operator functions build SQL expressions when given a column
        return predicate.op.evaluate(column_for(predicate.field), predicate.value)
    if isinstance(predicate, And):
        return and_(*(compile_predicate(part, column_for) for part in predicate.parts))
    if isinstance(predicate, Or):
        if not predicate.parts:
            return false()
        return or_(*(compile_predicate(part, column_for) for part in predicate.parts))
    raise TypeError(f"Unsupported predicate type: {type(predicate).__name__}")


class SqlAlchemyExecutor[T]:
    """Run keyset queries for an ORM model through an async session.

    Args:
        session: Database session
        model: Mapped class whose attributes are named by the sort fields
        statement: Base select statement (without ORDER BY/LIMIT);
            defaults to ``select(model)``

    An ``AsyncSession`` cannot run statements concurrently, so the executor
    serializes its own calls; the engine may still issue them together.

    Any ``SQLAlchemyError`` raised while executing is re-raised as
    ``DataSourceError`` with the original exception chained.
    """

    def __init__(
        self,
        session: AsyncSession,
        model: type[T],
        statement: Select[Any] | None = None,
    ) -> None:
        self.session = session
        self.model = model
        self.statement = statement if statement is not None else select(model)
        self._lock = asyncio.Lock()

    def column_for(self, name: str) -> InstrumentedAttribute[Any]:
        column = getattr(self.model, name, None)
        if column is None or not hasattr(column, "asc"):
            raise InvalidArgumentError(
                f"{self.model.__name__} has no sortable column {name!r}",
                extra={"field": name, "model": self.model.__name__},
            )
        return column

    def _where(self, predicate: Predicate) -> Select[Any]:
        return self.statement.where(compile_predicate(predicate, self.column_for))

    async def fetch(
        self,
        predicate: Predicate,
        order: SortSpec,
        limit: int | None = None,
    ) -> Sequence[T]:
        stmt = self._where(predicate).order_by(None)
        for field in order:
            column = self.column_for(field.name)
            stmt = stmt.order_by(column.desc() if field.is_descending else column.asc())
        if limit is not None:
            stmt = stmt.limit(limit)

        try:
            async with self._lock:
                result = await self.session.execute(stmt)
            rows = list(result.scalars().all())
        except SQLAlchemyError as e:
            raise DataSourceError(
                f"Failed to fetch {self.model.__name__} page",
                extra={"operation": "db.fetch", "entity": self.model.__name__},
            ) from e

        _lazy.debug(
            lambda: f"db.fetch: {self.model.__name__}(order={order}, limit={limit}) -> {len(rows)} rows"
        )
        return rows

    async def count_up_to(self, predicate: Predicate, bound: int) -> int:
        # LIMIT inside the subquery stops the scan at `bound` rows
        bounded = self._where(predicate).order_by(None).limit(bound).subquery()
        stmt = select(func.count()).select_from(bounded)
        try:
            async with self._lock:
                count = (await self.session.execute(stmt)).scalar_one()
        except SQLAlchemyError as e:
            raise DataSourceError(
                f"Failed to count {self.model.__name__} rows",
                extra={"operation": "db.count_up_to", "entity": self.model.__name__},
            ) from e

        _lazy.debug(lambda: f"db.count_up_to: {self.model.__name__}(bound={bound}) -> {count}")
        return int(count)


__all__ = ["SqlAlchemyExecutor", "compile_predicate"]
