"""Typed, composable row predicates and the keyset range predicate.

Predicates are small immutable trees built from four node kinds:

    TruePredicate          matches every row
    Comparison(f, op, v)   field ``f`` compared with ``v`` using ``op``
    And(parts)             every part matches
    Or(parts)              at least one part matches

They carry no query-language syntax of their own. Executor adapters compile
them into whatever their store understands (SQLAlchemy clauses, Mongo filter
documents) or evaluate them directly with ``Predicate.matches``.

The keyset range predicate:
    For ORDER BY a DESC, b ASC with cursor key (v1, v2), "after" becomes:
        (a < v1) OR (a = v1 AND b > v2)

    In general, for fields f0..fN-1 and key k0..kN-1, branch i fixes
    f0..fi-1 to their key values and applies a strict comparison to fi.
    The OR of all N branches selects exactly the rows that sort strictly
    after (or before) the key under the composite order.
"""

from __future__ import annotations

import operator
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from keyset_relay.core.exceptions import MalformedCursorError
from keyset_relay.core.pagination.cursor import default_field_getter
from keyset_relay.core.pagination.sorting import SortSpec

type FieldGetter = Callable[[Any, str], Any]


class Operator(StrEnum):
    """Comparison operators understood by every executor adapter."""

    EQ = "eq"
    NE = "ne"
    GT = "gt"
    GE = "ge"
    LT = "lt"
    LE = "le"

    def evaluate(self, left: Any, right: Any) -> bool:
        return _OPERATOR_FUNCS[self](left, right)


_OPERATOR_FUNCS: dict[Operator, Callable[[Any, Any], bool]] = {
    Operator.EQ: operator.eq,
    Operator.NE: operator.ne,
    Operator.GT: operator.gt,
    Operator.GE: operator.ge,
    Operator.LT: operator.lt,
    Operator.LE: operator.le,
}


class KeysetDirection(StrEnum):
    """Which side of a cursor key a range predicate selects."""

    AFTER = "after"
    BEFORE = "before"


class Predicate(ABC):
    """Base class for row predicates."""

    @abstractmethod
    def matches(self, row: Any, getter: FieldGetter = default_field_getter) -> bool:
        """Evaluate the predicate against a single row.

        Args:
            row: Row object or mapping
            getter: Reads a field value from the row by name

        Returns:
            True if the row satisfies the predicate
        """
        ...


@dataclass(slots=True, frozen=True)
class TruePredicate(Predicate):
    """Predicate that matches every row."""

    def matches(self, row: Any, getter: FieldGetter = default_field_getter) -> bool:
        return True


@dataclass(slots=True, frozen=True)
class Comparison(Predicate):
    """Compare a single field with a constant value."""

    field: str
    op: Operator
    value: Any

    def matches(self, row: Any, getter: FieldGetter = default_field_getter) -> bool:
        return self.op.evaluate(getter(row, self.field), self.value)


@dataclass(slots=True, frozen=True)
class And(Predicate):
    """Conjunction of predicates."""

    parts: tuple[Predicate, ...]

    def matches(self, row: Any, getter: FieldGetter = default_field_getter) -> bool:
        return all(part.matches(row, getter) for part in self.parts)


@dataclass(slots=True, frozen=True)
class Or(Predicate):
    """Disjunction of predicates. An empty disjunction matches nothing."""

    parts: tuple[Predicate, ...]

    def matches(self, row: Any, getter: FieldGetter = default_field_getter) -> bool:
        return any(part.matches(row, getter) for part in self.parts)


TRUE = TruePredicate()


def and_(*parts: Predicate | None) -> Predicate:
    """AND predicates together, flattening nested conjunctions.

    ``None`` and ``TRUE`` parts are dropped; with nothing left the result is
    ``TRUE`` and with one part left that part is returned unchanged.
    """
    flat: list[Predicate] = []
    for part in parts:
        if part is None or isinstance(part, TruePredicate):
            continue
        if isinstance(part, And):
            flat.extend(part.parts)
        else:
            flat.append(part)
    if not flat:
        return TRUE
    if len(flat) == 1:
        return flat[0]
    return And(tuple(flat))


def or_(*parts: Predicate) -> Predicate:
    """OR predicates together, flattening nested disjunctions.

    Any ``TRUE`` part makes the whole disjunction ``TRUE``.
    """
    flat: list[Predicate] = []
    for part in parts:
        if isinstance(part, TruePredicate):
            return TRUE
        if isinstance(part, Or):
            flat.extend(part.parts)
        else:
            flat.append(part)
    if len(flat) == 1:
        return flat[0]
    return Or(tuple(flat))


def eq(field: str, value: Any) -> Comparison:
    """Shorthand for an equality comparison."""
    return Comparison(field, Operator.EQ, value)


def keyset_predicate(
    sort: SortSpec,
    key: Sequence[Any],
    direction: KeysetDirection | str,
) -> Predicate:
    """Build the predicate selecting rows strictly after or before ``key``.

    Args:
        sort: Active sort specification
        key: Decoded cursor key, one value per sort field
        direction: ``"after"`` or ``"before"``

    Returns:
        OR of one conjunction per sort field

    Raises:
        MalformedCursorError: If the key does not have one value per sort field

    Example:
        sort = SortSpec.of(("created_at", "desc"), ("id", "asc"))
        keyset_predicate(sort, (t1, 7), "after")
        # (created_at < t1) OR (created_at = t1 AND id > 7)
    """
    direction = KeysetDirection(direction)
    if len(key) != len(sort):
        raise MalformedCursorError(
            f"Cursor key has {len(key)} value(s) but sort has {len(sort)} field(s)",
            extra={"expected": len(sort), "actual": len(key)},
        )

    branches: list[Predicate] = []
    for i, field in enumerate(sort):
        # For "after" with "asc" we want rows greater than the key, "desc" flips it
        ascending = not field.is_descending
        if direction is KeysetDirection.AFTER:
            op = Operator.GT if ascending else Operator.LT
        else:
            op = Operator.LT if ascending else Operator.GT

        conditions: list[Predicate] = [eq(sort[j].name, key[j]) for j in range(i)]
        conditions.append(Comparison(field.name, op, key[i]))
        branches.append(and_(*conditions))

    return or_(*branches)


__all__ = [
    "TRUE",
    "And",
    "Comparison",
    "FieldGetter",
    "KeysetDirection",
    "Operator",
    "Or",
    "Predicate",
    "TruePredicate",
    "and_",
    "eq",
    "keyset_predicate",
    "or_",
]
