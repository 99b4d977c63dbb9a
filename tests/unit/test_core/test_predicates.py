"""Unit tests for predicate trees and the keyset range predicate."""
from __future__ import annotations

from datetime import datetime

import pytest

from keyset_relay.core.exceptions import MalformedCursorError
from keyset_relay.core.pagination.predicates import (
    TRUE,
    And,
    Comparison,
    KeysetDirection,
    Operator,
    Or,
    and_,
    eq,
    keyset_predicate,
    or_,
)
from keyset_relay.core.pagination.sorting import SortSpec


class TestCombinators:
    def test_and_drops_true_and_none(self):
        a = eq("id", 1)
        assert and_(TRUE, None, a) is a

    def test_and_of_nothing_is_true(self):
        assert and_() is TRUE
        assert and_(None, TRUE) is TRUE

    def test_and_flattens(self):
        a, b, c = eq("a", 1), eq("b", 2), eq("c", 3)
        assert and_(and_(a, b), c) == And((a, b, c))

    def test_or_with_true_is_true(self):
        assert or_(eq("a", 1), TRUE) is TRUE

    def test_or_flattens_and_unwraps_single(self):
        a, b, c = eq("a", 1), eq("b", 2), eq("c", 3)
        assert or_(a) is a
        assert or_(or_(a, b), c) == Or((a, b, c))

    def test_empty_or_matches_nothing(self):
        assert not Or(()).matches({"a": 1})

    @pytest.mark.parametrize(
        ("op", "value", "expected"),
        [
            (Operator.EQ, 5, True),
            (Operator.NE, 5, False),
            (Operator.GT, 4, True),
            (Operator.GE, 5, True),
            (Operator.LT, 5, False),
            (Operator.LE, 5, True),
        ],
    )
    def test_comparison_matches(self, op, value, expected):
        assert Comparison("n", op, value).matches({"n": 5}) is expected

    def test_matches_uses_custom_getter(self):
        predicate = eq("ID", 7)
        assert predicate.matches({"id": 7}, lambda row, name: row[name.lower()])


class TestKeysetPredicate:
    """Shape and semantics of the keyset range predicate."""

    def test_single_field_after_ascending(self):
        sort = SortSpec.of("id")
        assert keyset_predicate(sort, (10,), "after") == Comparison("id", Operator.GT, 10)

    def test_single_field_before_ascending(self):
        sort = SortSpec.of("id")
        assert keyset_predicate(sort, (10,), "before") == Comparison("id", Operator.LT, 10)

    def test_descending_field_flips_comparison(self):
        sort = SortSpec.of(("id", "desc"))

        assert keyset_predicate(sort, (10,), KeysetDirection.AFTER).op is Operator.LT
        assert keyset_predicate(sort, (10,), KeysetDirection.BEFORE).op is Operator.GT

    def test_composite_branches(self):
        """(a < v1) OR (a = v1 AND b > v2) for ORDER BY a DESC, b ASC."""
        t1 = datetime(2000, 1, 1)
        sort = SortSpec.of(("created_at", "desc"), ("id", "asc"))

        predicate = keyset_predicate(sort, (t1, 7), "after")

        assert predicate == Or(
            (
                Comparison("created_at", Operator.LT, t1),
                And((eq("created_at", t1), Comparison("id", Operator.GT, 7))),
            )
        )

    def test_three_fields_prefix_equality(self):
        sort = SortSpec.of("a", "b", "c")
        predicate = keyset_predicate(sort, (1, 2, 3), "before")

        assert isinstance(predicate, Or)
        assert predicate.parts[2] == And((eq("a", 1), eq("b", 2), Comparison("c", Operator.LT, 3)))

    @pytest.mark.parametrize("direction", ["after", "before"])
    def test_selects_exactly_one_side(self, direction):
        """Rows strictly on one side of the key under the composite order."""
        sort = SortSpec.of(("a", "desc"), ("b", "asc"))
        rows = [{"a": a, "b": b} for a in range(3) for b in range(3)]
        ordered = sorted(rows, key=lambda r: (-r["a"], r["b"]))
        pivot = ordered.index({"a": 1, "b": 1})

        predicate = keyset_predicate(sort, (1, 1), direction)
        selected = [r for r in ordered if predicate.matches(r)]

        expected = ordered[pivot + 1 :] if direction == "after" else ordered[:pivot]
        assert selected == expected

    def test_key_length_mismatch(self):
        with pytest.raises(MalformedCursorError, match="sort has 2 field"):
            keyset_predicate(SortSpec.of("a", "b"), (1,), "after")

    def test_unknown_direction(self):
        with pytest.raises(ValueError):
            keyset_predicate(SortSpec.of("a"), (1,), "sideways")
