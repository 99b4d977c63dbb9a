"""Cursor encoding and decoding for keyset pagination.

Cursors are opaque strings that encode the position of a row in an ordered
result set: the values of the row's sort fields, in sort order. Passing a
cursor back as ``after``/``before`` lets the next query seek directly to that
position.

The cursor format is:
1. A JSON list of ``[tag, payload]`` pairs, one per sort field
2. Base64 URL-safe encoded, padding stripped

Type tags keep every value's Python type across the round-trip, so an int
never comes back as a float and a datetime keeps its offset and microseconds.

Example cursor payload:
    [["dt","2025-01-15T10:30:00+00:00"],["s","post-1"]]

Cursors are not signed and their format may change between releases. Clients
must pass them back unchanged and never build them by hand.
"""

from __future__ import annotations

import base64
import binascii
import json
from collections.abc import Callable, Mapping, Sequence
from datetime import date, datetime, time
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING, Any
from uuid import UUID

from keyset_relay.core.exceptions import CursorEncodeError, MalformedCursorError

if TYPE_CHECKING:
    from keyset_relay.core.pagination.sorting import SortSpec

type CursorKey = tuple[Any, ...]
type KeyExtractor = Callable[[Any, SortSpec], CursorKey]


def _decode_float(payload: Any) -> float:
    if not isinstance(payload, str):
        raise ValueError("float payload must be a string")
    return float(payload)


def _decode_int(payload: Any) -> int:
    if isinstance(payload, bool) or not isinstance(payload, int):
        raise ValueError("int payload must be an integer")
    return payload


def _decode_bool(payload: Any) -> bool:
    if not isinstance(payload, bool):
        raise ValueError("bool payload must be a boolean")
    return payload


def _decode_str(payload: Any) -> str:
    if not isinstance(payload, str):
        raise ValueError("str payload must be a string")
    return payload


def _decode_none(payload: Any) -> None:
    if payload is not None:
        raise ValueError("null payload must be null")


def _decode_decimal(payload: Any) -> Decimal:
    return Decimal(_decode_str(payload))


def _decode_bytes(payload: Any) -> bytes:
    return base64.b64decode(_decode_str(payload), validate=True)


def _decode_datetime(payload: Any) -> datetime:
    return datetime.fromisoformat(_decode_str(payload))


def _decode_date(payload: Any) -> date:
    return date.fromisoformat(_decode_str(payload))


def _decode_time(payload: Any) -> time:
    return time.fromisoformat(_decode_str(payload))


def _decode_uuid(payload: Any) -> UUID:
    return UUID(_decode_str(payload))


# Order matters: bool before int, datetime before date.
_ENCODERS: tuple[tuple[type, str, Callable[[Any], Any]], ...] = (
    (bool, "b", lambda v: v),
    (int, "i", int),
    (float, "f", float.__repr__),
    (Decimal, "D", str),
    (str, "s", str),
    (bytes, "y", lambda v: base64.b64encode(v).decode("ascii")),
    (datetime, "dt", lambda v: v.isoformat()),
    (date, "d", lambda v: v.isoformat()),
    (time, "t", lambda v: v.isoformat()),
    (UUID, "u", str),
)

_DECODERS: dict[str, Callable[[Any], Any]] = {
    "n": _decode_none,
    "b": _decode_bool,
    "i": _decode_int,
    "f": _decode_float,
    "D": _decode_decimal,
    "s": _decode_str,
    "y": _decode_bytes,
    "dt": _decode_datetime,
    "d": _decode_date,
    "t": _decode_time,
    "u": _decode_uuid,
}


def default_field_getter(row: Any, name: str) -> Any:
    """Read ``name`` from a row by attribute, falling back to mapping lookup."""
    if isinstance(row, Mapping):
        return row[name]
    try:
        return getattr(row, name)
    except AttributeError:
        if hasattr(row, "__getitem__"):
            return row[name]
        raise


def extract_key(row: Any, sort: SortSpec) -> CursorKey:
    """Extract the cursor key of ``row`` under ``sort`` by direct field lookup."""
    return tuple(default_field_getter(row, field.name) for field in sort)


class CursorCodec:
    """Encode and decode pagination cursors.

    Usage:
        # Encoding
        cursor = CursorCodec.encode((datetime.now(UTC), "abc-123"))

        # Decoding
        key = CursorCodec.decode(cursor, arity=2)
        print(key)  # (datetime(...), "abc-123")
    """

    @staticmethod
    def encode(key: Sequence[Any]) -> str:
        """Encode a cursor key to an opaque string.

        Args:
            key: Sort field values in sort order

        Returns:
            URL-safe base64 string without padding

        Raises:
            CursorEncodeError: If a value has an unsupported type or cannot
                be rendered (e.g. an int beyond the str conversion limit)
        """
        pairs = [CursorCodec._serialize_value(value) for value in key]
        try:
            json_str = json.dumps(pairs, separators=(",", ":"), ensure_ascii=True)
        except ValueError as e:
            raise CursorEncodeError(f"Cannot encode cursor key: {e}") from e
        return base64.urlsafe_b64encode(json_str.encode("ascii")).decode("ascii").rstrip("=")

    @staticmethod
    def decode(cursor: str, *, arity: int | None = None) -> CursorKey:
        """Decode a cursor string to a cursor key.

        Args:
            cursor: Value previously returned by ``encode``
            arity: Expected number of values; checked when given

        Returns:
            Tuple of sort field values

        Raises:
            MalformedCursorError: If the cursor is not a valid encoding
        """
        if not isinstance(cursor, str) or not cursor:
            raise MalformedCursorError("Invalid cursor: expected a non-empty string")
        try:
            padded = cursor + "=" * (-len(cursor) % 4)
            raw = base64.b64decode(padded.encode("ascii"), altchars=b"-_", validate=True)
            payload = json.loads(raw.decode("utf-8"))
        except (UnicodeError, binascii.Error, ValueError) as e:
            raise MalformedCursorError(f"Invalid cursor: {e}") from e
        except RecursionError as e:
            raise MalformedCursorError("Invalid cursor: payload is nested too deeply") from e

        if not isinstance(payload, list):
            raise MalformedCursorError("Invalid cursor: payload is not a list")
        if arity is not None and len(payload) != arity:
            raise MalformedCursorError(
                f"Invalid cursor: expected {arity} value(s), got {len(payload)}",
                extra={"expected": arity, "actual": len(payload)},
            )
        return tuple(CursorCodec._deserialize_value(item) for item in payload)

    @staticmethod
    def _serialize_value(value: Any) -> list[Any]:
        """Convert a value to its ``[tag, payload]`` pair."""
        if value is None:
            return ["n", None]
        for kind, tag, convert in _ENCODERS:
            if isinstance(value, kind):
                return [tag, convert(value)]
        raise CursorEncodeError(
            f"Cannot encode value of type {type(value).__name__} in a cursor",
            extra={"value_type": type(value).__name__},
        )

    @staticmethod
    def _deserialize_value(item: Any) -> Any:
        if not isinstance(item, list) or len(item) != 2 or not isinstance(item[0], str):
            raise MalformedCursorError("Invalid cursor: malformed value entry")
        tag, payload = item
        decoder = _DECODERS.get(tag)
        if decoder is None:
            raise MalformedCursorError(
                f"Invalid cursor: unsupported type marker {tag!r}",
                extra={"tag": tag},
            )
        try:
            return decoder(payload)
        except (ValueError, TypeError, InvalidOperation, binascii.Error) as e:
            raise MalformedCursorError(f"Invalid cursor: bad {tag!r} value ({e})") from e

    @staticmethod
    def from_row(
        row: Any,
        sort: SortSpec,
        extract: KeyExtractor = extract_key,
    ) -> str:
        """Create a cursor from a row.

        Args:
            row: Model instance, mapping or any object exposing the sort fields
            sort: Active sort specification
            extract: Key extractor; defaults to direct field lookup

        Example:
            cursor = CursorCodec.from_row(post, SortSpec.of("created_at", "slug"))
        """
        return CursorCodec.encode(extract(row, sort))


__all__ = [
    "CursorCodec",
    "CursorKey",
    "KeyExtractor",
    "default_field_getter",
    "extract_key",
]
