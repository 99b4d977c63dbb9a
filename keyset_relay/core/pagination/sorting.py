"""Sort specifications for keyset pagination.

A sort specification is an ordered list of fields with a direction each.
Field order is the tie-break precedence: rows that agree on the first field
are ordered by the second, and so on. The combination must identify a row
uniquely, otherwise rows sharing a key can be skipped between pages.

Usage:
    sort = SortSpec.of(("created_at", "desc"), ("id", "asc"))
    sort = SortSpec.from_mapping({"created_at": -1, "id": 1})
    sort = SortSpec.parse("-created_at,id")
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from enum import StrEnum

from keyset_relay.core.exceptions import InvalidArgumentError


class SortDirection(StrEnum):
    """Direction of a single sort field."""

    ASC = "asc"
    DESC = "desc"

    def reversed(self) -> SortDirection:
        return SortDirection.DESC if self is SortDirection.ASC else SortDirection.ASC

    @classmethod
    def coerce(cls, value: SortDirection | str | int) -> SortDirection:
        """Accept ``"asc"``/``"desc"`` (any case) or Mongo-style ``1``/``-1``."""
        if isinstance(value, SortDirection):
            return value
        if isinstance(value, bool):
            raise InvalidArgumentError(f"Invalid sort direction: {value!r}")
        if isinstance(value, int):
            if value == 1:
                return cls.ASC
            if value == -1:
                return cls.DESC
        elif isinstance(value, str):
            try:
                return cls(value.lower())
            except ValueError:
                pass
        raise InvalidArgumentError(f"Invalid sort direction: {value!r}")


@dataclass(slots=True, frozen=True)
class SortField:
    """A field name with its sort direction."""

    name: str
    direction: SortDirection = SortDirection.ASC

    def reversed(self) -> SortField:
        return SortField(self.name, self.direction.reversed())

    @property
    def is_descending(self) -> bool:
        return self.direction is SortDirection.DESC


@dataclass(slots=True, frozen=True)
class SortSpec:
    """Ordered, non-empty, immutable sequence of sort fields.

    Attributes:
        fields: Sort fields in tie-break precedence order.

    Raises:
        InvalidArgumentError: If the spec is empty or repeats a field name.
    """

    fields: tuple[SortField, ...]

    def __post_init__(self) -> None:
        if not self.fields:
            raise InvalidArgumentError("Sort specification must contain at least one field")
        names = [f.name for f in self.fields]
        duplicates = sorted({n for n in names if names.count(n) > 1})
        if duplicates:
            raise InvalidArgumentError(
                f"Sort specification repeats field(s): {', '.join(duplicates)}",
                extra={"fields": duplicates},
            )

    @classmethod
    def of(cls, *fields: SortField | tuple[str, SortDirection | str | int] | str) -> SortSpec:
        """Build a spec from sort fields, ``(name, direction)`` pairs or bare names.

        Bare names sort ascending.
        """
        result: list[SortField] = []
        for item in fields:
            if isinstance(item, SortField):
                result.append(item)
            elif isinstance(item, str):
                result.append(SortField(item))
            else:
                name, direction = item
                result.append(SortField(name, SortDirection.coerce(direction)))
        return cls(tuple(result))

    @classmethod
    def from_mapping(cls, options: Mapping[str, SortDirection | str | int]) -> SortSpec:
        """Build a spec from an insertion-ordered ``{field: direction}`` mapping."""
        return cls.of(*options.items())

    @classmethod
    def parse(cls, text: str) -> SortSpec:
        """Parse a comma separated list such as ``"-created_at,id"``.

        A leading ``-`` marks a descending field, an optional ``+`` an
        ascending one.
        """
        result: list[SortField] = []
        for raw in text.split(","):
            token = raw.strip()
            if not token:
                continue
            if token[0] in "+-":
                direction = SortDirection.DESC if token[0] == "-" else SortDirection.ASC
                token = token[1:].strip()
            else:
                direction = SortDirection.ASC
            if not token:
                raise InvalidArgumentError(f"Invalid sort expression: {text!r}")
            result.append(SortField(token, direction))
        return cls(tuple(result))

    def reversed(self) -> SortSpec:
        """Return the spec with every direction inverted."""
        return SortSpec(tuple(f.reversed() for f in self.fields))

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def __iter__(self) -> Iterator[SortField]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def __getitem__(self, index: int) -> SortField:
        return self.fields[index]

    def __str__(self) -> str:
        return ",".join(f"-{f.name}" if f.is_descending else f.name for f in self.fields)


__all__ = ["SortDirection", "SortField", "SortSpec"]
