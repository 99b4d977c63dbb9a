"""Relay connection arguments.

``first``/``after`` page forward, ``last``/``before`` page backward. ``after``
and ``before`` may be combined to bracket a range; ``first`` and ``last``
may not.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from keyset_relay.core.exceptions import InvalidArgumentError

FIRST_AND_LAST_MESSAGE = "first and last must not be included at the same time"


@dataclass(slots=True, frozen=True)
class ConnectionArguments:
    """Validated ``first``/``last``/``after``/``before`` arguments.

    Attributes:
        first: Number of rows from the start of the range
        last: Number of rows from the end of the range
        after: Cursor the range starts after (exclusive)
        before: Cursor the range ends before (exclusive)

    Raises:
        InvalidArgumentError: If both ``first`` and ``last`` are given, or a
            count is negative or not an integer.
    """

    first: int | None = None
    last: int | None = None
    after: str | None = None
    before: str | None = None

    def __post_init__(self) -> None:
        if self.first is not None and self.last is not None:
            raise InvalidArgumentError(
                FIRST_AND_LAST_MESSAGE,
                extra={"first": self.first, "last": self.last},
            )
        for name in ("first", "last"):
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidArgumentError(f"{name} must be an integer", extra={name: value})
            if value < 0:
                raise InvalidArgumentError(f"{name} must be non-negative", extra={name: value})

    @classmethod
    def from_mapping(cls, args: Mapping[str, Any]) -> ConnectionArguments:
        """Build arguments from a mapping, ignoring unrelated keys."""
        return cls(
            first=args.get("first"),
            last=args.get("last"),
            after=args.get("after"),
            before=args.get("before"),
        )

    @property
    def limit(self) -> int | None:
        """Effective row limit: ``first``, else ``last``, else unbounded."""
        return self.first if self.first is not None else self.last

    @property
    def is_backward(self) -> bool:
        """Whether the page is taken from the end of the range."""
        return self.last is not None


__all__ = ["FIRST_AND_LAST_MESSAGE", "ConnectionArguments"]
