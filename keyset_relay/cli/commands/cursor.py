"""Cursor inspection commands.

Cursors are opaque to API clients, but when debugging a paging issue it
helps to see which sort key a cursor points at.

Examples:
    keyset-relay cursor decode W1siaSIsMTBdLFsicyIsInBvc3QxMCJdXQ
    keyset-relay cursor decode --arity 2 W1siaSIsMTBdLFsicyIsInBvc3QxMCJdXQ
    keyset-relay cursor encode '[10, "post10"]'
"""

from __future__ import annotations

import base64
import json
import math
import sys
from typing import Any

import click

from keyset_relay.cli.utils import error, info
from keyset_relay.core.exceptions import CursorEncodeError, MalformedCursorError
from keyset_relay.core.pagination.cursor import CursorCodec


def _render(value: Any) -> Any:
    """Render a decoded key value as JSON-safe data."""
    if value is None or isinstance(value, bool | int | str):
        return value
    if isinstance(value, float):
        return value if math.isfinite(value) else repr(value)
    if isinstance(value, bytes):
        return base64.b64encode(value).decode("ascii")
    return str(value)


@click.group(name="cursor")
def cursor() -> None:
    """Inspect and build pagination cursors."""


@cursor.command(name="decode")
@click.argument("token")
@click.option("--arity", type=int, default=None, help="Expected number of sort fields")
def decode_cmd(token: str, arity: int | None) -> None:
    """Decode TOKEN and print its sort key as JSON."""
    try:
        key = CursorCodec.decode(token, arity=arity)
    except MalformedCursorError as e:
        error(e.detail)
        sys.exit(1)

    payload = [{"type": type(value).__name__, "value": _render(value)} for value in key]
    click.echo(json.dumps(payload, ensure_ascii=False))


@cursor.command(name="encode")
@click.argument("values")
def encode_cmd(values: str) -> None:
    """Encode a JSON array of VALUES into a cursor.

    Only JSON types are accepted, so this is meant for debugging against
    integer, string and boolean sort keys.
    """
    try:
        key = json.loads(values)
    except json.JSONDecodeError as e:
        error(f"VALUES is not valid JSON: {e}")
        sys.exit(1)
    if not isinstance(key, list):
        error("VALUES must be a JSON array")
        sys.exit(1)

    try:
        token = CursorCodec.encode(key)
    except CursorEncodeError as e:
        error(e.detail)
        sys.exit(1)

    info(f"{len(key)} value(s) encoded")
    click.echo(token)
