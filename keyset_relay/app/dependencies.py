"""Relay connection arguments as a FastAPI dependency.

Usage:
    from keyset_relay.app import ConnectionArgs

    @router.get("/posts", response_model=Connection[PostResponse])
    async def list_posts(args: ConnectionArgs, session: SessionDep) -> Connection[Any]:
        engine = PaginationEngine(
            args,
            executor=SqlAlchemyExecutor(session, Post),
            sort=SortSpec.parse("created_at,slug"),
        )
        return await engine.resolve()

    # GET /posts?first=10&after=W1sia...
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Query

from keyset_relay.core.pagination.arguments import ConnectionArguments
from keyset_relay.core.settings import get_pagination_settings


def get_connection_arguments(
    first: Annotated[
        int | None,
        Query(ge=0, description="Number of items to return from the start"),
    ] = None,
    after: Annotated[
        str | None,
        Query(description="Cursor to start pagination from (exclusive)"),
    ] = None,
    last: Annotated[
        int | None,
        Query(ge=0, description="Number of items to return from the end"),
    ] = None,
    before: Annotated[
        str | None,
        Query(description="Cursor to end pagination at (exclusive)"),
    ] = None,
) -> ConnectionArguments:
    """Read ``first``/``after``/``last``/``before`` from the query string.

    When neither ``first`` nor ``last`` is given, ``first`` defaults to
    ``PAGINATION_DEFAULT_PAGE_SIZE`` if that setting is set.

    Raises:
        InvalidArgumentError: If both ``first`` and ``last`` are given
            (rendered as a 400 problem detail).
    """
    if first is None and last is None:
        first = get_pagination_settings().default_page_size
    return ConnectionArguments(first=first, last=last, after=after, before=before)


ConnectionArgs = Annotated[ConnectionArguments, Depends(get_connection_arguments)]
