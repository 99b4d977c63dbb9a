"""Pytest configuration and shared fixtures.

Organization:
    - Settings Fixtures: isolate cached settings between tests
    - Data Fixtures: the 50-post data set and sort specifications
    - Executor Fixtures: in-memory and SQLite-backed executors

The post data set mirrors a typical blog table: post ``i`` (1..50) has
slug ``post{i}``, category ``Foo`` for odd and ``Bar`` for even ``i``, and a
creation date in year ``1990 + i``.
"""

from __future__ import annotations

import os
from collections.abc import AsyncGenerator
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

import pytest
from sqlalchemy import DateTime, Integer, String
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from keyset_relay.core.pagination import SortSpec
from keyset_relay.core.settings import PaginationSettings, clear_all_caches
from keyset_relay.infra.executors import InMemoryExecutor, SqlAlchemyExecutor

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine

# Ensure tests never pick up a developer's environment
os.environ.pop("PAGINATION_MAX_PAGE_SIZE", None)
os.environ.pop("PAGINATION_DEFAULT_PAGE_SIZE", None)

POST_COUNT = 50


# ============================================================================
# Models
# ============================================================================


@dataclass(slots=True, frozen=True)
class PostRow:
    """Plain post record served by the in-memory executor."""

    id: int
    slug: str
    category: str
    created_at: datetime


class Base(DeclarativeBase):
    pass


class Post(Base):
    """Post table used by the SQLite executor tests."""

    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    slug: Mapped[str] = mapped_column(String(50), unique=True)
    category: Mapped[str] = mapped_column(String(20))
    created_at: Mapped[datetime] = mapped_column(DateTime)


def make_post_rows(count: int = POST_COUNT) -> list[PostRow]:
    return [
        PostRow(
            id=i,
            slug=f"post{i}",
            category="Foo" if i % 2 else "Bar",
            created_at=datetime(1990 + i, 6, 5),
        )
        for i in range(1, count + 1)
    ]


# ============================================================================
# Settings Fixtures
# ============================================================================


@pytest.fixture(autouse=True)
def _clear_settings_cache():
    """Reset cached settings before and after every test."""
    clear_all_caches()
    yield
    clear_all_caches()


@pytest.fixture
def sequential_settings() -> PaginationSettings:
    """Settings that resolve edges and page info one after another."""
    return PaginationSettings(concurrent_probes=False)


# ============================================================================
# Data Fixtures
# ============================================================================


@pytest.fixture
def post_rows() -> list[PostRow]:
    """The 50-post data set as plain records, in id order."""
    return make_post_rows()


@pytest.fixture
def sort_by_created() -> SortSpec:
    """Creation date ascending, tie-broken by the unique slug."""
    return SortSpec.of(("created_at", "asc"), ("slug", "asc"))


@pytest.fixture
def sort_by_id() -> SortSpec:
    return SortSpec.of(("id", "asc"), ("slug", "asc"))


# ============================================================================
# Executor Fixtures
# ============================================================================


@pytest.fixture
def post_model() -> type[Post]:
    """The mapped ``Post`` class backing ``db_session``."""
    return Post


@pytest.fixture
def memory_executor(post_rows: list[PostRow]) -> InMemoryExecutor[PostRow]:
    """In-memory executor over the post data set."""
    return InMemoryExecutor(post_rows)


@pytest.fixture
async def db_engine() -> AsyncGenerator[AsyncEngine]:
    """Create async SQLAlchemy engine with in-memory SQLite."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture
async def db_session(db_engine: AsyncEngine) -> AsyncGenerator[AsyncSession]:
    """Session over a freshly created and populated ``posts`` table."""
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_maker = async_sessionmaker(db_engine, expire_on_commit=False)
    async with session_maker() as session:
        session.add_all(
            Post(id=row.id, slug=row.slug, category=row.category, created_at=row.created_at)
            for row in make_post_rows()
        )
        await session.commit()
        try:
            yield session
        finally:
            await session.rollback()

    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
def sql_executor(db_session: AsyncSession) -> SqlAlchemyExecutor[Post]:
    """SQLAlchemy executor over the populated ``posts`` table."""
    return SqlAlchemyExecutor(db_session, Post)
