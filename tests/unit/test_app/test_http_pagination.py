"""Tests for the FastAPI dependency and problem-detail handlers.

A small app exposes the post data set as a Relay connection so the query
string parsing, the engine and the error rendering run together.
"""

from __future__ import annotations

from typing import Any

from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
import pytest

from keyset_relay.app import ConnectionArgs, configure_exception_handlers
from keyset_relay.core.exceptions import DataSourceError
from keyset_relay.core.pagination import PaginationEngine


@pytest.fixture
def app(memory_executor, sort_by_id) -> FastAPI:
    application = FastAPI()
    configure_exception_handlers(application)

    @application.get("/posts")
    async def list_posts(args: ConnectionArgs) -> dict[str, Any]:
        engine = PaginationEngine(
            args,
            executor=memory_executor,
            sort=sort_by_id,
            resolve_node=lambda row: {"id": row.id, "slug": row.slug},
        )
        connection = await engine.resolve()
        return connection.model_dump(by_alias=True)

    @application.get("/broken")
    async def broken() -> None:
        raise DataSourceError("connection refused", extra={"operation": "db.fetch"})

    return application


@pytest.fixture
async def client(app: FastAPI):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


class TestConnectionEndpoint:
    async def test_first_page(self, client):
        response = await client.get("/posts", params={"first": 3})

        assert response.status_code == 200
        body = response.json()
        assert [edge["node"]["slug"] for edge in body["edges"]] == ["post1", "post2", "post3"]
        assert body["pageInfo"]["hasNextPage"] is True
        assert body["pageInfo"]["hasPreviousPage"] is False

    async def test_follow_end_cursor(self, client):
        first = (await client.get("/posts", params={"first": 3})).json()

        response = await client.get(
            "/posts", params={"first": 3, "after": first["pageInfo"]["endCursor"]}
        )

        assert [edge["node"]["id"] for edge in response.json()["edges"]] == [4, 5, 6]

    async def test_last_page(self, client):
        body = (await client.get("/posts", params={"last": 2})).json()

        assert [edge["node"]["id"] for edge in body["edges"]] == [49, 50]
        assert body["pageInfo"]["hasPreviousPage"] is True

    async def test_default_page_size(self, client, monkeypatch):
        monkeypatch.setenv("PAGINATION_DEFAULT_PAGE_SIZE", "4")

        body = (await client.get("/posts")).json()

        assert len(body["edges"]) == 4
        assert body["pageInfo"]["hasNextPage"] is True

    async def test_unbounded_without_default(self, client):
        body = (await client.get("/posts")).json()

        assert len(body["edges"]) == 50
        assert body["pageInfo"]["hasNextPage"] is False


class TestProblemDetails:
    async def test_first_and_last_is_bad_request(self, client, memory_executor):
        response = await client.get("/posts", params={"first": 2, "last": 2})

        assert response.status_code == 400
        assert response.headers["content-type"].startswith("application/problem+json")
        body = response.json()
        assert body["type"] == "invalid-argument"
        assert body["detail"] == "first and last must not be included at the same time"
        assert body["first"] == 2
        assert memory_executor.fetch_calls == 0

    async def test_malformed_cursor(self, client):
        response = await client.get("/posts", params={"first": 2, "after": "%%%"})

        assert response.status_code == 400
        assert response.json()["type"] == "malformed-cursor"

    async def test_page_size_cap(self, client, monkeypatch):
        monkeypatch.setenv("PAGINATION_MAX_PAGE_SIZE", "10")

        response = await client.get("/posts", params={"first": 11})

        assert response.status_code == 400
        assert response.json()["max_page_size"] == 10

    async def test_negative_count_is_validation_error(self, client):
        response = await client.get("/posts", params={"last": -1})

        assert response.status_code == 422

    async def test_data_source_error_is_service_unavailable(self, client):
        response = await client.get("/broken")

        assert response.status_code == 503
        body = response.json()
        assert body["title"] == "Service Unavailable"
        assert body["operation"] == "db.fetch"
        assert body["instance"] == "http://test/broken"
