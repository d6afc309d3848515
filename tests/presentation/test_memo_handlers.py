"""Tests for memo HTTP handlers."""

from collections.abc import AsyncGenerator
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import aiohttp
import pytest

from memopad.domain.entities.memo import Memo
from memopad.domain.exceptions import StoreError
from memopad.infrastructure.http.server import HttpServer
from memopad.infrastructure.persistence import DatabaseManager, SQLMemoRepository
from memopad.presentation.memo_handlers import (
    form_from_payload,
    memo_to_dict,
    register_memo_routes,
)


@pytest.fixture
async def db_manager() -> AsyncGenerator[DatabaseManager, None]:
    """Create an in-memory database."""
    manager = DatabaseManager("sqlite+aiosqlite:///:memory:")
    await manager.create_tables()
    yield manager
    await manager.close()


@pytest.fixture
def repository(db_manager: DatabaseManager) -> SQLMemoRepository:
    """Create a repository on the in-memory database."""
    return SQLMemoRepository(db_manager.get_session)


async def start_server(db_manager, repository) -> HttpServer:
    server = HttpServer(
        db_manager=db_manager,
        registrars=[lambda app: register_memo_routes(app, repository)],
        host="127.0.0.1",
        port=0,
    )
    await server.start()
    return server


@pytest.fixture
async def base_url(
    db_manager: DatabaseManager, repository: SQLMemoRepository
) -> AsyncGenerator[str, None]:
    """Start the server with real memo routes."""
    server = await start_server(db_manager, repository)
    yield f"http://127.0.0.1:{server.port}"
    await server.stop()


@pytest.fixture
def failing_repository() -> AsyncMock:
    """Create a repository whose operations all fail."""
    mock = AsyncMock()
    error = StoreError("connection refused")
    for name in (
        "list_all",
        "list_by_category",
        "search",
        "create",
        "update",
        "get_by_id",
        "delete_by_id",
    ):
        setattr(mock, name, AsyncMock(side_effect=error))
    return mock


class TestMemoToDict:
    """memo_to_dict tests."""

    def test_serializes_all_fields(self) -> None:
        """Test JSON conversion of a memo."""
        now = datetime(2024, 1, 15, 12, 0, 0, tzinfo=timezone.utc)
        memo = Memo(
            id="m1",
            title="Title",
            content="Body",
            category="unknown",
            tags=["a"],
            created_at=now,
            updated_at=now,
        )

        assert memo_to_dict(memo) == {
            "id": "m1",
            "title": "Title",
            "content": "Body",
            "category": "unknown",
            "category_label": "Other",
            "tags": ["a"],
            "created_at": "2024-01-15T12:00:00+00:00",
            "updated_at": "2024-01-15T12:00:00+00:00",
        }


class TestFormFromPayload:
    """form_from_payload tests."""

    def test_defaults_for_missing_fields(self) -> None:
        """Test that optional fields get defaults."""
        form = form_from_payload({"title": "Only title"})

        assert form.content == ""
        assert form.category == "other"
        assert form.tags == []

    @pytest.mark.parametrize(
        "payload",
        [
            [],
            "text",
            {},
            {"title": 3},
            {"title": "x", "category": ["a"]},
            {"title": "x", "content": {"a": 1}},
            {"title": "x", "tags": "a,b"},
        ],
    )
    def test_invalid_payload(self, payload) -> None:
        """Test that malformed payloads raise ValueError."""
        with pytest.raises(ValueError):
            form_from_payload(payload)


class TestMemoRoutes:
    """End-to-end tests for memo routes."""

    async def test_create_and_get(self, base_url: str) -> None:
        """Test POST then GET of a memo."""
        async with aiohttp.ClientSession() as session:
            async with session.post(
                f"{base_url}/memos",
                json={
                    "title": "Grocery",
                    "content": "milk",
                    "category": "personal",
                    "tags": ["food"],
                },
            ) as resp:
                assert resp.status == 201
                created = await resp.json()

            async with session.get(f"{base_url}/memos/{created['id']}") as resp:
                assert resp.status == 200
                fetched = await resp.json()

        assert fetched == created
        assert fetched["tags"] == ["food"]
        assert fetched["category_label"] == "Personal"

    async def test_create_with_blank_title_returns_400(self, base_url: str) -> None:
        """Test validation failure on create."""
        async with aiohttp.ClientSession() as session:
            async with session.post(f"{base_url}/memos", json={"title": " "}) as resp:
                assert resp.status == 400
                data = await resp.json()

        assert "Title" in data["error"]

    @pytest.mark.parametrize(
        ("payload", "message"),
        [
            ({"title": "x", "category": ["a"]}, "Category"),
            ({"title": "x", "content": {"a": 1}}, "Content"),
            ({"title": "x", "tags": [1, 2]}, "Tags"),
        ],
    )
    async def test_create_with_mistyped_field_returns_400(
        self, base_url: str, payload: dict, message: str
    ) -> None:
        """Test that wrongly typed fields are rejected before reaching the store."""
        async with aiohttp.ClientSession() as session:
            async with session.post(f"{base_url}/memos", json=payload) as resp:
                assert resp.status == 400
                data = await resp.json()

            async with session.get(f"{base_url}/memos") as resp:
                assert await resp.json() == []

        assert message in data["error"]

    async def test_create_with_invalid_json_returns_400(self, base_url: str) -> None:
        """Test that a non-JSON body is rejected."""
        async with aiohttp.ClientSession() as session:
            async with session.post(
                f"{base_url}/memos",
                data="not json",
                headers={"Content-Type": "application/json"},
            ) as resp:
                assert resp.status == 400

    async def test_get_missing_returns_404(self, base_url: str) -> None:
        """Test that unknown ids return 404."""
        async with aiohttp.ClientSession() as session:
            async with session.get(f"{base_url}/memos/missing") as resp:
                assert resp.status == 404

    async def test_update(
        self, base_url: str, repository: SQLMemoRepository
    ) -> None:
        """Test PUT replaces memo fields."""
        created = await repository.create(form_from_payload({"title": "Old"}))

        async with aiohttp.ClientSession() as session:
            async with session.put(
                f"{base_url}/memos/{created.id}",
                json={"title": "New", "category": "idea", "tags": ["x"]},
            ) as resp:
                assert resp.status == 200
                data = await resp.json()

        assert data["id"] == created.id
        assert data["title"] == "New"
        assert data["category"] == "idea"
        assert data["tags"] == ["x"]

    async def test_update_missing_returns_404(self, base_url: str) -> None:
        """Test PUT on an unknown id."""
        async with aiohttp.ClientSession() as session:
            async with session.put(
                f"{base_url}/memos/missing", json={"title": "New"}
            ) as resp:
                assert resp.status == 404

    async def test_delete_is_idempotent(
        self, base_url: str, repository: SQLMemoRepository
    ) -> None:
        """Test DELETE returns 204 whether or not the memo exists."""
        created = await repository.create(form_from_payload({"title": "Bye"}))

        async with aiohttp.ClientSession() as session:
            async with session.delete(f"{base_url}/memos/{created.id}") as resp:
                assert resp.status == 204
            async with session.delete(f"{base_url}/memos/{created.id}") as resp:
                assert resp.status == 204

        assert await repository.get_by_id(created.id) is None

    async def test_list_search_and_category(
        self, base_url: str, repository: SQLMemoRepository
    ) -> None:
        """Test GET /memos with and without filters."""
        work = await repository.create(
            form_from_payload({"title": "Sprint plan", "category": "work"})
        )
        personal = await repository.create(
            form_from_payload({"title": "Groceries", "category": "personal"})
        )

        async with aiohttp.ClientSession() as session:
            async with session.get(f"{base_url}/memos") as resp:
                all_ids = {m["id"] for m in await resp.json()}
            async with session.get(
                f"{base_url}/memos", params={"category": "work"}
            ) as resp:
                work_ids = [m["id"] for m in await resp.json()]
            async with session.get(f"{base_url}/memos", params={"q": "GROC"}) as resp:
                search_ids = [m["id"] for m in await resp.json()]

        assert all_ids == {work.id, personal.id}
        assert work_ids == [work.id]
        assert search_ids == [personal.id]


class TestMemoRoutesStoreErrors:
    """Store failures map to HTTP errors."""

    @pytest.mark.parametrize(
        ("method", "path", "body"),
        [
            ("GET", "/memos", None),
            ("GET", "/memos?q=x", None),
            ("GET", "/memos?category=work", None),
            ("POST", "/memos", {"title": "T"}),
            ("GET", "/memos/m1", None),
            ("PUT", "/memos/m1", {"title": "T"}),
            ("DELETE", "/memos/m1", None),
        ],
    )
    async def test_store_error_returns_500(
        self,
        db_manager: DatabaseManager,
        failing_repository: AsyncMock,
        method: str,
        path: str,
        body,
    ) -> None:
        """Test that StoreError becomes a 500 response."""
        server = await start_server(db_manager, failing_repository)
        try:
            async with aiohttp.ClientSession() as session:
                async with session.request(
                    method, f"http://127.0.0.1:{server.port}{path}", json=body
                ) as resp:
                    assert resp.status == 500
                    data = await resp.json()
                    assert "error" in data
        finally:
            await server.stop()
