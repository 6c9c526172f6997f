"""Tests for the recipes HTTP surface."""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable
from unittest.mock import AsyncMock

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI

from recipebox.api.app import create_app
from recipebox.config import Settings
from recipebox.coordinator import CacheState, RecipeCoordinator
from recipebox.core.errors import StoreError
from recipebox.core.model import Recipe
from recipebox.persistence.repositories import RecipeRepository

API_KEY = "test-key"
AUTH = {"X-API-KEY": API_KEY}


@pytest.fixture
def app(coordinator: RecipeCoordinator) -> FastAPI:
    return create_app(Settings(api_key=API_KEY, enable_metrics=True), coordinator=coordinator)


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


class TestListRecipes:
    """GET /recipes"""

    @pytest.mark.asyncio
    async def test_empty_listing(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/recipes")
        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_listing_needs_no_key(
        self,
        client: httpx.AsyncClient,
        store: RecipeRepository,
        make_recipe: Callable[..., Recipe],
    ) -> None:
        recipe = make_recipe("Soup", tags=["Easy"])
        await store.insert_many([recipe])

        response = await client.get("/recipes")

        assert response.status_code == 200
        body = response.json()
        assert body[0]["id"] == recipe.id
        assert body[0]["tags"] == ["Easy"]
        assert "publishedAt" in body[0]

    @pytest.mark.asyncio
    async def test_listing_populates_cache(
        self, client: httpx.AsyncClient, coordinator: RecipeCoordinator
    ) -> None:
        await client.get("/recipes")
        assert await coordinator.cache_state() == CacheState.PRESENT

    @pytest.mark.asyncio
    async def test_cached_listing_is_byte_identical(
        self,
        client: httpx.AsyncClient,
        store: RecipeRepository,
        make_recipe: Callable[..., Recipe],
    ) -> None:
        await store.insert_many([make_recipe("Soup", tags=["Easy"]), make_recipe("Stew")])

        first = await client.get("/recipes")
        second = await client.get("/recipes")

        assert first.status_code == second.status_code == 200
        assert first.content == second.content

    @pytest.mark.asyncio
    async def test_store_failure_is_500(
        self, client: httpx.AsyncClient, store: RecipeRepository
    ) -> None:
        store.find = AsyncMock(side_effect=StoreError("connection refused"))

        response = await client.get("/recipes")

        assert response.status_code == 500
        assert response.json() == {
            "error": "Error while accessing the recipe store",
            "code": "StoreError",
        }


class TestAuthentication:
    """Everything except the plain listing needs X-API-KEY."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("method", "path"),
        [
            ("GET", "/recipes/search?tag=easy"),
            ("GET", "/recipes/abc"),
            ("POST", "/recipes"),
            ("PUT", "/recipes/abc"),
            ("DELETE", "/recipes/abc"),
        ],
    )
    async def test_missing_key_is_401(
        self, client: httpx.AsyncClient, method: str, path: str
    ) -> None:
        response = await client.request(method, path, json={"name": "Soup"})

        assert response.status_code == 401
        assert response.json() == {
            "error": "API key not provided or invalid",
            "code": "Unauthorized",
        }

    @pytest.mark.asyncio
    async def test_wrong_key_is_401(self, client: httpx.AsyncClient) -> None:
        response = await client.post(
            "/recipes", json={"name": "Soup"}, headers={"X-API-KEY": "nope"}
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_rejected_write_leaves_store_alone(
        self, client: httpx.AsyncClient, store: RecipeRepository
    ) -> None:
        await client.post("/recipes", json={"name": "Soup"})
        assert await store.count() == 0

    @pytest.mark.asyncio
    async def test_gate_open_without_configured_key(
        self, coordinator: RecipeCoordinator
    ) -> None:
        app = create_app(Settings(api_key=None), coordinator=coordinator)
        transport = httpx.ASGITransport(app=app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.post("/recipes", json={"name": "Soup"})

        assert response.status_code == 200


class TestCreateRecipe:
    """POST /recipes"""

    @pytest.mark.asyncio
    async def test_create(self, client: httpx.AsyncClient) -> None:
        response = await client.post(
            "/recipes",
            json={"name": "Soup", "tags": ["Easy"], "ingredients": ["water"]},
            headers=AUTH,
        )

        assert response.status_code == 200
        body = response.json()
        assert len(body["id"]) == 32
        assert body["publishedAt"]
        assert body["name"] == "Soup"
        assert body["instructions"] == []

    @pytest.mark.asyncio
    async def test_client_supplied_id_is_ignored(self, client: httpx.AsyncClient) -> None:
        response = await client.post(
            "/recipes", json={"id": "chosen", "name": "Soup"}, headers=AUTH
        )
        assert response.json()["id"] != "chosen"

    @pytest.mark.asyncio
    async def test_missing_name_is_400(self, client: httpx.AsyncClient) -> None:
        response = await client.post("/recipes", json={"tags": ["Easy"]}, headers=AUTH)

        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "BadRequest"
        assert "name" in body["error"]

    @pytest.mark.asyncio
    async def test_malformed_json_is_400(self, client: httpx.AsyncClient) -> None:
        response = await client.post(
            "/recipes",
            content=b"{not json",
            headers={**AUTH, "Content-Type": "application/json"},
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_wrong_field_type_is_400(self, client: httpx.AsyncClient) -> None:
        response = await client.post(
            "/recipes", json={"name": "Soup", "tags": "Easy"}, headers=AUTH
        )
        assert response.status_code == 400


class TestGetAndSearch:
    """GET /recipes/{id} and GET /recipes/search"""

    @pytest.mark.asyncio
    async def test_get_by_id(
        self,
        client: httpx.AsyncClient,
        store: RecipeRepository,
        make_recipe: Callable[..., Recipe],
    ) -> None:
        recipe = make_recipe("Soup")
        await store.insert_many([recipe])

        response = await client.get(f"/recipes/{recipe.id}", headers=AUTH)

        assert response.status_code == 200
        assert response.json()["name"] == "Soup"

    @pytest.mark.asyncio
    async def test_get_unknown_id_is_404(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/recipes/does-not-exist", headers=AUTH)

        assert response.status_code == 404
        assert response.json() == {
            "error": "Recipe with identifier 'does-not-exist' not found",
            "code": "NotFound",
        }

    @pytest.mark.asyncio
    async def test_search_ignores_case(
        self,
        client: httpx.AsyncClient,
        store: RecipeRepository,
        make_recipe: Callable[..., Recipe],
    ) -> None:
        vegan = make_recipe("Salad", tags=["Vegan"])
        await store.insert_many([vegan, make_recipe("Steak", tags=["Meat"])])

        for tag in ("vegan", "VEGAN", "Vegan"):
            response = await client.get("/recipes/search", params={"tag": tag}, headers=AUTH)
            assert response.status_code == 200
            assert [r["id"] for r in response.json()] == [vegan.id]

    @pytest.mark.asyncio
    async def test_search_without_match_is_empty(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/recipes/search", params={"tag": "none"}, headers=AUTH)
        assert response.status_code == 200
        assert response.json() == []


class TestUpdateAndDelete:
    """PUT and DELETE /recipes/{id}"""

    @pytest.mark.asyncio
    async def test_update_unknown_id_succeeds(self, client: httpx.AsyncClient) -> None:
        response = await client.put(
            "/recipes/does-not-exist", json={"name": "Ghost"}, headers=AUTH
        )
        assert response.status_code == 200
        assert response.json() == {"message": "Recipe has been updated"}

    @pytest.mark.asyncio
    async def test_update_with_invalid_body_is_400(self, client: httpx.AsyncClient) -> None:
        response = await client.put("/recipes/abc", json={"tags": []}, headers=AUTH)
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_delete_unknown_id_succeeds(self, client: httpx.AsyncClient) -> None:
        response = await client.delete("/recipes/does-not-exist", headers=AUTH)
        assert response.status_code == 200
        assert response.json() == {"message": "Recipe has been deleted"}


class TestSoupScenario:
    """Create, list, update, delete and delete again over HTTP."""

    @pytest.mark.asyncio
    async def test_lifecycle(self, client: httpx.AsyncClient) -> None:
        created = await client.post(
            "/recipes", json={"name": "Soup", "tags": ["Easy"]}, headers=AUTH
        )
        assert created.status_code == 200
        recipe = created.json()
        assert recipe["id"]
        assert recipe["publishedAt"]

        listing = (await client.get("/recipes")).json()
        assert [r["id"] for r in listing] == [recipe["id"]]

        updated = await client.put(
            f"/recipes/{recipe['id']}", json={"name": "Soup2"}, headers=AUTH
        )
        assert updated.status_code == 200
        assert [r["name"] for r in (await client.get("/recipes")).json()] == ["Soup2"]

        deleted = await client.delete(f"/recipes/{recipe['id']}", headers=AUTH)
        assert deleted.status_code == 200
        assert (await client.get("/recipes")).json() == []

        again = await client.delete(f"/recipes/{recipe['id']}", headers=AUTH)
        assert again.status_code == 200
        assert again.json() == {"message": "Recipe has been deleted"}


class TestCorrelationHeaders:
    """Responses echo request and correlation ids."""

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/recipes", headers={"x-request-id": "req-123"})

        assert response.headers["x-request-id"] == "req-123"
        assert response.headers["x-correlation-id"] == "req-123"

    @pytest.mark.asyncio
    async def test_request_id_is_generated(self, client: httpx.AsyncClient) -> None:
        response = await client.get("/recipes")
        assert response.headers["x-request-id"]
