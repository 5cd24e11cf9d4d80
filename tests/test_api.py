"""Tests for the mini-app REST API."""

import asyncio

import pytest
from fastapi.testclient import TestClient

from app.api import create_app
from app.errors import PersistenceError
from app.models import Category, ProductFields
from infrastructure.storage.json_storage import JsonFileStorage


def make_fields(name, price, category, description=""):
    return ProductFields(
        name=name,
        price=price,
        description=description,
        category=category,
        photos=[f"https://cdn.test/{name}.jpg"],
    )


@pytest.fixture
def storage(tmp_path):
    storage = JsonFileStorage(tmp_path / "data")
    asyncio.run(storage.init())
    return storage


@pytest.fixture
def products(storage):
    async def seed():
        hoodie = await storage.create_product(make_fields("Hoodie", 3000, Category.HOODIES, "Warm"))
        boots = await storage.create_product(make_fields("Boots", 9000, Category.FOOTWEAR))
        return hoodie, boots

    return asyncio.run(seed())


@pytest.fixture
def client(storage):
    return TestClient(create_app(storage))


class TestHealth:

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["storage"] == "json"

    def test_config(self, client):
        body = client.get("/api/config").json()
        assert body["success"] is True
        assert "managerUsername" in body["data"]


class TestProducts:

    def test_list_with_count(self, client, products):
        body = client.get("/api/products").json()
        assert body["success"] is True
        assert body["count"] == 2
        assert {"id", "name", "price", "photos", "views", "createdAt"} <= set(body["data"][0])

    def test_filter_and_sort(self, client, products):
        body = client.get("/api/products", params={"sort": "price_desc"}).json()
        assert [p["name"] for p in body["data"]] == ["Boots", "Hoodie"]

        body = client.get("/api/products", params={"category": "Hoodies"}).json()
        assert [p["name"] for p in body["data"]] == ["Hoodie"]

        body = client.get("/api/products", params={"search": "warm"}).json()
        assert body["count"] == 1

    def test_get_one(self, client, products):
        hoodie, _ = products
        body = client.get(f"/api/products/{hoodie.id}").json()
        assert body["data"]["name"] == "Hoodie"

    def test_get_missing(self, client):
        response = client.get("/api/products/missing")
        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Товар не найден"}

    def test_register_view(self, client, products):
        hoodie, _ = products
        assert client.post(f"/api/products/{hoodie.id}/view").json()["success"] is True
        assert client.get(f"/api/products/{hoodie.id}").json()["data"]["views"] == 1

    def test_register_view_missing(self, client):
        assert client.post("/api/products/missing/view").status_code == 404

    def test_categories_only_non_empty(self, client, products):
        body = client.get("/api/categories").json()
        assert sorted(body["data"]) == ["Footwear", "Hoodies"]


class TestUsers:

    def test_unknown_user(self, client):
        assert client.get("/api/users/42").status_code == 404

    def test_upsert_accepts_camel_case(self, client):
        body = client.post("/api/users/42", json={"username": "anna", "firstName": "Anna"}).json()
        assert body["data"]["firstName"] == "Anna"

        body = client.get("/api/users/42").json()
        assert body["data"]["username"] == "anna"

    def test_upsert_without_body(self, client):
        assert client.post("/api/users/43").json()["data"]["id"] == "43"

    def test_favorites_flow(self, client, products):
        hoodie, _ = products

        body = client.post(f"/api/users/42/favorites/{hoodie.id}").json()
        assert body["data"] == [hoodie.id]

        body = client.get("/api/users/42/favorites").json()
        assert [p["id"] for p in body["data"]] == [hoodie.id]

        body = client.delete(f"/api/users/42/favorites/{hoodie.id}").json()
        assert body["data"] == []

    def test_history_flow(self, client, products):
        hoodie, boots = products
        client.post(f"/api/users/42/history/{hoodie.id}")
        client.post(f"/api/users/42/history/{boots.id}")

        body = client.get("/api/users/42/history").json()
        assert [p["name"] for p in body["data"]] == ["Boots", "Hoodie"]


class TestAdminStats:

    def test_stats(self, client, products):
        hoodie, _ = products
        client.post(f"/api/products/{hoodie.id}/view")
        client.post("/api/users/42", json={})

        data = client.get("/api/admin/stats").json()["data"]
        assert data["totalProducts"] == 2
        assert data["totalUsers"] == 1
        assert data["totalViews"] == 1
        assert len(data["last7Days"]) == 7
        assert data["last7Days"][-1]["users"] == 1


class TestErrors:

    def test_storage_failure_is_500(self, client, storage, monkeypatch):
        async def broken(*args, **kwargs):
            raise PersistenceError("disk gone")

        monkeypatch.setattr(storage, "filter_products", broken)

        response = client.get("/api/products")
        assert response.status_code == 500
        assert response.json()["success"] is False
