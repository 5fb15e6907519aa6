"""HTTP tests for the /products endpoints.

These tests run the FastAPI app against a temporary SQLite product store and verify:
- POST /products returns 201 with a generated id, 400 without a name
- GET /products lists all products sorted by name, filtered by ?search=
- GET/PUT/DELETE /products/{id} return 404 for ids that do not exist
- DELETE followed by GET returns 404
"""

import os
import tempfile

import pytest
from fastapi.testclient import TestClient

from src.api import create_app
from src.services import ProductService, SqliteProductRepository


VALID_PRODUCT = {
    "name": "iPhone",
    "description": "Good phone",
    "price": 10000,
}

NOT_VALID_PRODUCT = {
    "description": "Good phone",
    "price": 10000,
}

NON_EXISTING_ID = "123456123456123456123456"


@pytest.fixture
def temp_db_path():
    """Create a temporary database file for testing."""
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    yield path
    # Cleanup
    if os.path.exists(path):
        os.remove(path)


@pytest.fixture
def client(temp_db_path):
    """TestClient running the app with a SQLite-backed product service."""
    service = ProductService(SqliteProductRepository(temp_db_path))
    with TestClient(create_app(service)) as test_client:
        yield test_client


class TestCreateProduct:
    """Test POST /products."""

    def test_valid_product_returns_201_and_id(self, client):
        response = client.post("/products", json=VALID_PRODUCT)

        assert response.status_code == 201
        body = response.json()
        assert body["id"]
        assert body["name"] == "iPhone"
        assert body["description"] == "Good phone"
        assert body["price"] == 10000

    def test_missing_name_returns_400(self, client):
        response = client.post("/products", json=NOT_VALID_PRODUCT)

        assert response.status_code == 400
        assert client.get("/products").json() == []

    def test_empty_name_returns_400(self, client):
        response = client.post("/products", json={"name": "", "price": 1})

        assert response.status_code == 400

    @pytest.mark.parametrize("price", [True, "10000", {"amount": 10000}])
    def test_non_numeric_price_returns_400(self, client, price):
        response = client.post("/products", json={"name": "iPhone", "price": price})

        assert response.status_code == 400
        assert client.get("/products").json() == []

    def test_fractional_price_is_kept(self, client):
        response = client.post("/products", json={"name": "Cable", "price": 9.99})

        assert response.status_code == 201
        assert response.json()["price"] == 9.99

    def test_non_object_body_returns_400(self, client):
        response = client.post("/products", json=["iPhone"])

        assert response.status_code == 400

    def test_client_supplied_id_is_ignored(self, client):
        response = client.post("/products", json={**VALID_PRODUCT, "id": NON_EXISTING_ID})

        assert response.status_code == 201
        assert response.json()["id"] != NON_EXISTING_ID

    def test_created_product_can_be_fetched(self, client):
        created = client.post("/products", json=VALID_PRODUCT).json()

        response = client.get(f"/products/{created['id']}")

        assert response.status_code == 200
        assert response.json() == {"id": created["id"], **VALID_PRODUCT}


class TestListProducts:
    """Test GET /products with and without ?search=."""

    @pytest.fixture
    def seeded_client(self, client):
        products = [
            VALID_PRODUCT,
            {"name": "iPhone", "description": "A good phone", "price": 10000},
            {"name": "Samsung Galaxy S21", "description": "A great phone", "price": 15000},
            {"name": "OnePlus 9 Pro", "description": "A powerful phone", "price": 12000},
        ]
        for product in products:
            assert client.post("/products", json=product).status_code == 201
        return client

    def test_empty_store_returns_empty_list(self, client):
        response = client.get("/products")

        assert response.status_code == 200
        assert response.json() == []

    def test_returns_all_products(self, seeded_client):
        response = seeded_client.get("/products")

        assert response.status_code == 200
        assert len(response.json()) == 4

    def test_products_sorted_alphabetically(self, seeded_client):
        names = [p["name"] for p in seeded_client.get("/products").json()]

        assert names == ["iPhone", "iPhone", "OnePlus 9 Pro", "Samsung Galaxy S21"]

    def test_search_filters_by_name(self, seeded_client):
        response = seeded_client.get("/products", params={"search": "Samsung"})

        assert response.status_code == 200
        body = response.json()
        assert len(body) == 1
        assert body[0]["name"] == "Samsung Galaxy S21"

    def test_search_is_case_insensitive(self, seeded_client):
        response = seeded_client.get("/products", params={"search": "IPHONE"})

        assert [p["name"] for p in response.json()] == ["iPhone", "iPhone"]

    def test_search_is_case_insensitive_for_accented_names(self, client):
        for name in ["Éclair Phone", "ÜBER tablet", "Eclair Lite"]:
            assert client.post("/products", json={"name": name}).status_code == 201

        eclair = client.get("/products", params={"search": "éclair"})
        uber = client.get("/products", params={"search": "über"})

        assert [p["name"] for p in eclair.json()] == ["Éclair Phone"]
        assert [p["name"] for p in uber.json()] == ["ÜBER tablet"]

    def test_search_without_matches_returns_empty_list(self, seeded_client):
        response = seeded_client.get("/products", params={"search": "Nokia"})

        assert response.status_code == 200
        assert response.json() == []

    def test_empty_search_returns_all_products(self, seeded_client):
        response = seeded_client.get("/products", params={"search": ""})

        assert len(response.json()) == 4


class TestGetProduct:
    """Test GET /products/{id}."""

    def test_non_existing_id_returns_404(self, client):
        response = client.get(f"/products/{NON_EXISTING_ID}")

        assert response.status_code == 404
        assert NON_EXISTING_ID in response.json()["detail"]

    def test_malformed_id_returns_400(self, client):
        response = client.get("/products/not-an-id")

        assert response.status_code == 400


class TestUpdateProduct:
    """Test PUT /products/{id}."""

    def test_update_existing_product(self, client):
        created = client.post("/products", json=VALID_PRODUCT).json()
        new_data = {
            "name": "iPhone",
            "description": "A great updated phone",
            "price": 15000,
        }

        response = client.put(f"/products/{created['id']}", json=new_data)

        assert response.status_code == 200
        body = response.json()
        assert body["id"] == created["id"]
        assert body["name"] == new_data["name"]
        assert isinstance(body["name"], str)
        assert body["description"] == "A great updated phone"
        assert body["price"] == 15000

    def test_partial_update_keeps_other_fields(self, client):
        created = client.post("/products", json=VALID_PRODUCT).json()

        response = client.put(f"/products/{created['id']}", json={"price": 9000})

        assert response.status_code == 200
        assert response.json() == {
            "id": created["id"],
            "name": "iPhone",
            "description": "Good phone",
            "price": 9000,
        }
        assert client.get(f"/products/{created['id']}").json()["price"] == 9000

    def test_update_non_existing_id_returns_404(self, client):
        response = client.put(f"/products/{NON_EXISTING_ID}", json={"name": "iPhone"})

        assert response.status_code == 404

    def test_update_with_empty_name_returns_400(self, client):
        created = client.post("/products", json=VALID_PRODUCT).json()

        response = client.put(f"/products/{created['id']}", json={"name": ""})

        assert response.status_code == 400
        assert client.get(f"/products/{created['id']}").json()["name"] == "iPhone"

    def test_update_with_null_name_returns_400(self, client):
        created = client.post("/products", json=VALID_PRODUCT).json()

        response = client.put(f"/products/{created['id']}", json={"name": None})

        assert response.status_code == 400


    def test_update_with_boolean_price_returns_400(self, client):
        created = client.post("/products", json=VALID_PRODUCT).json()

        response = client.put(f"/products/{created['id']}", json={"price": False})

        assert response.status_code == 400
        assert client.get(f"/products/{created['id']}").json()["price"] == 10000


class TestDeleteProduct:
    """Test DELETE /products/{id}."""

    def test_delete_returns_204_then_404(self, client):
        created = client.post("/products", json=VALID_PRODUCT).json()

        response = client.delete(f"/products/{created['id']}")

        assert response.status_code == 204
        assert response.content == b""
        assert client.get(f"/products/{created['id']}").status_code == 404

    def test_delete_non_existing_id_returns_404(self, client):
        response = client.delete(f"/products/{NON_EXISTING_ID}")

        assert response.status_code == 404

    def test_delete_twice_returns_404(self, client):
        created = client.post("/products", json=VALID_PRODUCT).json()

        assert client.delete(f"/products/{created['id']}").status_code == 204
        assert client.delete(f"/products/{created['id']}").status_code == 404


def test_health_check(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}
