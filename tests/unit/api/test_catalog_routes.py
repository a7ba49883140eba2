"""Tests for the public storefront endpoints."""

import pytest

from src.luxgold.entities.catalog.category import CategoryCreate, CategoryRepository
from src.luxgold.entities.catalog.product import ProductCreate, ProductRepository


@pytest.fixture
def catalog(db_service):
    """Two categories and a mix of listed and unlisted products."""
    with db_service.session_scope() as session:
        CategoryRepository(session).create(CategoryCreate(name="Rings", slug="rings"))
        CategoryRepository(session).create(CategoryCreate(name="Necklaces", slug="necklaces"))
        products = ProductRepository(session)
        for i in range(3):
            products.create(
                ProductCreate(
                    name=f"Gold ring {i}",
                    slug=f"ring-{i}",
                    status="PUBLISHED",
                    category_slugs=["rings"],
                )
            )
        products.create(
            ProductCreate(
                name="Pearl necklace",
                slug="pearl",
                status="PUBLISHED",
                category_slugs=["necklaces"],
            )
        )
        products.create(ProductCreate(name="Draft ring", slug="draft-ring", category_slugs=["rings"]))
        products.create(
            ProductCreate(name="Private ring", slug="private-ring", status="PUBLISHED", visibility="PRIVATE")
        )


class TestProductListing:
    """Test GET /api/catalog/products."""

    def test_lists_only_published_public(self, client, catalog):
        body = client.get("/api/catalog/products").json()
        assert body["total"] == 4
        assert body["page"] == 1
        assert {item["slug"] for item in body["items"]} == {"ring-0", "ring-1", "ring-2", "pearl"}

    def test_category_filter(self, client, catalog):
        body = client.get("/api/catalog/products", params={"category": "necklaces"}).json()
        assert body["total"] == 1
        assert body["items"][0]["slug"] == "pearl"
        assert body["items"][0]["categories"][0]["slug"] == "necklaces"

    def test_pagination(self, client, catalog):
        body = client.get("/api/catalog/products", params={"page": 2, "per_page": 3}).json()
        assert body["per_page"] == 3
        assert body["total"] == 4
        assert len(body["items"]) == 1

    def test_per_page_is_capped(self, client, catalog):
        body = client.get("/api/catalog/products", params={"per_page": 500}).json()
        assert body["per_page"] == 100

    def test_invalid_page(self, client):
        assert client.get("/api/catalog/products", params={"page": 0}).status_code == 422


class TestProductDetail:
    """Test GET /api/catalog/products/{slug}."""

    def test_listed_product(self, client, catalog):
        response = client.get("/api/catalog/products/pearl")
        assert response.status_code == 200
        assert response.json()["name"] == "Pearl necklace"

    def test_unlisted_product_is_not_found(self, client, catalog):
        response = client.get("/api/catalog/products/draft-ring")
        assert response.status_code == 404
        body = response.json()
        assert body["code"] == "not_found"
        assert "request_id" in body


class TestCategories:
    """Test GET /api/catalog/categories."""

    def test_counts(self, client, catalog):
        items = client.get("/api/catalog/categories").json()["items"]
        counts = {item["slug"]: item["product_count"] for item in items}
        assert counts == {"necklaces": 1, "rings": 4}


class TestSearch:
    """Test GET /api/search."""

    def test_empty_query(self, client, catalog):
        assert client.get("/api/search", params={"q": "   "}).json() == {"items": []}

    def test_matches_name(self, client, catalog):
        items = client.get("/api/search", params={"q": "pearl"}).json()["items"]
        assert items == [{"slug": "pearl", "name": "Pearl necklace"}]

    def test_matches_category_and_hides_unlisted(self, client, catalog):
        items = client.get("/api/search", params={"q": "Rings"}).json()["items"]
        assert {item["slug"] for item in items} == {"ring-0", "ring-1", "ring-2"}
