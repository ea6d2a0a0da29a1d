"""
Tests for the product catalog: price/stock helpers, service and endpoints
"""
import pytest
from fastapi import status
from conftest import product_payload
from storefront.core.exceptions import ApiError, ProductNotFoundError
from storefront.schemas.product import Product, ProductsQueryParams
from storefront.services.product_service import (
    PLACEHOLDER_IMAGE,
    available_stock,
    format_price,
    get_product_image_url,
    get_total_stock,
    has_stock,
    is_product_available,
)

PRODUCTS = "/api/v1/products"


def paginated(*payloads, page=1, limit=12):
    return {
        "success": True,
        "data": list(payloads),
        "pagination": {
            "page": page,
            "limit": limit,
            "total": len(payloads),
            "totalPages": 1,
            "hasNext": False,
            "hasPrev": False,
        },
    }


def with_variants(make_product, *variants):
    """Product whose variants are replaced by (stock, track_inventory, allow_backorder, is_active) tuples"""
    base = make_product("multi")
    template = base.variants[0]
    return base.model_copy(update={
        "variants": [
            template.model_copy(update={
                "inventory": template.inventory.model_copy(update={
                    "stock": stock,
                    "track_inventory": tracked,
                    "allow_backorder": backorder,
                }),
                "is_active": active,
            })
            for stock, tracked, backorder, active in variants
        ]
    })


class TestStockHelpers:

    def test_in_stock(self, make_product):
        assert has_stock(make_product(stock=1))

    def test_out_of_stock(self, make_product):
        product = make_product(stock=0)

        assert not has_stock(product)
        assert not is_product_available(product)

    def test_backorder_counts_as_stock(self, make_product):
        assert has_stock(make_product(stock=0, allow_backorder=True))

    def test_untracked_counts_as_stock(self, make_product):
        assert has_stock(make_product(stock=0, track_inventory=False))

    def test_inactive_variant_has_no_stock(self, make_product):
        assert not has_stock(make_product(stock=5, is_active=False))

    def test_unpublished_not_available(self, make_product):
        assert not is_product_available(make_product(status="archived"))

    def test_total_stock_sums_variants(self, make_product):
        product = with_variants(make_product, (3, True, False, True), (4, True, False, False))

        assert get_total_stock(product) == 7

    def test_untracked_variant_counts_as_999(self, make_product):
        product = with_variants(make_product, (3, True, False, True), (0, False, False, True))

        assert get_total_stock(product) == 1002

    @pytest.mark.parametrize(
        "stock,tracked,backorder,expected",
        [
            (5, True, False, 5),
            (0, True, False, 0),
            (0, True, True, None),
            (0, False, False, None),
        ],
    )
    def test_available_stock(self, make_product, stock, tracked, backorder, expected):
        product = make_product(stock=stock, track_inventory=tracked, allow_backorder=backorder)

        assert available_stock(product) == expected


class TestDisplayHelpers:

    def test_format_price(self):
        assert format_price(1234.5) == "$1234.50 MXN"
        assert format_price(0) == "$0.00 MXN"

    def test_image_url(self, make_product):
        product = make_product()

        assert get_product_image_url(product) == "https://cdn.test/p.jpg"
        assert get_product_image_url(product, 3) == PLACEHOLDER_IMAGE

    def test_image_placeholder_without_images(self, make_product):
        product = make_product().model_copy(update={"images": []})

        assert get_product_image_url(product) == PLACEHOLDER_IMAGE


class TestProductService:
    """Catalog reads against the fake backend"""

    @pytest.mark.asyncio
    async def test_get_by_id(self, product_service, backend):
        backend.add_product("a", 100)

        product = await product_service.get_by_id("a")

        assert isinstance(product, Product)
        assert product.id == "a"
        assert product.variants[0].pricing.base_price == 100

    @pytest.mark.asyncio
    async def test_get_by_id_not_found(self, product_service):
        with pytest.raises(ProductNotFoundError):
            await product_service.get_by_id("missing")

    @pytest.mark.asyncio
    async def test_get_by_id_backend_error(self, product_service, backend):
        backend.add("GET", "/api/products/a", status=500, json={"success": False})

        with pytest.raises(ApiError) as exc_info:
            await product_service.get_by_id("a")

        assert not isinstance(exc_info.value, ProductNotFoundError)
        assert exc_info.value.status_code == 500

    @pytest.mark.asyncio
    async def test_get_all_query_params(self, product_service, backend):
        backend.add("GET", "/api/products", json=paginated(product_payload("a")))

        result = await product_service.get_all(
            ProductsQueryParams(page=2, min_price=100, featured=True, sort_by="price")
        )

        assert [p.id for p in result.data] == ["a"]
        [request] = backend.calls("GET", "/api/products")
        assert dict(request.url.params) == {
            "page": "2",
            "minPrice": "100.0",
            "featured": "true",
            "sortBy": "price",
        }

    @pytest.mark.asyncio
    async def test_search_overrides_filter(self, product_service, backend):
        backend.add("GET", "/api/products", json=paginated())

        await product_service.search("guitarra", ProductsQueryParams(search="old", limit=5))

        params = backend.calls("GET", "/api/products")[0].url.params
        assert params["search"] == "guitarra"
        assert params["limit"] == "5"

    @pytest.mark.asyncio
    async def test_get_by_category(self, product_service, backend):
        backend.add("GET", "/api/products", json=paginated(product_payload("a")))

        result = await product_service.get_by_category("music")

        assert result.pagination.total == 1
        assert backend.calls("GET", "/api/products")[0].url.params["category"] == "music"

    @pytest.mark.asyncio
    async def test_featured(self, product_service, backend):
        backend.add(
            "GET",
            "/api/products/featured",
            json={"success": True, "data": [product_payload("a"), product_payload("b")]},
        )

        products = await product_service.get_featured()

        assert [p.id for p in products] == ["a", "b"]

    @pytest.mark.asyncio
    async def test_by_slug_not_found(self, product_service):
        with pytest.raises(ProductNotFoundError):
            await product_service.get_by_slug("nope")


class TestProductEndpoints:
    """Test product API endpoints"""

    def test_list_products(self, client, backend):
        backend.add("GET", "/api/products", json=paginated(product_payload("a"), product_payload("b")))

        response = client.get(PRODUCTS, params={"category": "apparel", "sort_order": "asc"})

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert [p["_id"] for p in data["data"]] == ["a", "b"]
        assert data["pagination"]["totalPages"] == 1
        params = backend.calls("GET", "/api/products")[0].url.params
        assert params["category"] == "apparel"
        assert params["sortOrder"] == "asc"

    def test_list_rejects_bad_sort(self, client):
        response = client.get(PRODUCTS, params={"sort_by": "stock"})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_get_product(self, client, backend):
        backend.add_product("a", 100, sale_price=80)

        response = client.get(f"{PRODUCTS}/a")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["variants"][0]["pricing"]["salePrice"] == 80

    def test_get_product_not_found(self, client):
        response = client.get(f"{PRODUCTS}/missing")

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_get_by_slug(self, client, backend):
        backend.add("GET", "/api/products/slug/sombrero", json={"success": True, "data": product_payload("a")})

        response = client.get(f"{PRODUCTS}/slug/sombrero")

        assert response.json()["_id"] == "a"

    def test_bestsellers(self, client, backend):
        backend.add("GET", "/api/products/bestsellers", json={"success": True, "data": [product_payload("a")]})

        response = client.get(f"{PRODUCTS}/bestsellers")

        assert len(response.json()) == 1

    def test_catalog_unavailable(self, client, backend):
        backend.add("GET", "/api/products/featured", status=503, json=None)

        response = client.get(f"{PRODUCTS}/featured")

        assert response.status_code == status.HTTP_502_BAD_GATEWAY
