"""
Pytest configuration and fixtures
"""
import pytest
import httpx
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional, Tuple
from fastapi.testclient import TestClient

from storefront.api.deps import get_checkout_service, get_product_service
from storefront.core.api_client import BackendClient
from storefront.core.rate_limit import limiter
from storefront.core.storage import MemoryStorage, set_storage
from storefront.schemas.product import Product
from storefront.services.cart_store import cart_stores
from storefront.services.checkout_service import CheckoutService, reset_checkout_flows
from storefront.services.product_service import ProductService

BACKEND_URL = "http://backend.test"
CHECKOUT_URL = "https://checkout.stripe.com/c/pay/cs_test_123"


def product_payload(
    product_id: str = "prod-1",
    base_price: float = 100.0,
    sale_price: Optional[float] = None,
    stock: int = 10,
    track_inventory: bool = True,
    allow_backorder: bool = False,
    is_active: bool = True,
    status: str = "published",
    name: Optional[str] = None,
) -> Dict[str, Any]:
    """Product as the storefront backend serializes it"""
    pricing = {"basePrice": base_price, "currency": "MXN"}
    if sale_price is not None:
        pricing["salePrice"] = sale_price
    return {
        "_id": product_id,
        "name": name or f"Product {product_id}",
        "slug": product_id,
        "description": "Test product",
        "category": "apparel",
        "variants": [
            {
                "sku": f"{product_id}-default",
                "name": "Default",
                "attributes": {"size": "M"},
                "pricing": pricing,
                "inventory": {
                    "stock": stock,
                    "lowStockThreshold": 2,
                    "trackInventory": track_inventory,
                    "allowBackorder": allow_backorder,
                },
                "isActive": is_active,
            }
        ],
        "images": [{"url": "https://cdn.test/p.jpg", "publicId": "p", "isPrimary": True, "order": 0}],
        "status": status,
        "isFeatured": False,
        "isNewArrival": False,
    }


@pytest.fixture
def make_product():
    """Build a Product snapshot"""
    def _make(product_id: str = "prod-1", base_price: float = 100.0, **kwargs) -> Product:
        return Product.model_validate(product_payload(product_id, base_price, **kwargs))
    return _make


class FakeBackend:
    """Canned storefront backend responses served through httpx.MockTransport"""

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Dict[str, Any]] = {}
        self.requests: List[httpx.Request] = []

    def add(self, method: str, path: str, status: int = 200, json: Any = None, exc: Exception = None):
        self.routes[(method, path)] = {"status": status, "json": json, "exc": exc}

    def add_product(self, product_id: str = "prod-1", base_price: float = 100.0, **kwargs):
        payload = product_payload(product_id, base_price, **kwargs)
        self.add("GET", f"/api/products/{payload['_id']}", json={"success": True, "data": payload})

    def add_checkout_session(self, url: Optional[str] = CHECKOUT_URL, session_id: str = "cs_test_123"):
        data = {"sessionId": session_id}
        if url is not None:
            data["url"] = url
        self.add("POST", "/api/stripe/create-checkout-session", json={"success": True, "data": data})

    def add_session_details(self, session_id: str = "cs_test_123", payment_status: str = "paid"):
        self.add(
            "GET",
            f"/api/stripe/checkout-session/{session_id}",
            json={
                "success": True,
                "data": {
                    "id": session_id,
                    "paymentStatus": payment_status,
                    "customerEmail": "fan@example.com",
                    "amountTotal": 440.0,
                    "currency": "mxn",
                },
            },
        )

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"success": False, "error": "Not found"})
        if route["exc"] is not None:
            raise route["exc"]
        return httpx.Response(route["status"], json=route["json"])


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def backend_client(backend):
    return BackendClient(base_url=BACKEND_URL, transport=httpx.MockTransport(backend.handler))


@pytest.fixture
def product_service(backend_client):
    return ProductService(backend_client)


@pytest.fixture
def checkout_service(backend_client):
    return CheckoutService(backend_client)


@pytest.fixture(autouse=True)
def storage():
    """Fresh in-memory cart storage and empty in-process cart registry per test"""
    memory = MemoryStorage()
    set_storage(memory)
    cart_stores.reset()
    reset_checkout_flows()
    yield memory
    cart_stores.reset()
    reset_checkout_flows()
    set_storage(None)


@pytest.fixture(scope="function")
def client(product_service, checkout_service):
    """Create test client wired to the fake backend"""
    from storefront.main import app

    @asynccontextmanager
    async def mock_lifespan(app):
        yield {}

    app.router.lifespan_context = mock_lifespan
    app.dependency_overrides[get_product_service] = lambda: product_service
    app.dependency_overrides[get_checkout_service] = lambda: checkout_service
    limiter.enabled = False

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    limiter.enabled = True
