"""Product catalog service and price/stock resolution"""
from typing import Optional, List, Dict, Any
import logging
from storefront.core.api_client import BackendClient, backend_client
from storefront.core.exceptions import ApiError, ProductNotFoundError
from storefront.schemas.product import (
    Product,
    ProductVariant,
    ProductList,
    ProductStatus,
    ProductsQueryParams,
)

logger = logging.getLogger(__name__)

PLACEHOLDER_IMAGE = "/placeholder.svg"
UNTRACKED_STOCK = 999  # untracked variants count as this many units


def get_active_variant(product: Product) -> Optional[ProductVariant]:
    return next((variant for variant in product.variants if variant.is_active), None)


def get_product_price(product: Product) -> float:
    """
    Current unit price of a product.

    Uses the first active variant: its sale price when set and lower than the
    base price, otherwise the base price. No active variant prices at 0.
    Every price shown or summed anywhere must come from here.
    """
    variant = get_active_variant(product)
    if variant is None:
        return 0.0
    pricing = variant.pricing
    if pricing.sale_price and pricing.sale_price < pricing.base_price:
        return float(pricing.sale_price)
    return float(pricing.base_price)


def is_product_published(product: Product) -> bool:
    return product.status == ProductStatus.PUBLISHED


def has_stock(product: Product) -> bool:
    return any(
        variant.is_active and (
            not variant.inventory.track_inventory
            or variant.inventory.stock > 0
            or variant.inventory.allow_backorder
        )
        for variant in product.variants
    )


def is_product_available(product: Product) -> bool:
    return is_product_published(product) and has_stock(product)


def get_total_stock(product: Product) -> int:
    total = 0
    for variant in product.variants:
        if not variant.inventory.track_inventory:
            total += UNTRACKED_STOCK
        else:
            total += variant.inventory.stock
    return total


def available_stock(product: Product) -> Optional[int]:
    """Units that may be put in a cart, or None when there is no limit"""
    variant = get_active_variant(product)
    if variant is None:
        return 0
    if not variant.inventory.track_inventory or variant.inventory.allow_backorder:
        return None
    return max(variant.inventory.stock, 0)


def get_product_image_url(product: Product, index: int = 0) -> str:
    if 0 <= index < len(product.images) and product.images[index].url:
        return product.images[index].url
    return PLACEHOLDER_IMAGE


def format_price(price: float) -> str:
    return f"${price:.2f} MXN"


class ProductService:
    """Read-only access to the backend product catalog"""

    def __init__(self, client: Optional[BackendClient] = None):
        self.client = client or backend_client

    @staticmethod
    def _query(params: Optional[ProductsQueryParams], **extra) -> Dict[str, Any]:
        query: Dict[str, Any] = {}
        if params is not None:
            query.update(params.model_dump(by_alias=True, exclude_none=True))
        query.update({key: value for key, value in extra.items() if value is not None})
        # backend expects lowercase booleans in the query string
        return {key: str(value).lower() if isinstance(value, bool) else value for key, value in query.items()}

    async def get_all(self, params: Optional[ProductsQueryParams] = None) -> ProductList:
        body = await self.client.get_paginated("/api/products", params=self._query(params))
        return ProductList.model_validate(body)

    async def get_by_id(self, product_id: str) -> Product:
        try:
            data = await self.client.get(f"/api/products/{product_id}")
        except ApiError as e:
            if e.status_code == 404:
                raise ProductNotFoundError(product_id) from e
            raise
        if not data:
            raise ProductNotFoundError(product_id)
        return Product.model_validate(data)

    async def get_by_slug(self, slug: str) -> Product:
        try:
            data = await self.client.get(f"/api/products/slug/{slug}")
        except ApiError as e:
            if e.status_code == 404:
                raise ProductNotFoundError(slug) from e
            raise
        if not data:
            raise ProductNotFoundError(slug)
        return Product.model_validate(data)

    async def get_featured(self) -> List[Product]:
        data = await self.client.get("/api/products/featured")
        return [Product.model_validate(item) for item in data or []]

    async def get_bestsellers(self) -> List[Product]:
        data = await self.client.get("/api/products/bestsellers")
        return [Product.model_validate(item) for item in data or []]

    async def search(self, keyword: str, params: Optional[ProductsQueryParams] = None) -> ProductList:
        if params is not None:
            params = params.model_copy(update={"search": None})
        body = await self.client.get_paginated("/api/products", params=self._query(params, search=keyword))
        logger.info(f"[CATALOG] Search '{keyword}' returned {len(body.get('data') or [])} products")
        return ProductList.model_validate(body)

    async def get_by_category(self, category: str, params: Optional[ProductsQueryParams] = None) -> ProductList:
        if params is not None:
            params = params.model_copy(update={"category": None})
        body = await self.client.get_paginated("/api/products", params=self._query(params, category=category))
        return ProductList.model_validate(body)


product_service = ProductService()
