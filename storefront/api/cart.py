"""Cart API endpoints"""
from fastapi import APIRouter, Depends, HTTPException
from starlette.concurrency import run_in_threadpool
import logging
from storefront.api.deps import get_cart_store, get_product_service
from storefront.core.exceptions import ApiError, ProductNotFoundError
from storefront.services.cart_store import CartStore
from storefront.services.product_service import (
    ProductService,
    available_stock,
    get_product_price,
    is_product_available,
)
from storefront.services.pricing import round_money
from storefront.schemas.cart import (
    CartDrawerResponse,
    CartItemCreate,
    CartItemResponse,
    CartItemUpdate,
    CartResponse,
    CartSummary,
)

router = APIRouter()
logger = logging.getLogger(__name__)


def build_cart_response(store: CartStore) -> CartResponse:
    items = []
    for item in store.items:
        unit_price = get_product_price(item.product)
        items.append(CartItemResponse(
            **item.model_dump(),
            unit_price=unit_price,
            subtotal=round_money(unit_price * item.quantity),
        ))
    return CartResponse(items=items, is_open=store.is_open, summary=store.get_summary())


@router.get("", response_model=CartResponse)
def get_cart(store: CartStore = Depends(get_cart_store)):
    """Get the visitor's cart with a fresh summary"""
    return build_cart_response(store)


@router.get("/summary", response_model=CartSummary)
def get_cart_summary(store: CartStore = Depends(get_cart_store)):
    return store.get_summary()


@router.post("/items", response_model=CartResponse)
async def add_to_cart(
    item_data: CartItemCreate,
    store: CartStore = Depends(get_cart_store),
    products: ProductService = Depends(get_product_service),
):
    """
    Add product to cart.
    If the product is already in the cart its quantity is increased;
    the requested total may not exceed the product's available stock.
    """
    try:
        product = await products.get_by_id(item_data.product_id)
    except ProductNotFoundError:
        raise HTTPException(status_code=404, detail="Product not found")
    except ApiError as e:
        logger.error(f"[CART] Catalog lookup failed for {item_data.product_id}: {e}")
        raise HTTPException(status_code=502, detail="Failed to load product")

    if not is_product_available(product):
        raise HTTPException(status_code=400, detail="Product is not available")

    limit = available_stock(product)
    existing = store.get_item(product.id)
    requested = item_data.quantity + (existing.quantity if existing else 0)
    if limit is not None and requested > limit:
        raise HTTPException(
            status_code=400,
            detail=f"Only {limit} units of this product are available"
        )

    await run_in_threadpool(store.add_item, product, item_data.quantity, item_data.selected_variant_id)
    return build_cart_response(store)


@router.patch("/items/{product_id}", response_model=CartResponse)
def update_cart_item(
    product_id: str,
    update: CartItemUpdate,
    store: CartStore = Depends(get_cart_store),
):
    """Set item quantity (0 or less removes the item)"""
    store.update_quantity(product_id, update.quantity)
    return build_cart_response(store)


@router.delete("/items/{product_id}", response_model=CartResponse)
def remove_cart_item(product_id: str, store: CartStore = Depends(get_cart_store)):
    store.remove_item(product_id)
    return build_cart_response(store)


@router.delete("", response_model=CartResponse)
def clear_cart(store: CartStore = Depends(get_cart_store)):
    store.clear_cart()
    return build_cart_response(store)


@router.post("/toggle", response_model=CartDrawerResponse)
def toggle_cart(store: CartStore = Depends(get_cart_store)):
    return CartDrawerResponse(is_open=store.toggle_cart())


@router.post("/open", response_model=CartDrawerResponse)
def open_cart(store: CartStore = Depends(get_cart_store)):
    store.open_cart()
    return CartDrawerResponse(is_open=store.is_open)


@router.post("/close", response_model=CartDrawerResponse)
def close_cart(store: CartStore = Depends(get_cart_store)):
    store.close_cart()
    return CartDrawerResponse(is_open=store.is_open)
