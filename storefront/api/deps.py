from fastapi import Cookie, Depends, Response
from typing import Optional
import uuid
from storefront.config import settings
from storefront.core.storage import KeyValueStorage, get_storage
from storefront.services.cart_store import CartStore, cart_stores
from storefront.services.checkout_service import CheckoutService, checkout_service
from storefront.services.product_service import ProductService, product_service


def get_cart_id(
    response: Response,
    cart_id: Optional[str] = Cookie(None, alias=settings.CART_COOKIE_NAME),
) -> str:
    """
    Visitor's cart id from the cart cookie.
    Issues a new id (and cookie) on the first visit.
    """
    if cart_id:
        return cart_id

    cart_id = uuid.uuid4().hex
    response.set_cookie(
        key=settings.CART_COOKIE_NAME,
        value=cart_id,
        max_age=settings.CART_COOKIE_MAX_AGE,
        httponly=True,
        samesite="lax",
    )
    return cart_id


def get_cart_store(cart_id: str = Depends(get_cart_id)) -> CartStore:
    return cart_stores.get(cart_id)


def get_kv_storage() -> KeyValueStorage:
    return get_storage()


def get_product_service() -> ProductService:
    return product_service


def get_checkout_service() -> CheckoutService:
    return checkout_service
