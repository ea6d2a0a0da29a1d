from storefront.schemas.product import (
    Product,
    ProductVariant,
    ProductImage,
    ProductList,
    ProductsQueryParams,
)
from storefront.schemas.cart import (
    CartItem,
    CartSummary,
    CartItemCreate,
    CartItemUpdate,
    CartResponse,
    PersistedCart,
)
from storefront.schemas.checkout import (
    CheckoutSessionRequest,
    CheckoutSessionResponse,
    CheckoutSessionDetails,
    CheckoutSubmit,
)

__all__ = [
    "Product",
    "ProductVariant",
    "ProductImage",
    "ProductList",
    "ProductsQueryParams",
    "CartItem",
    "CartSummary",
    "CartItemCreate",
    "CartItemUpdate",
    "CartResponse",
    "PersistedCart",
    "CheckoutSessionRequest",
    "CheckoutSessionResponse",
    "CheckoutSessionDetails",
    "CheckoutSubmit",
]
