"""
Custom exceptions for the storefront service
"""
from typing import Optional

GENERIC_PAYMENT_ERROR = "Error al procesar el pago. Por favor intenta de nuevo."


class StorefrontError(Exception):
    """Base exception for the storefront service"""

    def __init__(self, message: str, user_message: Optional[str] = None):
        super().__init__(message)
        self.user_message = user_message or "Ocurrió un error. Por favor intenta de nuevo."


class ApiError(StorefrontError):
    """Backend API request failed (network error or non-success response)"""

    def __init__(self, message: str, status_code: Optional[int] = None, detail=None):
        super().__init__(message)
        self.status_code = status_code
        self.detail = detail


class CheckoutError(StorefrontError):
    """Checkout session could not be started"""

    def __init__(self, message: str):
        super().__init__(message, GENERIC_PAYMENT_ERROR)


class ProductNotFoundError(StorefrontError):
    """Product does not exist in the catalog"""

    def __init__(self, product_id: str):
        super().__init__(
            f"Product not found: {product_id}",
            "El producto no está disponible.",
        )
        self.product_id = product_id


class CheckoutInProgressError(StorefrontError):
    """A checkout submission for this cart is still waiting on the backend"""

    def __init__(self):
        super().__init__(
            "Checkout already in progress",
            "Tu pago ya se está procesando.",
        )
