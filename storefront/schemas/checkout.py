"""Checkout schemas (hosted Stripe checkout session contract)"""
from pydantic import Field
from typing import Optional, Dict, List, Literal
from storefront.schemas.product import CamelModel
from storefront.schemas.cart import CartItem


class CheckoutSessionRequest(CamelModel):
    items: List[CartItem]
    customer_email: Optional[str] = None
    metadata: Optional[Dict[str, str]] = None


class CheckoutSessionResponse(CamelModel):
    session_id: Optional[str] = None
    url: Optional[str] = None


class CheckoutSessionDetails(CamelModel):
    id: str
    payment_status: str
    customer_email: Optional[str] = None
    amount_total: Optional[float] = None
    currency: Optional[str] = None


class CheckoutSubmit(CamelModel):
    """Checkout form fields posted by the storefront page"""
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    phone: str = ""
    delivery_method: Literal["ship", "pickup"] = "ship"


class CheckoutConfirmation(CamelModel):
    session: CheckoutSessionDetails
    cart_cleared: bool = False


class CheckoutErrorResponse(CamelModel):
    detail: str = Field(..., description="Localized user-facing message")
