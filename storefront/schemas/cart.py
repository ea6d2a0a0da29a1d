"""Cart schemas"""
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, List
from storefront.schemas.product import CamelModel, Product


class CartItem(CamelModel):
    product: Product
    quantity: int = Field(..., ge=1)
    selected_variant_id: Optional[str] = None  # carried through, not priced
    added_at: datetime


class PersistedCart(CamelModel):
    """Shape written to storage. The drawer flag is never part of it."""
    items: List[CartItem] = Field(default_factory=list)


class CartSummary(CamelModel):
    subtotal: float = 0.0
    tax: float = 0.0
    shipping: float = 0.0
    discount: float = 0.0
    total: float = 0.0
    item_count: int = 0


class CartItemCreate(CamelModel):
    product_id: str = Field(..., min_length=1)
    quantity: int = Field(default=1, ge=1)
    selected_variant_id: Optional[str] = None


class CartItemUpdate(BaseModel):
    # zero or negative removes the item
    quantity: int


class CartItemResponse(CartItem):
    unit_price: float = 0.0
    subtotal: float = 0.0  # unit_price * quantity


class CartResponse(CamelModel):
    items: List[CartItemResponse] = []
    is_open: bool = False
    summary: CartSummary


class CartDrawerResponse(CamelModel):
    is_open: bool
