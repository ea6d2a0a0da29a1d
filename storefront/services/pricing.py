"""
Cart pricing.

Stateless: the summary is recomputed from the item list on every call.
"""
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable
from storefront.schemas.cart import CartItem, CartSummary
from storefront.services.product_service import get_product_price

TAX_RATE = 0.16  # IVA
FREE_SHIPPING_THRESHOLD = 1000.0
FLAT_SHIPPING = 150.0


def round_money(amount: float) -> float:
    """Round to cents, halves away from zero"""
    return float(Decimal(str(amount)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def get_item_count(items: Iterable[CartItem]) -> int:
    return sum(item.quantity for item in items)


def get_line_total(item: CartItem) -> float:
    return get_product_price(item.product) * item.quantity


def get_subtotal(items: Iterable[CartItem]) -> float:
    return sum((get_line_total(item) for item in items), 0.0)


def calculate_tax(subtotal: float) -> float:
    return subtotal * TAX_RATE


def calculate_shipping(subtotal: float) -> float:
    if subtotal == 0:
        return 0.0
    if subtotal >= FREE_SHIPPING_THRESHOLD:
        return 0.0
    return FLAT_SHIPPING


def calculate_discount(subtotal: float) -> float:
    # Coupon codes are not applied yet; the field is kept in the summary.
    return 0.0


def calculate_summary(items: Iterable[CartItem]) -> CartSummary:
    items = list(items)
    subtotal = get_subtotal(items)
    tax = calculate_tax(subtotal)
    shipping = calculate_shipping(subtotal)
    discount = calculate_discount(subtotal)
    total = subtotal + tax + shipping - discount

    return CartSummary(
        subtotal=round_money(subtotal),
        tax=round_money(tax),
        shipping=round_money(shipping),
        discount=round_money(discount),
        total=round_money(total),
        item_count=get_item_count(items),
    )
