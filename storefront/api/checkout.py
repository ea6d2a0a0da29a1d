"""Checkout endpoints: hosted Stripe checkout handoff and return pages"""
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import RedirectResponse
from typing import Optional
import logging
from storefront.api.deps import (
    get_cart_id,
    get_cart_store,
    get_checkout_service,
    get_kv_storage,
)
from storefront.config import settings
from storefront.core.exceptions import (
    ApiError,
    CheckoutError,
    CheckoutInProgressError,
    GENERIC_PAYMENT_ERROR,
)
from storefront.core.rate_limit import limiter
from storefront.core.storage import KeyValueStorage
from storefront.schemas.checkout import CheckoutConfirmation, CheckoutErrorResponse, CheckoutSubmit
from storefront.services.cart_store import CartStore
from storefront.services.checkout_service import CheckoutService, get_checkout_flow

router = APIRouter()
logger = logging.getLogger(__name__)


@router.post(
    "",
    status_code=status.HTTP_303_SEE_OTHER,
    responses={
        400: {"model": CheckoutErrorResponse},
        409: {"model": CheckoutErrorResponse},
        502: {"model": CheckoutErrorResponse},
    },
)
@limiter.limit(settings.CHECKOUT_RATE_LIMIT)
async def submit_checkout(
    request: Request,
    form: CheckoutSubmit,
    cart_id: str = Depends(get_cart_id),
    store: CartStore = Depends(get_cart_store),
    checkout: CheckoutService = Depends(get_checkout_service),
):
    """
    Start payment for the current cart.
    Redirects (303) to the hosted checkout page on success.
    """
    if not form.email or "@" not in form.email:
        raise HTTPException(status_code=400, detail="Por favor ingresa un email válido")

    items = store.items
    if not items:
        raise HTTPException(status_code=400, detail="Tu carrito está vacío")

    flow = get_checkout_flow(cart_id)
    try:
        flow.begin()
    except CheckoutInProgressError as e:
        raise HTTPException(status_code=409, detail=e.user_message)

    logger.info(f"[CHECKOUT] Submitting cart {cart_id}: items={len(items)}, total={store.get_total()}")
    try:
        url = await checkout.checkout_with_stripe(
            items,
            customer_email=form.email,
            metadata={
                "deliveryMethod": form.delivery_method,
                "firstName": form.first_name,
                "lastName": form.last_name,
                "phone": form.phone,
            },
            navigate=flow.redirecting,
        )
    except CheckoutError as e:
        flow.failed(e.user_message)
        logger.error(f"[CHECKOUT] Checkout failed for cart {cart_id}: {e}")
        raise HTTPException(status_code=502, detail=GENERIC_PAYMENT_ERROR)
    except Exception:
        flow.failed(GENERIC_PAYMENT_ERROR)
        logger.exception(f"[CHECKOUT] Unexpected error submitting cart {cart_id}")
        raise

    return RedirectResponse(url, status_code=status.HTTP_303_SEE_OTHER)


@router.get(
    "/success",
    response_model=CheckoutConfirmation,
    responses={400: {"model": CheckoutErrorResponse}, 502: {"model": CheckoutErrorResponse}},
)
async def checkout_success(
    session_id: Optional[str] = Query(None),
    store: CartStore = Depends(get_cart_store),
    storage: KeyValueStorage = Depends(get_kv_storage),
    checkout: CheckoutService = Depends(get_checkout_service),
):
    """Return page after the hosted checkout; clears the cart once payment is confirmed"""
    if not session_id:
        raise HTTPException(status_code=400, detail="No se encontró la sesión de pago")

    try:
        return await checkout.confirm_payment(session_id, store, storage)
    except ApiError as e:
        logger.error(f"[CHECKOUT] Error fetching session {session_id}: {e}")
        raise HTTPException(status_code=502, detail="Error al verificar el pago")


@router.get("/cancel")
def checkout_cancel(cart_id: str = Depends(get_cart_id)):
    """Customer backed out of the hosted page; cart is kept as is"""
    get_checkout_flow(cart_id).reset()
    return {
        "status": "cancelled",
        "message": "El pago fue cancelado. Tu carrito sigue disponible.",
        "store_url": f"{settings.FRONTEND_URL}/tienda/cart",
    }
