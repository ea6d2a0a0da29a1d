"""
Hosted checkout handoff.

The service asks the storefront backend for a Stripe checkout session and
hands back the hosted page URL; card data never passes through here.
"""
from collections import OrderedDict
from enum import Enum
from typing import Callable, Dict, List, Optional
import logging
import threading
from pydantic import ValidationError
from starlette.concurrency import run_in_threadpool
from storefront.config import settings
from storefront.core.api_client import BackendClient, backend_client
from storefront.core.exceptions import ApiError, CheckoutError, CheckoutInProgressError
from storefront.core.storage import KeyValueStorage
from storefront.schemas.cart import CartItem
from storefront.schemas.checkout import (
    CheckoutConfirmation,
    CheckoutSessionDetails,
    CheckoutSessionRequest,
    CheckoutSessionResponse,
)
from storefront.services.cart_store import CartStore

logger = logging.getLogger(__name__)

CREATE_SESSION_URL = "/api/stripe/create-checkout-session"
SESSION_URL = "/api/stripe/checkout-session/{session_id}"
CONFIRMED_KEY = "checkout-confirmed:{session_id}"


class CheckoutState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    REDIRECTING = "redirecting"
    FAILED = "failed"


class CheckoutFlow:
    """
    Client-side view of one cart's checkout: Idle -> Submitting -> Redirecting | Failed.

    Refusing a second submit while one is pending is a UI convention; it does
    not make session creation idempotent on the backend.
    """

    def __init__(self):
        self.state = CheckoutState.IDLE
        self.error: Optional[str] = None
        self.redirect_url: Optional[str] = None
        self._lock = threading.Lock()

    def begin(self):
        with self._lock:
            if self.state == CheckoutState.SUBMITTING:
                raise CheckoutInProgressError()
            self.state = CheckoutState.SUBMITTING
            self.error = None
            self.redirect_url = None

    def redirecting(self, url: str):
        self.state = CheckoutState.REDIRECTING
        self.redirect_url = url

    def failed(self, message: str):
        self.state = CheckoutState.FAILED
        self.error = message

    def reset(self):
        self.state = CheckoutState.IDLE
        self.error = None
        self.redirect_url = None


_flows: "OrderedDict[str, CheckoutFlow]" = OrderedDict()
_flows_lock = threading.Lock()


def get_checkout_flow(cart_id: str) -> CheckoutFlow:
    """Flow for a cart; the least recently used flows are dropped past CART_CACHE_SIZE"""
    with _flows_lock:
        flow = _flows.get(cart_id)
        if flow is None:
            flow = CheckoutFlow()
            _flows[cart_id] = flow
            while len(_flows) > settings.CART_CACHE_SIZE:
                _flows.popitem(last=False)
        else:
            _flows.move_to_end(cart_id)
        return flow


def reset_checkout_flows():
    with _flows_lock:
        _flows.clear()


class CheckoutService:
    """Creates and inspects hosted checkout sessions"""

    def __init__(self, client: Optional[BackendClient] = None):
        self.client = client or backend_client

    async def create_checkout_session(self, request: CheckoutSessionRequest) -> CheckoutSessionResponse:
        payload = request.model_dump(mode="json", by_alias=True, exclude_none=True)
        try:
            data = await self.client.post(CREATE_SESSION_URL, payload)
        except ApiError as e:
            logger.error(f"[CHECKOUT] Error creating checkout session: {e}")
            raise CheckoutError("Failed to create checkout session") from e

        try:
            session = CheckoutSessionResponse.model_validate(data or {})
        except ValidationError as e:
            logger.error(f"[CHECKOUT] Malformed checkout session response: {e}")
            raise CheckoutError("Failed to create checkout session") from e
        logger.info(
            f"[CHECKOUT] Session created: session_id={session.session_id}, "
            f"items={len(request.items)}"
        )
        return session

    async def checkout_with_stripe(
        self,
        items: List[CartItem],
        customer_email: Optional[str] = None,
        metadata: Optional[Dict[str, str]] = None,
        navigate: Optional[Callable[[str], None]] = None,
    ) -> str:
        """
        Create a checkout session and send the customer to its hosted page.

        Callers check that the cart is non-empty and the email looks valid.
        Returns the hosted checkout URL after passing it to `navigate`.
        Raises CheckoutError when the session cannot be created or the
        backend answers without a URL. One attempt, no retries.
        """
        session = await self.create_checkout_session(
            CheckoutSessionRequest(items=items, customer_email=customer_email, metadata=metadata)
        )
        if not session.url:
            logger.error(f"[CHECKOUT] No checkout URL in session response: session_id={session.session_id}")
            raise CheckoutError("No checkout URL received from server")

        if navigate is not None:
            navigate(session.url)
        return session.url

    async def get_checkout_session(self, session_id: str) -> CheckoutSessionDetails:
        data = await self.client.get(SESSION_URL.format(session_id=session_id))
        if not data:
            raise ApiError(f"Empty checkout session response for {session_id}")
        try:
            return CheckoutSessionDetails.model_validate(data)
        except ValidationError as e:
            raise ApiError(f"Malformed checkout session response for {session_id}", detail=str(e)) from e

    async def confirm_payment(
        self,
        session_id: str,
        cart_store: CartStore,
        storage: KeyValueStorage,
    ) -> CheckoutConfirmation:
        """
        Clear the cart once the session is paid.

        A session clears at most one cart, once; unpaid sessions leave the
        cart alone. If clearing fails the confirmation marker is removed
        again and the error propagates.
        """
        session = await self.get_checkout_session(session_id)
        if session.payment_status != "paid":
            logger.info(f"[CHECKOUT] Session {session_id} not paid yet: {session.payment_status}")
            return CheckoutConfirmation(session=session, cart_cleared=False)

        marker = CONFIRMED_KEY.format(session_id=session_id)
        first_confirmation = await run_in_threadpool(storage.set_if_absent, marker, {"cartKey": cart_store.key})
        if not first_confirmation:
            logger.info(f"[CHECKOUT] Session {session_id} already confirmed")
            return CheckoutConfirmation(session=session, cart_cleared=False)

        try:
            await run_in_threadpool(cart_store.clear_cart)
        except Exception:
            # Release the marker so the next confirmation retries the clear
            logger.error(f"[CHECKOUT] Could not clear {cart_store.key} for session {session_id}")
            await run_in_threadpool(storage.delete, marker)
            raise
        logger.info(f"[CHECKOUT] Payment confirmed: session_id={session_id}, cart={cart_store.key}")
        return CheckoutConfirmation(session=session, cart_cleared=True)


checkout_service = CheckoutService()
