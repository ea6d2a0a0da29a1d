"""Cart store: owner of cart contents and the only mutation surface for them"""
from datetime import datetime, timezone
from collections import OrderedDict
from typing import Callable, List, Optional
import logging
import threading
from pydantic import ValidationError
from storefront.config import settings
from storefront.core.storage import KeyValueStorage, get_storage
from storefront.schemas.cart import CartItem, CartSummary, PersistedCart
from storefront.schemas.product import Product
from storefront.services import pricing

logger = logging.getLogger(__name__)

CartListener = Callable[[List[CartItem]], None]


class CartStore:
    """
    Line items plus the mini-cart drawer flag for one visitor.

    Every change to the item list is written to `storage` under `key` before
    the mutating call returns; the drawer flag lives in memory only and is
    closed whenever the store is rebuilt from storage.
    """

    def __init__(self, storage: KeyValueStorage, key: str):
        self.storage = storage
        self.key = key
        self.is_open = False
        self._items: List[CartItem] = []
        self._listeners: List[CartListener] = []
        self._lock = threading.RLock()

        self._rehydrate()
        self.subscribe(self._persist)

    # Persistence

    def _rehydrate(self):
        data = self.storage.get(self.key)
        if data is None:
            self._items = []
            return
        try:
            self._items = PersistedCart.model_validate(data).items
            logger.debug(f"[CART] Rehydrated {len(self._items)} items from {self.key}")
        except ValidationError as e:
            logger.warning(f"[CART] Discarding unreadable cart at {self.key}: {e}")
            self._items = []

    def _persist(self, items: List[CartItem]):
        payload = PersistedCart(items=items).model_dump(mode="json", by_alias=True)
        self.storage.set(self.key, payload)

    def reload(self):
        """Replace in-memory items with what storage holds now"""
        with self._lock:
            self._rehydrate()

    def subscribe(self, listener: CartListener) -> Callable[[], None]:
        """Register an on-change hook; returns a function that removes it"""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_items(self, items: List[CartItem]):
        # A failing listener (e.g. storage down) aborts the mutation
        snapshot = list(items)
        for listener in list(self._listeners):
            listener(snapshot)
        self._items = items

    # Item management

    @property
    def items(self) -> List[CartItem]:
        return list(self._items)

    def add_item(self, product: Product, quantity: int = 1, selected_variant_id: Optional[str] = None):
        """Add product to cart; if it is already there, increase its quantity"""
        if quantity <= 0:
            logger.warning(f"[CART] Ignoring add of {product.id} with quantity={quantity}")
            return
        with self._lock:
            existing = self._find(product.id)
            if existing is not None:
                updated = [
                    item.model_copy(update={"quantity": item.quantity + quantity})
                    if item.product.id == product.id else item
                    for item in self._items
                ]
                self._set_items(updated)
                logger.info(f"[CART] {self.key}: product={product.id}, new_qty={existing.quantity + quantity}")
                return

            new_item = CartItem(
                product=product,
                quantity=quantity,
                selected_variant_id=selected_variant_id,
                added_at=datetime.now(timezone.utc),
            )
            self._set_items(self._items + [new_item])
            logger.info(f"[CART] {self.key}: added product={product.id}, qty={quantity}")

    def remove_item(self, product_id: str):
        """Remove item completely; absent items are ignored"""
        with self._lock:
            if self._find(product_id) is None:
                return
            self._set_items([item for item in self._items if item.product.id != product_id])
            logger.info(f"[CART] {self.key}: removed product={product_id}")

    def update_quantity(self, product_id: str, quantity: int):
        """Replace the quantity; zero or less removes the item"""
        with self._lock:
            if quantity <= 0:
                self.remove_item(product_id)
                return
            if self._find(product_id) is None:
                return
            self._set_items([
                item.model_copy(update={"quantity": quantity}) if item.product.id == product_id else item
                for item in self._items
            ])
            logger.info(f"[CART] {self.key}: product={product_id}, qty={quantity}")

    def clear_cart(self):
        with self._lock:
            removed = len(self._items)
            self._set_items([])
            logger.info(f"[CART] Cleared {self.key}: items_removed={removed}")

    # Drawer state

    def toggle_cart(self) -> bool:
        self.is_open = not self.is_open
        return self.is_open

    def open_cart(self):
        self.is_open = True

    def close_cart(self):
        self.is_open = False

    # Reads

    def _find(self, product_id: str) -> Optional[CartItem]:
        return next((item for item in self._items if item.product.id == product_id), None)

    def get_item_count(self) -> int:
        return pricing.get_item_count(self._items)

    def has_item(self, product_id: str) -> bool:
        return self._find(product_id) is not None

    def get_item(self, product_id: str) -> Optional[CartItem]:
        return self._find(product_id)

    def get_subtotal(self) -> float:
        return pricing.get_subtotal(self._items)

    def get_summary(self) -> CartSummary:
        return pricing.calculate_summary(self._items)

    def get_total(self) -> float:
        return self.get_summary().total


class CartStoreRegistry:
    """
    CartStore lookup by cart id.

    Storage is the source of truth: every `get` reloads the items, so writes
    from other processes sharing the store are picked up. At most `max_size`
    stores are kept; evicting one only forgets its drawer flag.
    """

    def __init__(
        self,
        namespace: Optional[str] = None,
        storage: Optional[KeyValueStorage] = None,
        max_size: Optional[int] = None,
    ):
        self.namespace = namespace or settings.CART_STORAGE_KEY
        self.max_size = max_size or settings.CART_CACHE_SIZE
        self._storage = storage
        self._stores: "OrderedDict[str, CartStore]" = OrderedDict()
        self._lock = threading.Lock()

    @property
    def storage(self) -> KeyValueStorage:
        return self._storage or get_storage()

    def key_for(self, cart_id: str) -> str:
        return f"{self.namespace}:{cart_id}"

    def __len__(self) -> int:
        return len(self._stores)

    def get(self, cart_id: str) -> CartStore:
        with self._lock:
            store = self._stores.get(cart_id)
            if store is None:
                store = CartStore(self.storage, self.key_for(cart_id))
                self._stores[cart_id] = store
                while len(self._stores) > self.max_size:
                    self._stores.popitem(last=False)
                return store
            self._stores.move_to_end(cart_id)
        store.reload()
        return store

    def reset(self):
        """Forget in-process stores and their drawer flags"""
        with self._lock:
            self._stores.clear()


cart_stores = CartStoreRegistry()
