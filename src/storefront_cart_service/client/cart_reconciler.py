"""Client-side cart reconciler.

The client owns the in-progress cart. Each effective mutation goes through
the reducer, is written to local storage synchronously, and is then pushed to
the server's cart mirror as a full-state replace in a background task. Pushes
are never awaited or retried. A failed push only leaves the mirror behind
until the next successful one.
"""

import asyncio
import logging
from decimal import Decimal
from typing import Any

from storefront_cart_service.client.cart_reducer import (
    AddItem,
    CartMutation,
    ClearCart,
    RemoveItem,
    SetQuantity,
    apply,
)
from storefront_cart_service.client.local_storage import LocalStorage
from storefront_cart_service.client.storefront_client import StorefrontClient
from storefront_cart_service.models.cart_models import Cart, Order
from storefront_cart_service.models.catalog_models import Dish
from storefront_cart_service.observability.metrics import record_cart_push_failure

logger = logging.getLogger(__name__)


class CartReconciler:
    """Keeps the local cart and the server's mirror convergent.

    Mutation methods must be called from a running event loop because they
    schedule the remote push as a task.
    """

    def __init__(self, client: StorefrontClient, storage: LocalStorage) -> None:
        """Initialize the reconciler from local storage.

        Args:
            client: HTTP client for the storefront API
            storage: Local storage holding the cart and session id
        """
        self.client = client
        self.storage = storage
        self.session_id = storage.load_session_id()
        self.catalog: list[Dish] = []
        self._cart = storage.load_cart(self.session_id)
        self._pending_pushes: set[asyncio.Task[None]] = set()
        self._checkout_in_flight = False

    @property
    def cart(self) -> Cart:
        """Current cart."""
        return self._cart

    @property
    def count(self) -> int:
        """Number of units in the cart."""
        return self._cart.count

    @property
    def total(self) -> Decimal:
        """Current cart total, recomputed from the lines."""
        return self._cart.total

    @property
    def checkout_in_flight(self) -> bool:
        """Whether a checkout request is awaiting the server."""
        return self._checkout_in_flight

    async def refresh_catalog(self) -> bool:
        """Fetch the menu and replace the catalog snapshot.

        Returns:
            True if the snapshot was refreshed, False if the previous one was kept
        """
        dishes = await self.client.get_menu()
        if dishes is None:
            logger.error("Unable to load menu, keeping previous catalog snapshot")
            return False
        self.catalog = dishes
        return True

    async def recover(self) -> bool:
        """Adopt the server's mirror when the local cart is empty.

        A non-empty local cart always wins over the mirror.

        Returns:
            True if the local cart was replaced by the mirror
        """
        if self._cart.items:
            return False

        mirrored = await self.client.get_cart(self.session_id)
        if mirrored is None or not mirrored.items:
            return False

        self._cart = Cart(session_id=self.session_id, items=mirrored.items)
        self.storage.save_cart(self._cart)
        logger.info(f"Recovered {len(mirrored.items)} cart lines from server")
        return True

    def dispatch(self, mutation: CartMutation) -> Cart:
        """Apply a mutation, persist locally, and schedule a remote push.

        Args:
            mutation: The cart mutation to apply

        Returns:
            The current cart after the mutation
        """
        updated = apply(self._cart, mutation, self.catalog)
        if updated is self._cart:
            return self._cart

        self.storage.save_cart(updated)
        self._cart = updated
        self._schedule_push(updated)
        return updated

    def add_item(self, dish_name: str) -> Cart:
        return self.dispatch(AddItem(dish_name))

    def remove_item(self, dish_name: str) -> Cart:
        return self.dispatch(RemoveItem(dish_name))

    def set_quantity(self, dish_name: str, raw_value: Any) -> Cart:
        return self.dispatch(SetQuantity(dish_name, raw_value))

    def clear(self) -> Cart:
        return self.dispatch(ClearCart())

    async def checkout(self) -> Order | None:
        """Place an order for the current cart.

        Only one checkout runs at a time; a call made while another is in
        flight is discarded. The cart is cleared only after the server has
        accepted the order, so a failed checkout can simply be retried.

        Returns:
            The created order, or None if nothing was ordered
        """
        if not self._cart.items:
            return None
        if self._checkout_in_flight:
            logger.warning("Checkout already in progress, ignoring repeated request")
            return None

        self._checkout_in_flight = True
        snapshot = self._cart
        try:
            order = await self.client.place_order(
                session_id=self.session_id,
                items=list(snapshot.items),
                total=snapshot.total,
            )
        finally:
            self._checkout_in_flight = False

        if order is None:
            logger.error("Failed to place order, cart kept for retry")
            return None

        self.clear()
        logger.info(f"Order {order.id} placed")
        return order

    async def order_history(self) -> list[Order] | None:
        """Fetch this session's orders, newest first."""
        return await self.client.list_orders(self.session_id)

    async def wait_for_pending_pushes(self) -> None:
        """Wait until every scheduled cart push has finished."""
        while self._pending_pushes:
            await asyncio.gather(*list(self._pending_pushes))

    def _schedule_push(self, cart: Cart) -> None:
        task = asyncio.get_running_loop().create_task(self._push(cart))
        self._pending_pushes.add(task)
        task.add_done_callback(self._pending_pushes.discard)

    async def _push(self, cart: Cart) -> None:
        try:
            pushed = await self.client.push_cart(cart)
        except Exception as e:
            # Background task: nothing awaits it, so failures stop here
            logger.exception(f"Unexpected error while syncing cart: {e}")
            record_cart_push_failure("unexpected")
            return

        if not pushed:
            record_cart_push_failure("http_error")
