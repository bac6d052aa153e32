"""HTTP client for the storefront API, used by the cart reconciler."""

import logging
from decimal import Decimal

import httpx
from pydantic import TypeAdapter

from storefront_cart_service.models.cart_models import Cart, CartLine, Order
from storefront_cart_service.models.catalog_models import Dish

logger = logging.getLogger(__name__)

_dishes = TypeAdapter(list[Dish])
_orders = TypeAdapter(list[Order])
_cart_lines = TypeAdapter(list[CartLine])


class StorefrontClient:
    """Async HTTP client for the menu, cart and order endpoints.

    Every method returns None (or False for pushes) on expected failures such
    as HTTP errors, network errors or unparseable responses (ValueError covers
    bad JSON and pydantic validation errors), and logs the
    cause. Callers decide whether a failure matters.
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the storefront client.

        Args:
            base_url: Base URL of the storefront API (e.g., "http://localhost:8001")
            timeout_seconds: Per-request timeout
            transport: Optional httpx transport (e.g., ASGITransport to call an app in-process)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.transport = transport

    def _http(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout_seconds, transport=self.transport)

    async def get_menu(self) -> list[Dish] | None:
        """Fetch the available dishes.

        Returns:
            List of dishes sorted by name, or None on failure
        """
        try:
            async with self._http() as client:
                response = await client.get(f"{self.base_url}/menu")
                response.raise_for_status()
                return _dishes.validate_python(response.json())

        except (httpx.HTTPStatusError, httpx.RequestError, ValueError) as e:
            logger.error(f"Failed to fetch menu: {e}")
            return None

    async def get_cart(self, session_id: str) -> Cart | None:
        """Fetch the server's mirror of a session's cart.

        Args:
            session_id: Client session identifier

        Returns:
            The mirrored cart (empty if none stored), or None on failure
        """
        try:
            async with self._http() as client:
                response = await client.get(f"{self.base_url}/cart/{session_id}")
                response.raise_for_status()
                return Cart.model_validate(response.json())

        except (httpx.HTTPStatusError, httpx.RequestError, ValueError) as e:
            logger.error(f"Failed to fetch cart for session {session_id}: {e}")
            return None

    async def push_cart(self, cart: Cart) -> bool:
        """Replace the server's mirror with the full cart.

        Args:
            cart: Complete current cart

        Returns:
            True if the server stored the cart, False otherwise
        """
        try:
            async with self._http() as client:
                response = await client.post(
                    f"{self.base_url}/cart",
                    json=cart.model_dump(mode="json", by_alias=True),
                )
                response.raise_for_status()
                return True

        except (httpx.HTTPStatusError, httpx.RequestError) as e:
            logger.warning(f"Failed to sync cart with server for session {cart.session_id}: {e}")
            return False

    async def place_order(
        self, session_id: str, items: list[CartLine], total: Decimal
    ) -> Order | None:
        """Submit a cart snapshot as an order.

        Args:
            session_id: Client session identifier
            items: Snapshot of the cart lines
            total: Client-computed order total

        Returns:
            The created order, or None if the order was not accepted
        """
        payload = {
            "sessionId": session_id,
            "items": _cart_lines.dump_python(items, mode="json", by_alias=True),
            "total": float(total),
        }
        try:
            async with self._http() as client:
                response = await client.post(f"{self.base_url}/orders", json=payload)
                response.raise_for_status()
                return Order.model_validate(response.json())

        except (httpx.HTTPStatusError, httpx.RequestError, ValueError) as e:
            logger.error(f"Failed to place order for session {session_id}: {e}")
            return None

    async def list_orders(self, session_id: str) -> list[Order] | None:
        """Fetch order history for a session, newest first.

        Args:
            session_id: Client session identifier

        Returns:
            List of orders, or None on failure
        """
        try:
            async with self._http() as client:
                response = await client.get(f"{self.base_url}/orders/{session_id}")
                response.raise_for_status()
                return _orders.validate_python(response.json())

        except (httpx.HTTPStatusError, httpx.RequestError, ValueError) as e:
            logger.error(f"Failed to fetch orders for session {session_id}: {e}")
            return None
