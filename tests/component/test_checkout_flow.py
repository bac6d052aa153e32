"""Component tests: the reconciler driving the real API over an in-process transport.

The FastAPI app runs with real services and repositories on top of the
in-memory DynamoDB fake, so requests travel the full client -> HTTP ->
service -> repository path.
"""

from decimal import Decimal
from pathlib import Path

import httpx
import pytest
import pytest_asyncio

from storefront_cart_service.client.cart_reconciler import CartReconciler
from storefront_cart_service.client.local_storage import LocalStorage
from storefront_cart_service.client.storefront_client import StorefrontClient
from storefront_cart_service.handlers.api_handler import create_app
from storefront_cart_service.models.catalog_models import Dish
from storefront_cart_service.repositories.storefront_repositories import (
    CartRepository,
    CatalogRepository,
    OrderRepository,
)
from storefront_cart_service.services.cart_service import CartService
from storefront_cart_service.services.catalog_service import CatalogService
from storefront_cart_service.services.order_service import OrderService

BASE_URL = "http://storefront.test"


@pytest.fixture
def app(fake_dynamodb, sample_dishes: list[Dish]):
    """Create the real app backed by in-memory tables with a seeded menu."""
    catalog_repository = CatalogRepository(dynamodb_resource=fake_dynamodb, table_name="dishes")
    for dish in sample_dishes:
        catalog_repository.save_dish(dish)
    catalog_repository.save_dish(
        Dish(id="dish_off", name="Retired Pie", price=Decimal("3.00"), is_available=False)
    )

    return create_app(
        cart_service=CartService(CartRepository(dynamodb_resource=fake_dynamodb, table_name="carts")),
        order_service=OrderService(OrderRepository(dynamodb_resource=fake_dynamodb, table_name="orders")),
        catalog_service=CatalogService(catalog_repository),
        api_keys=["admin-key"],
    )


@pytest.fixture
def storefront_client(app) -> StorefrontClient:
    """Create a client that calls the app in-process."""
    return StorefrontClient(base_url=BASE_URL, transport=httpx.ASGITransport(app=app))


@pytest_asyncio.fixture
async def reconciler(storefront_client: StorefrontClient, tmp_path: Path) -> CartReconciler:
    """Create a reconciler with the menu loaded."""
    reconciler = CartReconciler(client=storefront_client, storage=LocalStorage(tmp_path / "browser"))
    assert await reconciler.refresh_catalog() is True
    return reconciler


@pytest.mark.component
class TestCheckoutFlow:
    """End-to-end cart and checkout scenarios."""

    @pytest.mark.asyncio
    async def test_menu_lists_only_available_dishes(self, reconciler: CartReconciler) -> None:
        """Test that the catalog snapshot excludes unavailable dishes and is sorted."""
        assert [dish.name for dish in reconciler.catalog] == [
            "Strawbeary Jam",
            "Strawbeary Latte",
            "Strawbeary Sparkle",
        ]

    @pytest.mark.asyncio
    async def test_mutations_are_mirrored_on_server(
        self, reconciler: CartReconciler, storefront_client: StorefrontClient
    ) -> None:
        """Test that the server mirror converges to the local cart."""
        reconciler.add_item("Strawbeary Jam")
        await reconciler.wait_for_pending_pushes()
        reconciler.add_item("Strawbeary Jam")
        await reconciler.wait_for_pending_pushes()
        reconciler.add_item("Strawbeary Latte")
        await reconciler.wait_for_pending_pushes()
        reconciler.set_quantity("Strawbeary Latte", "3")
        await reconciler.wait_for_pending_pushes()

        mirrored = await storefront_client.get_cart(reconciler.session_id)

        assert mirrored.items == reconciler.cart.items
        assert mirrored.total == Decimal("34.45")

    @pytest.mark.asyncio
    async def test_checkout_places_order_and_clears_cart(
        self, reconciler: CartReconciler, storefront_client: StorefrontClient
    ) -> None:
        """Test the full checkout path from local cart to order history."""
        reconciler.add_item("Strawbeary Jam")
        await reconciler.wait_for_pending_pushes()
        reconciler.add_item("Strawbeary Jam")
        await reconciler.wait_for_pending_pushes()

        order = await reconciler.checkout()
        await reconciler.wait_for_pending_pushes()

        assert order is not None
        assert order.id.startswith("ord_")
        assert order.total == Decimal("11.98")
        assert order.status.value == "pending"
        assert reconciler.cart.items == []

        mirrored = await storefront_client.get_cart(reconciler.session_id)
        assert mirrored.items == []

        history = await reconciler.order_history()
        assert [o.id for o in history] == [order.id]
        assert history[0].items[0].quantity == 2

    @pytest.mark.asyncio
    async def test_order_history_is_newest_first(self, reconciler: CartReconciler) -> None:
        """Test that consecutive orders are listed newest first."""
        placed = []
        for name in ["Strawbeary Jam", "Strawbeary Latte"]:
            reconciler.add_item(name)
            placed.append(await reconciler.checkout())
            await reconciler.wait_for_pending_pushes()

        history = await reconciler.order_history()

        assert [o.id for o in history] == [placed[1].id, placed[0].id]

    @pytest.mark.asyncio
    async def test_new_device_recovers_cart_from_server(
        self, reconciler: CartReconciler, storefront_client: StorefrontClient, tmp_path: Path
    ) -> None:
        """Test that an emptied local store is refilled from the mirror for the same session."""
        reconciler.add_item("Strawbeary Sparkle")
        await reconciler.wait_for_pending_pushes()

        fresh_storage = LocalStorage(tmp_path / "other-browser")
        fresh_storage.set_item("storefront_session_id", reconciler.session_id)
        recovered = CartReconciler(client=storefront_client, storage=fresh_storage)

        assert recovered.cart.items == []
        assert await recovered.recover() is True
        assert [line.dish_name for line in recovered.cart.items] == ["Strawbeary Sparkle"]

    @pytest.mark.asyncio
    async def test_invalid_order_is_rejected_without_writing(
        self, storefront_client: StorefrontClient, reconciler: CartReconciler
    ) -> None:
        """Test that an empty order is refused and history stays empty."""
        async with httpx.AsyncClient(
            transport=storefront_client.transport, base_url=BASE_URL
        ) as http:
            response = await http.post(
                "/orders", json={"sessionId": reconciler.session_id, "items": [], "total": 0}
            )

        assert response.status_code == 400
        assert response.json() == {"message": "items must be a non-empty list"}
        assert await reconciler.order_history() == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("path", "body"),
        [
            ("/cart", {"sessionId": "sess_big", "items": [{"dishName": "Jam", "price": 1, "quantity": 10**38}]}),
            ("/cart", {"sessionId": "sess_big", "items": [{"dishName": "Jam", "price": 1e300, "quantity": 1}]}),
            (
                "/orders",
                {"sessionId": "sess_big", "items": [{"dishName": "Jam", "price": 1, "quantity": 1}], "total": 1e300},
            ),
        ],
    )
    async def test_oversized_numbers_are_rejected_with_400(
        self, storefront_client: StorefrontClient, path: str, body: dict
    ) -> None:
        """Test that numbers DynamoDB cannot store are refused before any write."""
        async with httpx.AsyncClient(
            transport=storefront_client.transport, base_url=BASE_URL
        ) as http:
            response = await http.post(path, json=body)

        assert response.status_code == 400
        assert "message" in response.json()
        assert await storefront_client.list_orders("sess_big") == []
        cart = await storefront_client.get_cart("sess_big")
        assert cart is not None and cart.items == []
