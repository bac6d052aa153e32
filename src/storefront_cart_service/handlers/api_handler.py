"""FastAPI application for the storefront cart, order and menu endpoints."""

import logging
from typing import Any

from fastapi import Body, Depends, FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from storefront_cart_service.auth.api_dependencies import require_admin_key
from storefront_cart_service.auth.api_key_validator import APIKeyValidator
from storefront_cart_service.exceptions import StoreFailure, ValidationError
from storefront_cart_service.models.cart_models import Cart, Order
from storefront_cart_service.models.catalog_models import Dish
from storefront_cart_service.services.cart_service import CartService
from storefront_cart_service.services.catalog_service import CatalogService
from storefront_cart_service.services.order_service import OrderService

logger = logging.getLogger(__name__)


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str


def create_app(
    cart_service: CartService,
    order_service: OrderService,
    catalog_service: CatalogService,
    api_keys: list[str],
    cors_origins: list[str] | None = None,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        cart_service: Service mirroring per-session carts
        order_service: Service committing and listing orders
        catalog_service: Service listing and creating dishes
        api_keys: Valid admin API keys for catalog writes
        cors_origins: Allowed browser origins (defaults to any origin)

    Returns:
        Configured FastAPI application
    """
    app = FastAPI(
        title="Storefront Cart Service",
        description="Session carts, order placement and menu for the storefront",
        version="1.0.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins or ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Store services in app state for access in route handlers
    app.state.cart_service = cart_service
    app.state.order_service = order_service
    app.state.catalog_service = catalog_service
    app.state.api_key_validator = APIKeyValidator(api_keys=api_keys)

    @app.exception_handler(ValidationError)
    async def handle_validation_error(_request: Request, exc: ValidationError) -> JSONResponse:
        logger.warning(f"Rejected request: {exc.message}")
        return JSONResponse(status_code=400, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def handle_malformed_body(_request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.warning(f"Malformed request body: {len(exc.errors())} errors")
        return JSONResponse(status_code=400, content={"message": "Request body must be a JSON object"})

    @app.exception_handler(StoreFailure)
    async def handle_store_failure(request: Request, exc: StoreFailure) -> JSONResponse:
        logger.error(f"Store failure on {request.method} {request.url.path}: {exc.message}")
        return JSONResponse(status_code=500, content={"message": exc.message})

    def validate_api_key(x_api_key: str | None = Header(None)) -> str:
        """Dependency to validate the admin API key."""
        return require_admin_key(x_api_key=x_api_key, validator=app.state.api_key_validator)

    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health_check() -> HealthResponse:
        """Health check endpoint."""
        return HealthResponse(status="healthy")

    @app.get("/menu", response_model=list[Dish], tags=["Menu"])
    async def list_menu() -> list[Dish]:
        """List available dishes sorted by name."""
        dishes: list[Dish] = await app.state.catalog_service.list_menu()
        return dishes

    @app.post("/menu", response_model=Dish, status_code=201, tags=["Menu"])
    async def create_dish(
        payload: dict[str, Any] = Body(...),
        _api_key: str = Depends(validate_api_key),
    ) -> Dish:
        """Create a dish (admin only)."""
        dish: Dish = await app.state.catalog_service.create_dish(payload)
        return dish

    @app.get("/cart/{session_id}", response_model=Cart, tags=["Cart"])
    async def get_cart(session_id: str) -> Cart:
        """Get the mirrored cart for a session.

        Args:
            session_id: Client session identifier

        Returns:
            The stored cart, with no items if the session has never saved one
        """
        cart: Cart = await app.state.cart_service.get_cart(session_id=session_id)
        return cart

    @app.post("/cart", response_model=Cart, tags=["Cart"])
    async def save_cart(payload: dict[str, Any] = Body(...)) -> Cart:
        """Replace the cart for a session with the full item list in the payload.

        Args:
            payload: ``{sessionId, items}``

        Returns:
            The stored cart
        """
        cart: Cart = await app.state.cart_service.save_cart(
            session_id=payload.get("sessionId"),
            items=payload.get("items"),
        )
        return cart

    @app.post("/orders", response_model=Order, status_code=201, tags=["Orders"])
    async def place_order(payload: dict[str, Any] = Body(...)) -> Order:
        """Place an order from a cart snapshot.

        The total is taken from the payload as computed by the client.

        Args:
            payload: ``{sessionId, items, total}``

        Returns:
            The created order with status ``pending``
        """
        order: Order = await app.state.order_service.place_order(
            session_id=payload.get("sessionId"),
            items=payload.get("items"),
            total=payload.get("total"),
        )
        return order

    @app.get("/orders/{session_id}", response_model=list[Order], tags=["Orders"])
    async def list_orders(session_id: str) -> list[Order]:
        """List orders for a session, newest first."""
        orders: list[Order] = await app.state.order_service.list_orders(session_id=session_id)
        return orders

    return app
